"""Simulation Engine - unified entry point for the lab.

This module provides the SimulationEngine class that owns the engine
context and exposes the command surface used by input sources (UI
controls, the REST adapter, tests) and the read-only state snapshot
used by renderers.

Usage:
    from isolation_lab.application import SimulationEngine

    engine = SimulationEngine()
    engine.begin("A")
    engine.update("A")
    engine.select_plain("B")        # sees the committed stock
    engine.set_isolation_level("READ-UNCOMMITTED")  # rejected: A is active
    engine.commit("A")

    state = engine.snapshot()
    events = engine.events()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from isolation_lab.application.context import EngineContext
from isolation_lab.application.executor import StatementExecutor, StatementResult
from isolation_lab.application.scheduler import WakeUpScheduler
from isolation_lab.domain.entities import EngineEvent, LockRequest, Row, Session
from isolation_lab.domain.errors import IsolationChangeRejected, UnknownRow
from isolation_lab.domain.value_objects import (
    SYSTEM_SOURCE,
    EventCategory,
    IsolationLevel,
    RowId,
    StatementType,
)
from isolation_lab.infrastructure.config import SimulationConfig
from isolation_lab.infrastructure.logging import get_logger
from isolation_lab.infrastructure.metrics import MetricsRegistry, get_metrics
from isolation_lab.ports.outbound import EventSink

logger = get_logger(__name__)


@dataclass(frozen=True)
class EngineSnapshot:
    """Read-only view of the engine state after a command."""

    isolation_level: IsolationLevel
    rows: tuple[Row, ...]
    sessions: dict[str, dict[str, Any]]
    locks: tuple[dict[str, Any], ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "isolation_level": self.isolation_level.value,
            "rows": [row.to_dict() for row in self.rows],
            "sessions": self.sessions,
            "locks": list(self.locks),
        }


class SimulationEngine:
    """Two-session transaction isolation and row locking simulator.

    Every command runs to completion synchronously, then a wake-up
    scheduler pass resumes any waiting statement the command unblocked.
    Errors never escape a statement command; they become events.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        metrics: MetricsRegistry | None = None,
        sinks: Iterable[EventSink] = (),
        seed: Iterable[Row] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Simulation settings. Defaults apply if None.
            metrics: Metrics registry. The global registry if None.
            sinks: Event sinks that receive every event.
            seed: Rows to seed the table with. The products seed if None.
        """
        config = config or SimulationConfig()
        self._ctx = EngineContext.create(
            metrics=metrics or get_metrics(),
            isolation_level=config.default_isolation_level,
            seed=seed,
            event_log_capacity=config.event_log_capacity,
            default_target_row=config.default_target_row,
        )
        self._ctx.sinks.extend(sinks)
        self._executor = StatementExecutor(self._ctx)
        self._scheduler = WakeUpScheduler(self._ctx, self._executor.resume)

    @property
    def context(self) -> EngineContext:
        """The engine context. Mutating it bypasses the engine rules."""
        return self._ctx

    @property
    def isolation_level(self) -> IsolationLevel:
        return self._ctx.isolation_level

    def subscribe(self, sink: EventSink) -> None:
        """Add an event sink."""
        self._ctx.sinks.append(sink)

    def session(self, name: str) -> Session:
        """Return a session slot (live object; treat as read-only)."""
        return self._ctx.session(name)

    # Statement commands

    def execute(self, session: str, statement: StatementType | str) -> StatementResult:
        """Issue a statement and run a wake-up scheduler pass.

        Args:
            session: "A" or "B".
            statement: The statement type or its name, e.g. "SELECT_SHARE".

        Raises:
            UnknownSession: If the session name is not A or B.
            ValueError: If the statement name is unknown.
        """
        if isinstance(statement, str):
            statement = StatementType(statement.upper())
        result = self._executor.execute(session, statement)
        self._scheduler.run()
        return result

    def begin(self, session: str) -> StatementResult:
        return self.execute(session, StatementType.BEGIN)

    def commit(self, session: str) -> StatementResult:
        return self.execute(session, StatementType.COMMIT)

    def rollback(self, session: str) -> StatementResult:
        return self.execute(session, StatementType.ROLLBACK)

    def select_plain(self, session: str) -> StatementResult:
        return self.execute(session, StatementType.SELECT_PLAIN)

    def select_for_share(self, session: str) -> StatementResult:
        return self.execute(session, StatementType.SELECT_SHARE)

    def select_for_update(self, session: str) -> StatementResult:
        return self.execute(session, StatementType.SELECT_UPDATE)

    def update(self, session: str) -> StatementResult:
        return self.execute(session, StatementType.UPDATE)

    # Configuration commands

    def set_isolation_level(self, level: IsolationLevel | str) -> bool:
        """Switch the process-wide isolation level.

        Rejected with a warning event while any session has an open
        transaction.

        Returns:
            True if the level was changed.

        Raises:
            ValueError: If ``level`` names no isolation level.
        """
        level = IsolationLevel.parse(level)
        active = [s.name for s in self._ctx.sessions.values() if s.active]
        if active:
            error = IsolationChangeRejected(level, active)
            self._ctx.emit(SYSTEM_SOURCE, str(error), EventCategory.WARN)
            return False

        self._ctx.isolation_level = level
        self._ctx.emit(
            SYSTEM_SOURCE, f"Isolation level switched to {level.value}", EventCategory.WARN
        )
        logger.info("isolation_level_changed", level=level.value)
        return True

    def set_target_row(self, session: str, row_id: int) -> bool:
        """Choose the row a session's data statements operate on.

        Returns:
            True if the target was changed; False for an unknown row.

        Raises:
            UnknownSession: If the session name is not A or B.
        """
        target = self._ctx.session(session)
        if RowId(row_id) not in self._ctx.row_store:
            self._ctx.emit(target.name, str(UnknownRow(row_id)), EventCategory.WARN)
            return False
        target.target_id = RowId(row_id)
        return True

    def reset(self) -> None:
        """Restore seeded rows, idle sessions and an empty lock table.

        The isolation level is kept.
        """
        self._ctx.row_store.reset()
        self._ctx.lock_table.clear()
        self._ctx.reset_sessions()
        self._ctx.events.clear()
        self._ctx.refresh_gauges()
        self._ctx.emit(
            SYSTEM_SOURCE,
            f"System reset; isolation level kept at {self._ctx.isolation_level.value}",
            EventCategory.WARN,
        )
        logger.info("engine_reset", isolation_level=self._ctx.isolation_level.value)

    # Output surface

    def snapshot(self) -> EngineSnapshot:
        """Read-only copy of rows, sessions and lock table."""
        return EngineSnapshot(
            isolation_level=self._ctx.isolation_level,
            rows=tuple(self._ctx.row_store),
            sessions={name: s.to_dict() for name, s in self._ctx.sessions.items()},
            locks=tuple(request.to_dict() for request in self._ctx.lock_table),
        )

    def events(self) -> list[EngineEvent]:
        """Events, newest first."""
        return self._ctx.events.newest_first()

    def locks(self) -> list[LockRequest]:
        """Live lock requests in insertion order (treat as read-only)."""
        return list(self._ctx.lock_table)

    def visible_rows(self, session: str) -> list[Row]:
        """Every row as the given session would currently see it."""
        name = self._ctx.session(session).name
        return [
            self._ctx.resolver.visible_value(self._ctx.isolation_level, name, row)
            for row in self._ctx.row_store
        ]
