"""Engine context: the single owner of all simulation state.

Every transition function receives the context explicitly. Nothing is
kept in module globals, so independent engines can run side by side.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from isolation_lab.domain.entities import EngineEvent, EventLog, Row, Session
from isolation_lab.domain.errors import UnknownSession
from isolation_lab.domain.services import (
    DeadlockDetector,
    IsolationPolicyResolver,
    LockTable,
    RowStore,
)
from isolation_lab.domain.value_objects import (
    SESSION_NAMES,
    EventCategory,
    IsolationLevel,
    RowId,
    SessionName,
)
from isolation_lab.infrastructure.metrics import MetricsRegistry
from isolation_lab.ports.outbound import EventSink


def _new_sessions(target_row: RowId) -> dict[SessionName, Session]:
    return {name: Session(name=name, target_id=target_row) for name in SESSION_NAMES}


@dataclass
class EngineContext:
    """Row store, lock table, sessions and the event stream."""

    row_store: RowStore
    lock_table: LockTable
    sessions: dict[SessionName, Session]
    isolation_level: IsolationLevel
    events: EventLog
    metrics: MetricsRegistry
    default_target_row: RowId = RowId(1)
    sinks: list[EventSink] = field(default_factory=list)
    resolver: IsolationPolicyResolver = field(init=False)
    detector: DeadlockDetector = field(init=False)

    def __post_init__(self) -> None:
        self.resolver = IsolationPolicyResolver(self.sessions)
        self.detector = DeadlockDetector(self.sessions, self.lock_table)

    @classmethod
    def create(
        cls,
        metrics: MetricsRegistry,
        isolation_level: IsolationLevel = IsolationLevel.REPEATABLE_READ,
        seed: Iterable[Row] | None = None,
        event_log_capacity: int = 50,
        default_target_row: int = 1,
    ) -> EngineContext:
        """Build a context with a freshly seeded row store."""
        target = RowId(default_target_row)
        return cls(
            row_store=RowStore(seed) if seed is not None else RowStore(),
            lock_table=LockTable(),
            sessions=_new_sessions(target),
            isolation_level=isolation_level,
            events=EventLog(event_log_capacity),
            metrics=metrics,
            default_target_row=target,
        )

    def session(self, name: str) -> Session:
        """Look up a session slot.

        Raises:
            UnknownSession: If the name is not A or B.
        """
        try:
            return self.sessions[name]  # type: ignore[index]
        except KeyError:
            raise UnknownSession(name) from None

    def emit(
        self,
        source: str,
        message: str,
        category: EventCategory = EventCategory.INFO,
    ) -> EngineEvent:
        """Record an event and hand it to every sink."""
        event = EngineEvent(source=source, message=message, category=category)
        self.events.append(event)
        for sink in self.sinks:
            sink.publish(event)
        return event

    def reset_sessions(self) -> None:
        """Return both session slots to IDLE without replacing them."""
        for session in self.sessions.values():
            session.end_transaction()
            session.target_id = self.default_target_row
            session.last_sql = None

    def refresh_gauges(self) -> None:
        self.metrics.transactions_active.set(
            sum(1 for s in self.sessions.values() if s.active)
        )
        self.metrics.lock_waiting.set(len(self.lock_table.waiting_requests()))
