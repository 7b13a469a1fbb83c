"""Inbound port for the simulation command surface.

This protocol defines the interface the application layer exposes to
inbound adapters (REST API, UI controls, scripted scenarios).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from isolation_lab.domain.entities import EngineEvent
from isolation_lab.domain.value_objects import IsolationLevel, StatementType

if TYPE_CHECKING:
    from isolation_lab.application.engine import EngineSnapshot
    from isolation_lab.application.executor import StatementResult


@runtime_checkable
class SimulationPort(Protocol):
    """Protocol for driving the simulator.

    This is the contract that the application layer implements
    and inbound adapters depend on.
    """

    @property
    def isolation_level(self) -> IsolationLevel:
        """Current process-wide isolation level."""
        ...

    def execute(self, session: str, statement: StatementType | str) -> StatementResult:
        """Issue any statement from a session."""
        ...

    def begin(self, session: str) -> StatementResult:
        ...

    def commit(self, session: str) -> StatementResult:
        ...

    def rollback(self, session: str) -> StatementResult:
        ...

    def select_plain(self, session: str) -> StatementResult:
        ...

    def select_for_share(self, session: str) -> StatementResult:
        ...

    def select_for_update(self, session: str) -> StatementResult:
        ...

    def update(self, session: str) -> StatementResult:
        ...

    def set_isolation_level(self, level: IsolationLevel | str) -> bool:
        """Switch the isolation level; False while a transaction is open."""
        ...

    def set_target_row(self, session: str, row_id: int) -> bool:
        """Choose a session's target row; False for an unknown row."""
        ...

    def reset(self) -> None:
        """Restore the seeded state, keeping the isolation level."""
        ...

    def snapshot(self) -> EngineSnapshot:
        """Read-only view of rows, sessions and locks."""
        ...

    def events(self) -> list[EngineEvent]:
        """Event stream, newest first."""
        ...
