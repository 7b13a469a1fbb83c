"""Errors raised by the simulation domain.

None of these are fatal. The engine catches every ``LabError`` at the
command boundary and turns it into an event plus a no-op or corrective
transition.
"""

from __future__ import annotations

from isolation_lab.domain.value_objects import (
    IsolationLevel,
    RowId,
    TransactionId,
)


class LabError(Exception):
    """Base class for simulation errors."""


class NoActiveTransaction(LabError):
    """COMMIT or ROLLBACK issued with no open transaction."""

    def __init__(self, session: str) -> None:
        super().__init__(f"No active transaction in session {session}")
        self.session = session


class TransactionAlreadyActive(LabError):
    """BEGIN issued while a transaction is already open."""

    def __init__(self, session: str) -> None:
        super().__init__(f"Transaction already active in session {session}")
        self.session = session


class IsolationChangeRejected(LabError):
    """Isolation level change attempted while a transaction is open."""

    def __init__(self, requested: IsolationLevel, active_sessions: list[str]) -> None:
        super().__init__(
            f"Cannot switch to {requested.value}: commit or roll back the "
            f"active transactions in session(s) {', '.join(active_sessions)} first"
        )
        self.requested = requested
        self.active_sessions = active_sessions


class Deadlock(LabError):
    """Granting a request would close a wait cycle."""

    def __init__(
        self, waiter: TransactionId, holder: TransactionId, resource_id: RowId
    ) -> None:
        super().__init__(
            f"Deadlock detected: {waiter} waits for {holder} on ID={resource_id} "
            f"while {holder} waits for {waiter}"
        )
        self.waiter = waiter
        self.holder = holder
        self.resource_id = resource_id


class SessionBlocked(LabError):
    """Data statement issued by a session that is waiting on a lock."""

    def __init__(self, session: str, resource_id: RowId) -> None:
        super().__init__(
            f"Session {session} is blocked waiting for a lock on ID={resource_id}"
        )
        self.session = session
        self.resource_id = resource_id


class UnknownRow(LabError):
    """Row id not present in the products table."""

    def __init__(self, row_id: int) -> None:
        super().__init__(f"No row with ID={row_id}")
        self.row_id = row_id


class UnknownSession(LabError):
    """Session name other than A or B."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown session: {name!r}")
        self.name = name
