"""Transaction-related types and enumerations.

These types define the session lifecycle, isolation levels, lock modes and
statement kinds understood by the simulation engine.
"""

from __future__ import annotations

from enum import Enum, auto


class SessionState(Enum):
    """Session lifecycle states.

    State machine:

        IDLE ──BEGIN──> ACTIVE <──wake-up── ACTIVE_WAITING
          ^               │  └──blocked lock request──^  │
          │               │                              │
          └─COMMIT/ROLLBACK┴───────COMMIT/ROLLBACK───────┘

    An IDLE session running an autocommit statement that is blocked
    reports WAITING; it has no transaction to commit or roll back.
    """

    IDLE = "IDLE"
    """No explicit transaction. Statements run in autocommit mode."""

    ACTIVE = "ACTIVE"
    """An explicit transaction is open."""

    ACTIVE_WAITING = "ACTIVE-WAITING"
    """An explicit transaction is open and blocked on a row lock."""

    WAITING = "WAITING"
    """An autocommit statement is blocked on a row lock."""

    def is_active(self) -> bool:
        """Check if an explicit transaction is open."""
        return self in (SessionState.ACTIVE, SessionState.ACTIVE_WAITING)

    def is_waiting(self) -> bool:
        """Check if the session is blocked on a lock request."""
        return self in (SessionState.ACTIVE_WAITING, SessionState.WAITING)


class IsolationLevel(Enum):
    """Transaction isolation levels, named as MySQL reports them.

    Isolation levels from weakest to strongest:
    - READ_UNCOMMITTED: Can see the other session's uncommitted writes
    - READ_COMMITTED: Every read sees the latest committed data
    - REPEATABLE_READ: Reads come from the snapshot taken at BEGIN
    - SERIALIZABLE: READ_COMMITTED visibility, but plain reads take
                    SHARED locks
    """

    READ_UNCOMMITTED = "READ-UNCOMMITTED"
    READ_COMMITTED = "READ-COMMITTED"
    REPEATABLE_READ = "REPEATABLE-READ"
    SERIALIZABLE = "SERIALIZABLE"

    @classmethod
    def parse(cls, value: str | IsolationLevel) -> IsolationLevel:
        """Parse a level from its MySQL name or enum member name.

        Accepts ``REPEATABLE-READ``, ``repeatable read`` and
        ``REPEATABLE_READ`` alike.

        Raises:
            ValueError: If the value names no isolation level.
        """
        if isinstance(value, IsolationLevel):
            return value
        normalized = value.strip().upper().replace("_", "-").replace(" ", "-")
        for level in cls:
            if level.value == normalized:
                return level
        raise ValueError(f"Unknown isolation level: {value!r}")


class LockMode(Enum):
    """Row lock modes.

    Lock compatibility matrix:

              | S | X |
        ------|---|---|
        S     | Y | N |
        X     | N | N |
    """

    SHARED = "S"
    """Shared lock (S) - allows concurrent readers, blocks writers."""

    EXCLUSIVE = "X"
    """Exclusive lock (X) - blocks all other access."""

    def is_compatible(self, other: LockMode) -> bool:
        """Check if this lock mode can be held alongside another."""
        return self is LockMode.SHARED and other is LockMode.SHARED

    def covers(self, other: LockMode) -> bool:
        """Check if holding this mode already satisfies a request for other."""
        return self is LockMode.EXCLUSIVE or other is LockMode.SHARED


class LockStatus(Enum):
    """Fulfillment state of a lock request."""

    GRANTED = "GRANTED"
    WAITING = "WAITING"


class OperationKind(Enum):
    """Effect a data statement has once its lock is available."""

    READ = auto()
    WRITE = auto()


class StatementType(Enum):
    """Statements a session can issue."""

    BEGIN = "BEGIN"
    COMMIT = "COMMIT"
    ROLLBACK = "ROLLBACK"
    SELECT_PLAIN = "SELECT_PLAIN"
    SELECT_SHARE = "SELECT_SHARE"
    SELECT_UPDATE = "SELECT_UPDATE"
    UPDATE = "UPDATE"

    def is_transaction_control(self) -> bool:
        """Check if this statement opens or closes a transaction."""
        return self in (
            StatementType.BEGIN,
            StatementType.COMMIT,
            StatementType.ROLLBACK,
        )

    def operation(self) -> OperationKind:
        """Return the data effect of a SELECT or UPDATE statement.

        Raises:
            ValueError: For transaction control statements.
        """
        if self is StatementType.UPDATE:
            return OperationKind.WRITE
        if self.is_transaction_control():
            raise ValueError(f"{self.value} has no data effect")
        return OperationKind.READ


class EventCategory(Enum):
    """Category of an engine event, used by renderers for styling."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    SUCCESS = "success"
    SQL = "sql"
    RESULT = "result"
