"""Value objects for the isolation lab domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Identifiers:
        - SessionName: The two session slots ("A", "B")
        - TransactionId: Transaction owned by a session
        - RowId: Primary key of a products row
        - SESSION_NAMES, SYSTEM_SOURCE: Constants

    Transaction Types:
        - SessionState: IDLE, ACTIVE, ACTIVE_WAITING, WAITING
        - IsolationLevel: READ-UNCOMMITTED through SERIALIZABLE
        - LockMode: SHARED and EXCLUSIVE row locks
        - LockStatus: GRANTED or WAITING
        - StatementType: BEGIN, COMMIT, ROLLBACK, SELECT variants, UPDATE
        - OperationKind: READ or WRITE effect of a statement
        - EventCategory: Event styling category
"""

from isolation_lab.domain.value_objects.identifiers import (
    SESSION_NAMES,
    SYSTEM_SOURCE,
    RowId,
    SessionName,
    TransactionId,
    other_session,
    session_for,
    transaction_id_for,
)
from isolation_lab.domain.value_objects.transaction_types import (
    EventCategory,
    IsolationLevel,
    LockMode,
    LockStatus,
    OperationKind,
    SessionState,
    StatementType,
)

__all__ = [
    # Identifiers
    "SessionName",
    "TransactionId",
    "RowId",
    "SESSION_NAMES",
    "SYSTEM_SOURCE",
    "transaction_id_for",
    "session_for",
    "other_session",
    # Transaction types
    "SessionState",
    "IsolationLevel",
    "LockMode",
    "LockStatus",
    "OperationKind",
    "StatementType",
    "EventCategory",
]
