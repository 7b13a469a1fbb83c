"""Lock table entries and deferred statements.

A blocked statement is not stored as a closure. The WAITING request
carries a ``PendingStatement`` describing the effect to replay; the
wake-up scheduler hands it back to the statement executor, which
re-reads the current engine state when it runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from isolation_lab.domain.value_objects import (
    LockMode,
    LockStatus,
    OperationKind,
    RowId,
    SessionName,
    StatementType,
    TransactionId,
)


@dataclass(frozen=True, slots=True)
class PendingStatement:
    """A statement whose effect is deferred until its lock is granted."""

    kind: OperationKind
    session: SessionName
    resource_id: RowId
    statement: StatementType
    lock_mode: LockMode | None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict."""
        return {
            "kind": self.kind.name,
            "session": self.session,
            "resource_id": self.resource_id,
            "statement": self.statement.value,
            "lock_mode": self.lock_mode.name if self.lock_mode is not None else None,
        }


@dataclass
class LockRequest:
    """A granted or waiting row lock request.

    Attributes:
        trx_id: Requesting transaction.
        resource_id: Locked row.
        mode: SHARED or EXCLUSIVE.
        status: GRANTED or WAITING.
        request_time: Monotonic timestamp of the request.
        sequence: Arrival order; breaks ties between equal timestamps.
        continuation: Deferred effect of a WAITING request.
    """

    trx_id: TransactionId
    resource_id: RowId
    mode: LockMode
    status: LockStatus
    request_time: float
    sequence: int
    continuation: PendingStatement | None = None

    @property
    def is_granted(self) -> bool:
        return self.status is LockStatus.GRANTED

    @property
    def is_waiting(self) -> bool:
        return self.status is LockStatus.WAITING

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for renderers."""
        return {
            "trx_id": self.trx_id,
            "resource_id": self.resource_id,
            "mode": self.mode.name,
            "status": self.status.value,
            "request_time": self.request_time,
            "continuation": (
                self.continuation.to_dict() if self.continuation is not None else None
            ),
        }
