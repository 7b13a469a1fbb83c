"""Client session entity.

A session is one of the two simulated client connections. It carries the
transaction state the engine needs to resolve visibility: the write
buffer of uncommitted changes, the REPEATABLE-READ snapshot, and the row
it is currently blocked on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from isolation_lab.domain.entities.row import Row
from isolation_lab.domain.value_objects import (
    RowId,
    SessionName,
    SessionState,
    TransactionId,
    transaction_id_for,
)


@dataclass
class Session:
    """Transaction state for one session slot.

    Invariants:
        - ``buffer`` is non-empty only while ``active`` is True.
        - ``snapshot`` is set only while ``active`` is True and is never
          mutated after BEGIN.
        - ``waiting_for`` is set iff the lock table holds exactly one
          WAITING request for ``trx_id``.
    """

    name: SessionName
    target_id: RowId = RowId(1)
    active: bool = False
    buffer: dict[RowId, Row] = field(default_factory=dict)
    snapshot: tuple[Row, ...] | None = None
    waiting_for: RowId | None = None
    last_sql: str | None = None

    @property
    def trx_id(self) -> TransactionId:
        """The transaction id owned by this session."""
        return transaction_id_for(self.name)

    @property
    def state(self) -> SessionState:
        """Derived lifecycle state."""
        if self.active:
            if self.waiting_for is not None:
                return SessionState.ACTIVE_WAITING
            return SessionState.ACTIVE
        if self.waiting_for is not None:
            return SessionState.WAITING
        return SessionState.IDLE

    @property
    def autocommit(self) -> bool:
        """True when statements run as their own transaction."""
        return not self.active

    def start_transaction(self, snapshot: tuple[Row, ...] | None) -> None:
        """Open a transaction with a freshly captured snapshot."""
        self.active = True
        self.buffer = {}
        self.snapshot = snapshot

    def end_transaction(self) -> None:
        """Discard all transaction state and return to IDLE."""
        self.active = False
        self.buffer = {}
        self.snapshot = None
        self.waiting_for = None

    def snapshot_row(self, row_id: RowId) -> Row | None:
        """Return the snapshot version of a row, if a snapshot is held."""
        if self.snapshot is None:
            return None
        for row in self.snapshot:
            if row.id == row_id:
                return row
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for renderers."""
        return {
            "name": self.name,
            "trx_id": self.trx_id,
            "state": self.state.value,
            "active": self.active,
            "target_id": self.target_id,
            "buffer": {row_id: row.to_dict() for row_id, row in self.buffer.items()},
            "snapshot": (
                [row.to_dict() for row in self.snapshot]
                if self.snapshot is not None
                else None
            ),
            "waiting_for": self.waiting_for,
            "last_sql": self.last_sql,
        }
