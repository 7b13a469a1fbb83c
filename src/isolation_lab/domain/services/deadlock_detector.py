"""Two-party deadlock detection.

With only two sessions a wait cycle can contain at most two
transactions, so instead of walking a wait-for graph the detector asks a
single question before a request is queued: is the holder itself waiting
on a row the requester holds?

The requester whose wait would close the cycle is the victim.
"""

from __future__ import annotations

from typing import Mapping

from isolation_lab.domain.entities import Session
from isolation_lab.domain.services.lock_manager import LockTable
from isolation_lab.domain.value_objects import (
    SessionName,
    TransactionId,
    session_for,
)


class DeadlockDetector:
    """Checks whether a new wait would complete a two-party cycle."""

    def __init__(
        self, sessions: Mapping[SessionName, Session], lock_table: LockTable
    ) -> None:
        self._sessions = sessions
        self._lock_table = lock_table

    def would_deadlock(
        self, waiter_trx_id: TransactionId, holder_trx_id: TransactionId
    ) -> bool:
        """Return True if ``waiter`` waiting on ``holder`` closes a cycle.

        Args:
            waiter_trx_id: Transaction about to wait.
            holder_trx_id: Transaction holding the conflicting lock.
        """
        holder = self._sessions[session_for(holder_trx_id)]
        if holder.waiting_for is None:
            return False
        return any(
            request.trx_id == waiter_trx_id
            for request in self._lock_table.granted_on(holder.waiting_for)
        )
