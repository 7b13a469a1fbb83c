"""Row lock table.

This module implements the lock table the simulated engine uses for
row-level locking. Every request, granted or waiting, is one
``LockRequest`` record; a transaction holds at most one granted record
per row, and asking for a stronger mode upgrades that record in place.

Lock Modes:
    - SHARED (S): Multiple readers allowed
    - EXCLUSIVE (X): Single writer only

Granted requests on a row are always either one EXCLUSIVE request or any
number of SHARED requests.

Two-Phase Locking:
    Locks taken inside a transaction are held until COMMIT or ROLLBACK.
    Autocommit statements release their lock as soon as they finish.

References:
    - Gray & Reuter, "Transaction Processing" (1993)
    - MySQL 8.0 Reference Manual, 17.7.1 "InnoDB Locking"
"""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass
from typing import Iterator

from isolation_lab.domain.entities import LockRequest, PendingStatement
from isolation_lab.domain.value_objects import (
    LockMode,
    LockStatus,
    RowId,
    TransactionId,
)


@dataclass(frozen=True)
class LockCheck:
    """Outcome of a compatibility check."""

    compatible: bool
    conflict: LockRequest | None = None


class LockTable:
    """Granted and waiting row lock requests.

    Not thread-safe. The engine runs one statement at a time and owns the
    table exclusively.
    """

    def __init__(self) -> None:
        self._requests: list[LockRequest] = []
        self._sequence = itertools.count()

    def check_compatible(
        self, trx_id: TransactionId, resource_id: RowId, mode: LockMode
    ) -> LockCheck:
        """Check whether ``trx_id`` could be granted ``mode`` on a row now.

        Only GRANTED requests from other transactions are considered.

        Returns:
            A LockCheck naming the first conflicting granted request.
        """
        for request in self.granted_on(resource_id):
            if request.trx_id == trx_id:
                continue
            if not request.mode.is_compatible(mode):
                return LockCheck(compatible=False, conflict=request)
        return LockCheck(compatible=True)

    def grant(
        self, trx_id: TransactionId, resource_id: RowId, mode: LockMode
    ) -> LockRequest:
        """Insert or upgrade the granted request for a transaction on a row.

        A transaction already holding a mode that covers ``mode`` keeps its
        existing record.

        Returns:
            The granted request.
        """
        held = self.held(trx_id, resource_id)
        if held is not None and held.mode.covers(mode):
            return held

        self._requests = [
            r
            for r in self._requests
            if not (r.trx_id == trx_id and r.resource_id == resource_id)
        ]
        request = LockRequest(
            trx_id=trx_id,
            resource_id=resource_id,
            mode=mode,
            status=LockStatus.GRANTED,
            request_time=time.monotonic(),
            sequence=next(self._sequence),
        )
        self._requests.append(request)
        return request

    def enqueue_wait(
        self,
        trx_id: TransactionId,
        resource_id: RowId,
        mode: LockMode,
        continuation: PendingStatement | None,
    ) -> LockRequest:
        """Queue a WAITING request carrying its deferred statement."""
        request = LockRequest(
            trx_id=trx_id,
            resource_id=resource_id,
            mode=mode,
            status=LockStatus.WAITING,
            request_time=time.monotonic(),
            sequence=next(self._sequence),
            continuation=continuation,
        )
        self._requests.append(request)
        return request

    def promote(self, request: LockRequest) -> LockRequest:
        """Turn a WAITING request into the transaction's granted record.

        Any weaker record the transaction already held on the row is
        replaced, so an upgrade never leaves two granted records.
        """
        if not request.is_waiting:
            raise ValueError(f"Request is not waiting: {request}")
        self._requests = [
            r
            for r in self._requests
            if r is request
            or not (
                r.is_granted
                and r.trx_id == request.trx_id
                and r.resource_id == request.resource_id
            )
        ]
        request.status = LockStatus.GRANTED
        return request

    def release(self, trx_id: TransactionId) -> int:
        """Remove every request, granted or waiting, owned by a transaction.

        Called on COMMIT, ROLLBACK and at the end of an autocommit
        statement.

        Returns:
            Number of requests removed.
        """
        before = len(self._requests)
        self._requests = [r for r in self._requests if r.trx_id != trx_id]
        return before - len(self._requests)

    def clear(self) -> None:
        self._requests = []

    def held(self, trx_id: TransactionId, resource_id: RowId) -> LockRequest | None:
        """Return the granted request of a transaction on a row, if any."""
        for request in self._requests:
            if (
                request.is_granted
                and request.trx_id == trx_id
                and request.resource_id == resource_id
            ):
                return request
        return None

    def granted_on(self, resource_id: RowId) -> list[LockRequest]:
        """Granted requests on a row, in grant order."""
        return [
            r for r in self._requests if r.is_granted and r.resource_id == resource_id
        ]

    def waiting_requests(self) -> list[LockRequest]:
        """All WAITING requests, oldest first."""
        waiting = [r for r in self._requests if r.is_waiting]
        return sorted(waiting, key=lambda r: (r.request_time, r.sequence))

    def waiting_for(self, trx_id: TransactionId) -> list[LockRequest]:
        """WAITING requests owned by a transaction."""
        return [r for r in self._requests if r.is_waiting and r.trx_id == trx_id]

    def locks_held(self, trx_id: TransactionId) -> list[RowId]:
        """Rows on which a transaction holds a granted lock."""
        return [r.resource_id for r in self._requests if r.is_granted and r.trx_id == trx_id]

    def __iter__(self) -> Iterator[LockRequest]:
        return iter(list(self._requests))

    def __len__(self) -> int:
        return len(self._requests)
