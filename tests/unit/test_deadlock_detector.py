"""Unit tests for two-party deadlock detection."""

from __future__ import annotations

import pytest

from isolation_lab.domain.entities import Session
from isolation_lab.domain.services import DeadlockDetector, LockTable
from isolation_lab.domain.value_objects import LockMode, RowId, TransactionId

TRX_A = TransactionId("trx_A")
TRX_B = TransactionId("trx_B")


class TestDeadlockDetector:
    """Cycle detection before a request is queued."""

    @pytest.fixture
    def sessions(self) -> dict[str, Session]:
        return {"A": Session(name="A"), "B": Session(name="B")}

    @pytest.fixture
    def lock_table(self) -> LockTable:
        return LockTable()

    @pytest.fixture
    def detector(
        self, sessions: dict[str, Session], lock_table: LockTable
    ) -> DeadlockDetector:
        return DeadlockDetector(sessions, lock_table)  # type: ignore[arg-type]

    def test_no_cycle_when_holder_not_waiting(
        self, detector: DeadlockDetector, lock_table: LockTable
    ) -> None:
        """A holder that is not waiting cannot be part of a cycle."""
        lock_table.grant(TRX_A, RowId(1), LockMode.EXCLUSIVE)

        assert detector.would_deadlock(TRX_B, TRX_A) is False

    def test_cycle_detected(
        self,
        detector: DeadlockDetector,
        lock_table: LockTable,
        sessions: dict[str, Session],
    ) -> None:
        """B waiting for A while A waits on a row B holds is a deadlock."""
        lock_table.grant(TRX_A, RowId(1), LockMode.EXCLUSIVE)
        lock_table.grant(TRX_B, RowId(2), LockMode.EXCLUSIVE)
        lock_table.enqueue_wait(TRX_A, RowId(2), LockMode.EXCLUSIVE, None)
        sessions["A"].waiting_for = RowId(2)

        assert detector.would_deadlock(TRX_B, TRX_A) is True

    def test_holder_waiting_on_unrelated_row(
        self,
        detector: DeadlockDetector,
        lock_table: LockTable,
        sessions: dict[str, Session],
    ) -> None:
        """The holder waits, but not on anything the requester holds."""
        lock_table.grant(TRX_A, RowId(1), LockMode.EXCLUSIVE)
        sessions["A"].waiting_for = RowId(3)

        assert detector.would_deadlock(TRX_B, TRX_A) is False

    def test_shared_lock_closes_cycle(
        self,
        detector: DeadlockDetector,
        lock_table: LockTable,
        sessions: dict[str, Session],
    ) -> None:
        """Any granted mode held by the requester counts."""
        lock_table.grant(TRX_B, RowId(1), LockMode.SHARED)
        lock_table.grant(TRX_A, RowId(1), LockMode.SHARED)
        sessions["A"].waiting_for = RowId(1)

        assert detector.would_deadlock(TRX_B, TRX_A) is True
