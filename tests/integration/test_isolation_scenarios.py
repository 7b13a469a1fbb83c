"""Integration tests for two-session isolation and locking scenarios.

Each test drives a fresh SimulationEngine through a classic anomaly or
locking interaction and checks the observable state and event stream.
"""

from __future__ import annotations

import pytest

from isolation_lab.adapters.outbound import MemoryEventSink
from isolation_lab.application import SimulationEngine, StatementOutcome
from isolation_lab.domain.value_objects import (
    IsolationLevel,
    LockMode,
    LockStatus,
    SessionState,
)


def _stock(engine: SimulationEngine, row_id: int = 1) -> int:
    return next(row.stock for row in engine.snapshot().rows if row.id == row_id)


@pytest.mark.integration
class TestReadPhenomena:
    """Dirty, non-repeatable and repeatable reads."""

    def test_dirty_read_under_read_uncommitted(self, make_engine) -> None:
        """B sees A's uncommitted write."""
        engine = make_engine("READ-UNCOMMITTED")
        engine.begin("A")
        engine.update("A")

        result = engine.select_plain("B")

        assert result.row is not None
        assert result.row.stock == 99
        assert _stock(engine) == 100

    def test_no_dirty_read_under_read_committed(self, make_engine) -> None:
        engine = make_engine("READ-COMMITTED")
        engine.begin("A")
        engine.update("A")

        result = engine.select_plain("B")

        assert result.row is not None
        assert result.row.stock == 100

    def test_dirty_read_disappears_on_rollback(self, make_engine) -> None:
        engine = make_engine("READ-UNCOMMITTED")
        engine.begin("A")
        engine.update("A")
        engine.rollback("A")

        result = engine.select_plain("B")

        assert result.row is not None
        assert result.row.stock == 100

    def test_non_repeatable_read_under_read_committed(self, make_engine) -> None:
        """A committed change shows up inside an open transaction."""
        engine = make_engine("READ-COMMITTED")
        engine.begin("A")
        first = engine.select_plain("A")
        engine.update("B")
        second = engine.select_plain("A")

        assert first.row is not None and second.row is not None
        assert (first.row.stock, second.row.stock) == (100, 99)

    def test_snapshot_stable_under_repeatable_read(self, engine: SimulationEngine) -> None:
        """A keeps reading its BEGIN-time value while B commits changes."""
        engine.begin("A")
        engine.update("B")
        engine.update("B")

        result = engine.select_plain("A")

        assert _stock(engine) == 98
        assert result.row is not None
        assert result.row.stock == 100

    def test_snapshot_released_after_commit(self, engine: SimulationEngine) -> None:
        engine.begin("A")
        engine.update("B")
        engine.commit("A")

        result = engine.select_plain("A")

        assert result.row is not None
        assert result.row.stock == 99

    def test_visible_rows_per_session(self, make_engine) -> None:
        engine = make_engine("READ-UNCOMMITTED")
        engine.set_target_row("A", 2)
        engine.begin("A")
        engine.update("A")

        assert [row.stock for row in engine.visible_rows("A")] == [100, 0, 200]
        assert [row.stock for row in engine.visible_rows("B")] == [100, 0, 200]


@pytest.mark.integration
class TestCurrentRead:
    """UPDATE always reads the latest committed value."""

    def test_update_ignores_stale_snapshot(
        self, engine: SimulationEngine, sink: MemoryEventSink
    ) -> None:
        """The write is based on the live value and a warning is emitted."""
        engine.begin("A")
        engine.select_plain("A")
        engine.update("B")

        result = engine.update("A")

        assert result.row is not None
        assert result.row.stock == 98
        assert engine.session("A").buffer[1].stock == 98
        assert (
            "Current read: ignoring snapshot value (100), updating from latest value (99)"
            in sink.messages("A")
        )
        assert sink.messages("A")[-1] == "Query OK (Buffer), Stock: 99 -> 98"

        after = engine.select_plain("A")
        assert after.row is not None
        assert after.row.stock == 98

        engine.commit("A")
        assert _stock(engine) == 98

    def test_no_warning_when_snapshot_current(
        self, engine: SimulationEngine, sink: MemoryEventSink
    ) -> None:
        engine.begin("A")
        engine.update("A")
        engine.update("A")

        assert not any(m.startswith("Current read") for m in sink.messages())
        assert engine.session("A").buffer[1].stock == 98


@pytest.mark.integration
class TestLocking:
    """Shared and exclusive lock interaction between sessions."""

    def test_shared_locks_coexist(self, engine: SimulationEngine) -> None:
        engine.begin("A")
        engine.begin("B")

        assert engine.select_for_share("A").outcome is StatementOutcome.OK
        assert engine.select_for_share("B").outcome is StatementOutcome.OK

        modes = [(lock.trx_id, lock.mode) for lock in engine.locks()]
        assert modes == [("trx_A", LockMode.SHARED), ("trx_B", LockMode.SHARED)]

    def test_writer_waits_for_readers(
        self, engine: SimulationEngine, sink: MemoryEventSink
    ) -> None:
        """An UPDATE blocked by a shared lock runs once the reader commits."""
        engine.begin("A")
        engine.select_for_share("A")
        engine.begin("B")

        result = engine.update("B")

        assert result.outcome is StatementOutcome.BLOCKED
        assert engine.session("B").state is SessionState.ACTIVE_WAITING
        assert "(Blocked) waiting for trx_A to release ID=1..." in sink.messages("B")
        assert engine.session("B").buffer == {}

        engine.commit("A")

        assert engine.session("B").state is SessionState.ACTIVE
        assert engine.session("B").buffer[1].stock == 99
        assert sink.messages("B")[-2:] == [
            "Acquired lock on ID=1",
            "Query OK (Buffer), Stock: 100 -> 99",
        ]
        locks = engine.locks()
        assert len(locks) == 1
        assert locks[0].mode is LockMode.EXCLUSIVE
        assert locks[0].status is LockStatus.GRANTED

    def test_reader_waits_for_writer(
        self, engine: SimulationEngine, sink: MemoryEventSink
    ) -> None:
        """A woken locking read reports the value committed by the holder."""
        engine.begin("A")
        engine.update("A")

        assert engine.select_for_share("B").outcome is StatementOutcome.BLOCKED
        assert engine.session("B").state is SessionState.WAITING

        engine.commit("A")

        assert engine.session("B").state is SessionState.IDLE
        assert sink.messages("B")[-1] == "(woken) => ID: 1, Stock: 99"
        assert engine.locks() == []

    def test_blocked_autocommit_update_commits_when_woken(
        self, engine: SimulationEngine
    ) -> None:
        engine.begin("A")
        engine.select_for_update("A")
        engine.update("B")

        assert _stock(engine) == 100

        engine.rollback("A")

        assert _stock(engine) == 99
        assert engine.locks() == []

    def test_serializable_plain_read_takes_shared_lock(self, make_engine) -> None:
        engine = make_engine("SERIALIZABLE")
        engine.begin("A")
        engine.select_plain("A")

        assert engine.update("B").outcome is StatementOutcome.BLOCKED

        engine.commit("A")

        assert _stock(engine) == 99
        assert engine.session("B").state is SessionState.IDLE

    def test_commit_while_waiting_drops_request(self, engine: SimulationEngine) -> None:
        """Ending a waiting transaction removes its queued request."""
        engine.begin("A")
        engine.update("A")
        engine.begin("B")
        engine.update("B")

        engine.commit("B")

        assert engine.session("B").state is SessionState.IDLE
        assert [lock.trx_id for lock in engine.locks()] == ["trx_A"]

        engine.commit("A")
        assert _stock(engine) == 99


@pytest.mark.integration
class TestDeadlock:
    """Two-party deadlocks roll back the requester that closes the cycle."""

    def test_cross_row_deadlock(
        self, engine: SimulationEngine, sink: MemoryEventSink
    ) -> None:
        """B closes the cycle, is rolled back, and A's wait completes."""
        engine.set_target_row("B", 2)
        engine.begin("A")
        engine.begin("B")
        engine.select_for_update("A")
        engine.select_for_update("B")

        engine.set_target_row("A", 2)
        assert engine.select_for_update("A").outcome is StatementOutcome.BLOCKED

        engine.set_target_row("B", 1)
        result = engine.select_for_update("B")

        assert result.outcome is StatementOutcome.DEADLOCK
        assert engine.session("B").state is SessionState.IDLE
        assert engine.session("A").state is SessionState.ACTIVE
        system = sink.messages("SYSTEM")
        assert any(m.startswith("Deadlock detected: trx_B waits for trx_A") for m in system)
        assert sink.messages("B")[-1] == "ROLLBACK;"
        assert sink.messages("A")[-2:] == [
            "Acquired lock on ID=2",
            "(woken) => ID: 2, Stock: 1",
        ]
        held = sorted((lock.resource_id, lock.mode) for lock in engine.locks())
        assert held == [(1, LockMode.EXCLUSIVE), (2, LockMode.EXCLUSIVE)]

    def test_upgrade_deadlock(self, engine: SimulationEngine) -> None:
        """Both readers upgrading to write deadlock; the survivor upgrades."""
        engine.begin("A")
        engine.begin("B")
        engine.select_for_share("A")
        engine.select_for_share("B")

        assert engine.update("A").outcome is StatementOutcome.BLOCKED
        assert engine.update("B").outcome is StatementOutcome.DEADLOCK

        assert engine.session("A").buffer[1].stock == 99
        locks = engine.locks()
        assert len(locks) == 1
        assert (locks[0].trx_id, locks[0].mode) == ("trx_A", LockMode.EXCLUSIVE)

    def test_deadlock_counted(self, engine: SimulationEngine, collector_registry) -> None:
        engine.begin("A")
        engine.begin("B")
        engine.select_for_share("A")
        engine.select_for_share("B")
        engine.update("A")
        engine.update("B")

        assert collector_registry.get_sample_value("lab_deadlocks_total") == 1.0
        assert collector_registry.get_sample_value("lab_wakeups_total") == 1.0


@pytest.mark.integration
class TestConfigurationCommands:
    """Isolation level changes and reset."""

    def test_isolation_change_rejected_while_active(
        self, engine: SimulationEngine, sink: MemoryEventSink
    ) -> None:
        engine.begin("B")

        assert engine.set_isolation_level("READ-COMMITTED") is False
        assert engine.isolation_level is IsolationLevel.REPEATABLE_READ
        assert sink.events[-1].source == "SYSTEM"

    def test_isolation_change_when_idle(
        self, engine: SimulationEngine, sink: MemoryEventSink
    ) -> None:
        assert engine.set_isolation_level("serializable") is True
        assert engine.isolation_level is IsolationLevel.SERIALIZABLE
        assert sink.messages("SYSTEM") == ["Isolation level switched to SERIALIZABLE"]

    def test_reset_restores_state_and_keeps_level(self, make_engine) -> None:
        engine = make_engine("READ-COMMITTED")
        engine.set_target_row("A", 3)
        engine.update("A")
        engine.begin("B")
        engine.update("B")
        engine.select_for_update("A")

        engine.reset()

        state = engine.snapshot()
        assert state.isolation_level is IsolationLevel.READ_COMMITTED
        assert [row.stock for row in state.rows] == [100, 1, 200]
        assert state.locks == ()
        assert all(s["state"] == "IDLE" for s in state.sessions.values())
        assert engine.session("A").target_id == 1
        assert [e.message for e in engine.events()] == [
            "System reset; isolation level kept at READ-COMMITTED"
        ]

    def test_event_log_bounded(self, engine: SimulationEngine) -> None:
        for _ in range(40):
            engine.select_plain("A")

        assert len(engine.events()) == 50
        assert engine.events()[0].message.startswith("=> ID: 1")
