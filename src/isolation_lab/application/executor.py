"""Statement executor.

Interprets session statements against the engine context: transaction
control (BEGIN/COMMIT/ROLLBACK), reads (plain, FOR SHARE, FOR UPDATE)
and the stock-decrementing UPDATE.

Lock acquisition protocol for data statements:
    1. Check compatibility with the granted requests of the other session.
    2. Compatible: grant, run the effect now, and release again if the
       session is in autocommit mode.
    3. Incompatible: ask the deadlock detector. A cycle rolls the
       requester back; otherwise queue a WAITING request carrying a
       PendingStatement and mark the session as waiting.

Queued statements are resumed by the wake-up scheduler through
``resume``, which re-reads the current state instead of any state
captured when the statement blocked.

References:
    - MySQL 8.0 Reference Manual, 17.7.2.3 "Consistent Nonlocking Reads"
    - MySQL 8.0 Reference Manual, 17.7.2.4 "Locking Reads"
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from isolation_lab.application.context import EngineContext
from isolation_lab.domain.entities import PendingStatement, Row, Session
from isolation_lab.domain.errors import (
    Deadlock,
    LabError,
    NoActiveTransaction,
    SessionBlocked,
    TransactionAlreadyActive,
)
from isolation_lab.domain.value_objects import (
    SYSTEM_SOURCE,
    EventCategory,
    IsolationLevel,
    LockMode,
    OperationKind,
    RowId,
    StatementType,
)
from isolation_lab.infrastructure.logging import get_logger
from isolation_lab.infrastructure.tracing import trace_span

logger = get_logger(__name__)


class StatementOutcome(Enum):
    """How a statement ended."""

    OK = "ok"
    """Effect applied (or the transition completed)."""

    BLOCKED = "blocked"
    """Lock unavailable; the statement is queued."""

    DEADLOCK = "deadlock"
    """Waiting would deadlock; the session was rolled back."""

    REJECTED = "rejected"
    """Statement refused with a warning; no state changed."""


@dataclass(frozen=True)
class StatementResult:
    """Result of issuing one statement."""

    session: str
    statement: StatementType
    outcome: StatementOutcome
    row: Row | None = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.outcome is StatementOutcome.OK

    def to_dict(self) -> dict[str, Any]:
        return {
            "session": self.session,
            "statement": self.statement.value,
            "outcome": self.outcome.value,
            "row": self.row.to_dict() if self.row is not None else None,
            "message": self.message,
        }


def sql_text(statement: StatementType, row_id: RowId) -> str:
    """SQL a statement corresponds to, as shown in the session console."""
    if statement is StatementType.BEGIN:
        return "START TRANSACTION;"
    elif statement is StatementType.COMMIT:
        return "COMMIT;"
    elif statement is StatementType.ROLLBACK:
        return "ROLLBACK;"
    elif statement is StatementType.SELECT_PLAIN:
        return f"SELECT * FROM products WHERE id = {row_id};"
    elif statement is StatementType.SELECT_SHARE:
        return f"SELECT * FROM products WHERE id = {row_id} FOR SHARE;"
    elif statement is StatementType.SELECT_UPDATE:
        return f"SELECT * FROM products WHERE id = {row_id} FOR UPDATE;"
    elif statement is StatementType.UPDATE:
        return f"UPDATE products SET stock = stock - 1 WHERE id = {row_id};"
    raise ValueError(f"Unsupported statement: {statement}")


def required_lock(statement: StatementType, level: IsolationLevel) -> LockMode | None:
    """Row lock a data statement needs under an isolation level."""
    if statement is StatementType.SELECT_PLAIN:
        return LockMode.SHARED if level is IsolationLevel.SERIALIZABLE else None
    elif statement is StatementType.SELECT_SHARE:
        return LockMode.SHARED
    elif statement in (StatementType.SELECT_UPDATE, StatementType.UPDATE):
        return LockMode.EXCLUSIVE
    raise ValueError(f"{statement.value} takes no row lock")


class StatementExecutor:
    """Runs statements against an engine context.

    The executor never triggers the wake-up scheduler itself; the engine
    runs a scheduler pass after every statement.
    """

    def __init__(self, context: EngineContext) -> None:
        self._ctx = context

    def execute(self, session_name: str, statement: StatementType) -> StatementResult:
        """Issue a statement from a session.

        Every ``LabError`` other than an unknown session is recovered
        here: it becomes a warning event and a REJECTED result.

        Raises:
            UnknownSession: If the session name is not A or B.
        """
        session = self._ctx.session(session_name)
        with trace_span(
            "lab.statement",
            {
                "lab.session": session.name,
                "lab.statement": statement.value,
                "lab.isolation_level": self._ctx.isolation_level.value,
            },
        ) as span:
            try:
                result = self._dispatch(session, statement)
            except LabError as e:
                self._ctx.emit(session.name, str(e), EventCategory.WARN)
                result = StatementResult(
                    session=session.name,
                    statement=statement,
                    outcome=StatementOutcome.REJECTED,
                    message=str(e),
                )
            span.set_attribute("lab.outcome", result.outcome.value)

        self._ctx.metrics.statements_total.labels(
            statement=statement.value, outcome=result.outcome.value
        ).inc()
        self._ctx.refresh_gauges()
        return result

    def resume(self, pending: PendingStatement) -> StatementResult:
        """Run the deferred effect of a statement whose lock was granted."""
        session = self._ctx.session(pending.session)
        with trace_span(
            "lab.statement.resume",
            {
                "lab.session": session.name,
                "lab.statement": pending.statement.value,
                "lab.row": pending.resource_id,
            },
        ) as span:
            result = self._apply(session, pending, woken=True)
            span.set_attribute("lab.outcome", result.outcome.value)

        self._ctx.metrics.statements_total.labels(
            statement=pending.statement.value, outcome=result.outcome.value
        ).inc()
        return result

    def _dispatch(self, session: Session, statement: StatementType) -> StatementResult:
        if statement is StatementType.BEGIN:
            return self._begin(session)
        elif statement is StatementType.COMMIT:
            return self._commit(session)
        elif statement is StatementType.ROLLBACK:
            return self._rollback(session)
        elif statement in (
            StatementType.SELECT_PLAIN,
            StatementType.SELECT_SHARE,
            StatementType.SELECT_UPDATE,
            StatementType.UPDATE,
        ):
            return self._run_data_statement(session, statement)
        raise ValueError(f"Unsupported statement: {statement}")

    # Transaction control

    def _begin(self, session: Session) -> StatementResult:
        if session.active:
            raise TransactionAlreadyActive(session.name)
        if session.waiting_for is not None:
            raise SessionBlocked(session.name, session.waiting_for)

        # Only REPEATABLE-READ reads from the snapshot; the level cannot
        # change while the transaction is open.
        snapshot = (
            self._ctx.row_store.snapshot()
            if self._ctx.isolation_level is IsolationLevel.REPEATABLE_READ
            else None
        )
        session.start_transaction(snapshot)
        return self._finish_control(session, StatementType.BEGIN)

    def _commit(self, session: Session) -> StatementResult:
        if not session.active:
            raise NoActiveTransaction(session.name)

        if session.buffer:
            self._ctx.row_store.apply(session.buffer)
        released = self._ctx.lock_table.release(session.trx_id)
        session.end_transaction()
        self._ctx.metrics.transactions_total.labels(status="commit").inc()
        logger.debug("transaction_committed", session=session.name, locks_released=released)
        return self._finish_control(session, StatementType.COMMIT)

    def _rollback(self, session: Session, implicit: bool = False) -> StatementResult:
        if not session.active and not implicit:
            raise NoActiveTransaction(session.name)

        released = self._ctx.lock_table.release(session.trx_id)
        session.end_transaction()
        self._ctx.metrics.transactions_total.labels(status="rollback").inc()
        logger.debug(
            "transaction_rolled_back",
            session=session.name,
            locks_released=released,
            implicit=implicit,
        )
        return self._finish_control(session, StatementType.ROLLBACK)

    def _finish_control(self, session: Session, statement: StatementType) -> StatementResult:
        sql = sql_text(statement, session.target_id)
        session.last_sql = sql
        self._ctx.emit(session.name, sql, EventCategory.SQL)
        return StatementResult(
            session=session.name, statement=statement, outcome=StatementOutcome.OK, message=sql
        )

    # Data statements

    def _run_data_statement(
        self, session: Session, statement: StatementType
    ) -> StatementResult:
        if session.waiting_for is not None:
            raise SessionBlocked(session.name, session.waiting_for)

        target = session.target_id
        self._ctx.row_store.get(target)

        sql = sql_text(statement, target)
        session.last_sql = sql
        self._ctx.emit(session.name, sql, EventCategory.SQL)

        mode = required_lock(statement, self._ctx.isolation_level)
        pending = PendingStatement(
            kind=statement.operation(),
            session=session.name,
            resource_id=target,
            statement=statement,
            lock_mode=mode,
        )
        if mode is None:
            return self._apply(session, pending, woken=False)

        lock_table = self._ctx.lock_table
        check = lock_table.check_compatible(session.trx_id, target, mode)
        if check.compatible:
            lock_table.grant(session.trx_id, target, mode)
            self._ctx.metrics.lock_grants_total.labels(mode=mode.name).inc()
            return self._apply(session, pending, woken=False)

        assert check.conflict is not None
        holder = check.conflict.trx_id
        self._ctx.emit(
            session.name,
            f"(Blocked) waiting for {holder} to release ID={target}...",
            EventCategory.ERROR,
        )

        if self._ctx.detector.would_deadlock(session.trx_id, holder):
            return self._abort_deadlock(session, statement, Deadlock(session.trx_id, holder, target))

        lock_table.enqueue_wait(session.trx_id, target, mode, pending)
        session.waiting_for = target
        self._ctx.metrics.lock_waits_total.labels(mode=mode.name).inc()
        logger.debug(
            "lock_wait_enqueued", session=session.name, row=target, mode=mode.name, holder=holder
        )
        return StatementResult(
            session=session.name,
            statement=statement,
            outcome=StatementOutcome.BLOCKED,
            message=f"waiting for {holder}",
        )

    def _abort_deadlock(
        self, session: Session, statement: StatementType, error: Deadlock
    ) -> StatementResult:
        self._ctx.metrics.deadlocks_total.inc()
        self._ctx.emit(
            SYSTEM_SOURCE,
            f"{error}. Rolling back session {session.name} ({error.waiter}).",
            EventCategory.ERROR,
        )
        logger.warning(
            "deadlock_detected",
            victim=error.waiter,
            holder=error.holder,
            row=error.resource_id,
        )
        self._rollback(session, implicit=True)
        return StatementResult(
            session=session.name,
            statement=statement,
            outcome=StatementOutcome.DEADLOCK,
            message=str(error),
        )

    def _apply(self, session: Session, pending: PendingStatement, woken: bool) -> StatementResult:
        autocommit = session.autocommit
        if pending.kind is OperationKind.WRITE:
            row = self._write(session, pending.resource_id, autocommit)
        else:
            row = self._read(session, pending.resource_id, woken)

        if autocommit and pending.lock_mode is not None:
            self._ctx.lock_table.release(session.trx_id)

        return StatementResult(
            session=session.name,
            statement=pending.statement,
            outcome=StatementOutcome.OK,
            row=row,
        )

    def _read(self, session: Session, row_id: RowId, woken: bool) -> Row:
        committed = self._ctx.row_store.get(row_id)
        visible = self._ctx.resolver.visible_value(
            self._ctx.isolation_level, session.name, committed
        )
        if woken:
            message = f"(woken) => ID: {row_id}, Stock: {visible.stock}"
        else:
            message = f"=> ID: {row_id}, Name: {visible.name}, Stock: {visible.stock}"
        self._ctx.emit(session.name, message, EventCategory.RESULT)
        return visible

    def _write(self, session: Session, row_id: RowId, autocommit: bool) -> Row:
        """Apply ``stock = stock - 1`` as a current read.

        The new value is based on the session's own pending write, else
        the latest committed row, never on a stale snapshot.
        """
        committed = self._ctx.row_store.get(row_id)
        base = session.buffer.get(row_id, committed)
        updated = base.with_stock(base.stock - 1)

        seen = self._ctx.resolver.snapshot_value(
            self._ctx.isolation_level, session.name, committed
        )
        if seen.stock != base.stock:
            self._ctx.emit(
                session.name,
                f"Current read: ignoring snapshot value ({seen.stock}), "
                f"updating from latest value ({base.stock})",
                EventCategory.WARN,
            )

        if autocommit:
            self._ctx.row_store.apply({row_id: updated})
            mode = "Auto-Commit"
        else:
            session.buffer[row_id] = updated
            mode = "Buffer"
        self._ctx.emit(
            session.name,
            f"Query OK ({mode}), Stock: {base.stock} -> {updated.stock}",
            EventCategory.SUCCESS,
        )
        return updated
