"""Wake-up scheduler for waiting lock requests.

Runs after every statement. Each pass looks only at the oldest WAITING
request (FIFO by request time). If it is now compatible it is promoted
to GRANTED, its session stops waiting, and its deferred statement runs.

A promotion changes the lock table, so the scheduler passes again until
the oldest waiter is still blocked or the queue is empty. A younger
waiter never overtakes an older one, even when only the younger one
could be granted.
"""

from __future__ import annotations

from typing import Callable

from isolation_lab.application.context import EngineContext
from isolation_lab.domain.entities import LockRequest, PendingStatement
from isolation_lab.domain.value_objects import EventCategory, session_for
from isolation_lab.infrastructure.logging import get_logger

logger = get_logger(__name__)

Resume = Callable[[PendingStatement], object]


class WakeUpScheduler:
    """Promotes waiting requests once their lock becomes available."""

    def __init__(self, context: EngineContext, resume: Resume) -> None:
        """Initialize the scheduler.

        Args:
            context: The engine context.
            resume: Runs the deferred effect of a promoted request.
        """
        self._ctx = context
        self._resume = resume

    def run_pass(self) -> LockRequest | None:
        """Try to wake the oldest waiter once.

        Returns:
            The promoted request, or None if nothing was woken.
        """
        waiting = self._ctx.lock_table.waiting_requests()
        if not waiting:
            return None

        candidate = waiting[0]
        check = self._ctx.lock_table.check_compatible(
            candidate.trx_id, candidate.resource_id, candidate.mode
        )
        if not check.compatible:
            return None

        self._ctx.lock_table.promote(candidate)
        session = self._ctx.session(session_for(candidate.trx_id))
        session.waiting_for = None
        self._ctx.metrics.wakeups_total.inc()
        self._ctx.metrics.lock_grants_total.labels(mode=candidate.mode.name).inc()
        self._ctx.emit(
            session.name,
            f"Acquired lock on ID={candidate.resource_id}",
            EventCategory.SUCCESS,
        )
        logger.debug(
            "lock_wait_granted",
            session=session.name,
            row=candidate.resource_id,
            mode=candidate.mode.name,
        )

        if candidate.continuation is not None:
            self._resume(candidate.continuation)
        return candidate

    def run(self) -> int:
        """Pass repeatedly until no waiter can be woken.

        Returns:
            Number of requests promoted.
        """
        promoted = 0
        while self.run_pass() is not None:
            promoted += 1
        if promoted:
            self._ctx.refresh_gauges()
        return promoted
