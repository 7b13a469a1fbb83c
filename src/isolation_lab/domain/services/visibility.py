"""Isolation policy resolver (a miniature MVCC).

Decides which version of a row a session observes:

    1. The session's own uncommitted write, if any.
    2. READ-UNCOMMITTED: the other session's uncommitted write (dirty read).
    3. REPEATABLE-READ inside a transaction: the BEGIN-time snapshot.
    4. Otherwise the committed row.

SERIALIZABLE uses rule 4; it differs from READ-COMMITTED only in that
plain reads take SHARED locks, which the statement executor handles.
"""

from __future__ import annotations

from typing import Mapping

from isolation_lab.domain.entities import Row, Session
from isolation_lab.domain.value_objects import (
    IsolationLevel,
    SessionName,
    other_session,
)


class IsolationPolicyResolver:
    """Resolves row visibility for a session under an isolation level."""

    def __init__(self, sessions: Mapping[SessionName, Session]) -> None:
        self._sessions = sessions

    def visible_value(
        self, level: IsolationLevel, session_name: SessionName, row: Row
    ) -> Row:
        """Return the version of ``row`` that the session currently sees.

        Args:
            level: The process-wide isolation level.
            session_name: The reading session.
            row: The committed version of the row.

        Returns:
            The visible row version.
        """
        session = self._sessions[session_name]
        own = session.buffer.get(row.id)
        if own is not None:
            return own

        if level is IsolationLevel.READ_UNCOMMITTED:
            dirty = self._sessions[other_session(session_name)].buffer.get(row.id)
            if dirty is not None:
                return dirty

        if level is IsolationLevel.REPEATABLE_READ and session.active:
            snapshot_row = session.snapshot_row(row.id)
            if snapshot_row is not None:
                return snapshot_row

        return row

    def snapshot_value(
        self, level: IsolationLevel, session_name: SessionName, row: Row
    ) -> Row:
        """Return the version a consistent read would base a write on.

        This is the session's own write if it has one, else its snapshot
        version under REPEATABLE-READ, else the committed row. UPDATE
        compares it with the live value to warn about current reads.
        """
        session = self._sessions[session_name]
        own = session.buffer.get(row.id)
        if own is not None:
            return own
        if level is IsolationLevel.REPEATABLE_READ and session.active:
            snapshot_row = session.snapshot_row(row.id)
            if snapshot_row is not None:
                return snapshot_row
        return row
