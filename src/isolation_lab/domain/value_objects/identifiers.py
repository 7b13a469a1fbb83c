"""Identifiers for sessions, transactions and rows.

The lab only ever runs two client sessions, so session names are a closed
set ("A" and "B") and each session owns exactly one transaction id.
"""

from __future__ import annotations

from typing import Literal, NewType, get_args

SessionName = Literal["A", "B"]
"""Name of one of the two client session slots."""

SESSION_NAMES: tuple[SessionName, ...] = get_args(SessionName)

TransactionId = NewType("TransactionId", str)
"""Transaction identifier owned by a session, e.g. ``trx_A``."""

RowId = NewType("RowId", int)
"""Primary key of a row in the products table."""

SYSTEM_SOURCE = "SYSTEM"
"""Event source used for engine-level events."""


def transaction_id_for(session: SessionName) -> TransactionId:
    """Return the transaction id owned by a session slot."""
    return TransactionId(f"trx_{session}")


def session_for(trx_id: TransactionId) -> SessionName:
    """Return the session slot that owns a transaction id.

    Raises:
        ValueError: If the id does not belong to a known session.
    """
    name = trx_id.removeprefix("trx_")
    if name not in SESSION_NAMES:
        raise ValueError(f"Unknown transaction id: {trx_id}")
    return name  # type: ignore[return-value]


def other_session(session: SessionName) -> SessionName:
    """Return the name of the opposite session slot."""
    return "B" if session == "A" else "A"
