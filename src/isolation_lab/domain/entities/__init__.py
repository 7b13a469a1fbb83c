"""Domain entities for the isolation lab.

Exports:
    Row:
        - Row: A products table row
        - INITIAL_PRODUCTS: Seed contents of the table

    Session:
        - Session: Per-slot transaction state (buffer, snapshot, wait)

    Locks:
        - LockRequest: Granted or waiting row lock
        - PendingStatement: Deferred effect of a blocked statement

    Events:
        - EngineEvent: Single event stream entry
        - EventLog: Bounded event log
"""

from isolation_lab.domain.entities.event import EngineEvent, EventLog
from isolation_lab.domain.entities.lock import LockRequest, PendingStatement
from isolation_lab.domain.entities.row import INITIAL_PRODUCTS, Row
from isolation_lab.domain.entities.session import Session

__all__ = [
    "Row",
    "INITIAL_PRODUCTS",
    "Session",
    "LockRequest",
    "PendingStatement",
    "EngineEvent",
    "EventLog",
]
