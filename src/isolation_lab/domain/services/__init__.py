"""Domain services for the simulation engine.

Services implement domain logic that doesn't naturally fit within a
single entity: the committed table, visibility rules, row locking and
deadlock detection.
"""

from isolation_lab.domain.services.deadlock_detector import DeadlockDetector
from isolation_lab.domain.services.lock_manager import LockCheck, LockTable
from isolation_lab.domain.services.row_store import RowStore
from isolation_lab.domain.services.visibility import IsolationPolicyResolver

__all__ = [
    "DeadlockDetector",
    "IsolationPolicyResolver",
    "LockCheck",
    "LockTable",
    "RowStore",
]
