"""Application layer for the isolation lab.

The application layer orchestrates domain services to fulfil the
simulator's commands.

Exports:
    SimulationEngine:
        - SimulationEngine: Main entry point (command and output surface)
        - EngineSnapshot: Read-only state view for renderers
    Executor:
        - StatementExecutor: Interprets statements against the context
        - StatementResult, StatementOutcome: Outcome of a statement
    Scheduler:
        - WakeUpScheduler: Promotes waiting lock requests
    Context:
        - EngineContext: Owner of all simulation state
"""

from isolation_lab.application.context import EngineContext
from isolation_lab.application.engine import EngineSnapshot, SimulationEngine
from isolation_lab.application.executor import (
    StatementExecutor,
    StatementOutcome,
    StatementResult,
)
from isolation_lab.application.scheduler import WakeUpScheduler

__all__ = [
    "EngineContext",
    "EngineSnapshot",
    "SimulationEngine",
    "StatementExecutor",
    "StatementOutcome",
    "StatementResult",
    "WakeUpScheduler",
]
