"""Adapters layer for the isolation lab.

Adapters implement the ports defined in the ports layer.

Inbound adapters:
    - rest_api: FastAPI command and state endpoints

Outbound adapters:
    - StructlogEventSink: Event stream to structured logs
    - MemoryEventSink: In-memory event collector
"""

from isolation_lab.adapters.outbound import MemoryEventSink, StructlogEventSink

__all__ = ["MemoryEventSink", "StructlogEventSink"]
