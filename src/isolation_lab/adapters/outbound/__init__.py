"""Outbound adapters for the isolation lab.

Exports:
    - StructlogEventSink: Event stream to structured logs
    - MemoryEventSink: In-memory event collector
"""

from isolation_lab.adapters.outbound.event_sinks import MemoryEventSink, StructlogEventSink

__all__ = ["MemoryEventSink", "StructlogEventSink"]
