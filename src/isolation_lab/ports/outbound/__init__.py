"""Outbound ports for the isolation lab.

Outbound ports define interfaces for what the engine pushes out to
external collaborators.

Exports:
    - EventSink: Consumer of the engine event stream
"""

from isolation_lab.ports.outbound.event_sink import EventSink

__all__ = ["EventSink"]
