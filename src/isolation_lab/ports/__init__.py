"""Ports layer for the isolation lab.

Ports define the interfaces between the application core and the
outside world (hexagonal architecture).

Inbound ports:
    - SimulationPort: Commands issued by input sources

Outbound ports:
    - EventSink: Receiver of the engine event stream
"""

from isolation_lab.ports.inbound import SimulationPort
from isolation_lab.ports.outbound import EventSink

__all__ = ["SimulationPort", "EventSink"]
