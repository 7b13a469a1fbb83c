"""Inbound ports for the isolation lab.

Exports:
    - SimulationPort: Command and output surface of the simulator
"""

from isolation_lab.ports.inbound.simulation_port import SimulationPort

__all__ = ["SimulationPort"]
