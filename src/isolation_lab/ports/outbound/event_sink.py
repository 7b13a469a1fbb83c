"""Event sink port.

Renderers and audit consumers receive every engine event through this
port, in the order the engine emits them.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from isolation_lab.domain.entities import EngineEvent


class EventSink(Protocol):
    """Protocol for consumers of the engine event stream."""

    @abstractmethod
    def publish(self, event: EngineEvent) -> None:
        """Receive one event.

        Called synchronously inside the statement that produced the
        event; implementations must not call back into the engine.
        """
        ...
