"""Engine events and the bounded event log.

Events are the audit/console stream renderers display. The log keeps
only the most recent entries.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator

from isolation_lab.domain.value_objects import EventCategory


@dataclass(frozen=True)
class EngineEvent:
    """Single entry of the event stream."""

    source: str  # Session name or SYSTEM
    message: str
    category: EventCategory = EventCategory.INFO
    time: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for renderers."""
        return {
            "time": self.time.strftime("%H:%M:%S"),
            "source": self.source,
            "message": self.message,
            "category": self.category.value,
        }


class EventLog:
    """Bounded, append-only event log."""

    def __init__(self, capacity: int = 50) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._events: deque[EngineEvent] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._events.maxlen or 0

    def append(self, event: EngineEvent) -> None:
        self._events.append(event)

    def clear(self) -> None:
        self._events.clear()

    def newest_first(self) -> list[EngineEvent]:
        """Events in display order, most recent first."""
        return list(reversed(self._events))

    def __iter__(self) -> Iterator[EngineEvent]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)
