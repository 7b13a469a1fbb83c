"""Event sink adapters.

- StructlogEventSink: mirrors the event stream into structured logs.
- MemoryEventSink: keeps every event in order (tests, embedding).
"""

from __future__ import annotations

import structlog

from isolation_lab.domain.entities import EngineEvent
from isolation_lab.domain.value_objects import EventCategory
from isolation_lab.infrastructure.logging import get_logger

_LOG_METHODS = {
    EventCategory.INFO: "info",
    EventCategory.SQL: "info",
    EventCategory.RESULT: "info",
    EventCategory.SUCCESS: "info",
    EventCategory.WARN: "warning",
    EventCategory.ERROR: "error",
}


class StructlogEventSink:
    """Writes each engine event as a structured log line."""

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self._logger = logger or get_logger("isolation_lab.events")

    def publish(self, event: EngineEvent) -> None:
        log = getattr(self._logger, _LOG_METHODS[event.category])
        log(
            "engine_event",
            source=event.source,
            category=event.category.value,
            message=event.message,
        )


class MemoryEventSink:
    """Collects every published event, oldest first, without a bound."""

    def __init__(self) -> None:
        self.events: list[EngineEvent] = []

    def publish(self, event: EngineEvent) -> None:
        self.events.append(event)

    def messages(self, source: str | None = None) -> list[str]:
        """Messages in publish order, optionally filtered by source."""
        return [e.message for e in self.events if source is None or e.source == source]

    def clear(self) -> None:
        self.events.clear()
