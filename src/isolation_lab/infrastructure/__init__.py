"""Infrastructure layer - cross-cutting concerns."""

from isolation_lab.infrastructure.config import Config, get_config
from isolation_lab.infrastructure.logging import get_logger, setup_logging
from isolation_lab.infrastructure.metrics import MetricsRegistry, setup_metrics
from isolation_lab.infrastructure.tracing import (
    get_tracer,
    setup_tracing,
    setup_tracing_from_config,
)

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "setup_tracing_from_config",
]
