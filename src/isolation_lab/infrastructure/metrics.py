"""Prometheus metrics for the isolation lab."""

from __future__ import annotations

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Info,
    start_http_server,
)


class MetricsRegistry:
    """Registry of all simulation engine metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Statement metrics
        self.statements_total = Counter(
            "lab_statements_total",
            "Total number of statements issued",
            ["statement", "outcome"],  # outcome: ok, blocked, rejected, deadlock
            registry=self._registry,
        )

        # Transaction metrics
        self.transactions_total = Counter(
            "lab_transactions_total",
            "Total number of finished transactions",
            ["status"],  # commit, rollback
            registry=self._registry,
        )

        self.transactions_active = Gauge(
            "lab_transactions_active",
            "Number of sessions with an open transaction",
            registry=self._registry,
        )

        # Lock metrics
        self.lock_grants_total = Counter(
            "lab_lock_grants_total",
            "Total row locks granted",
            ["mode"],  # SHARED, EXCLUSIVE
            registry=self._registry,
        )

        self.lock_waits_total = Counter(
            "lab_lock_waits_total",
            "Total lock requests that had to wait",
            ["mode"],
            registry=self._registry,
        )

        self.lock_waiting = Gauge(
            "lab_lock_waiting",
            "Number of lock requests currently waiting",
            registry=self._registry,
        )

        self.wakeups_total = Counter(
            "lab_wakeups_total",
            "Total waiting requests promoted by the scheduler",
            registry=self._registry,
        )

        self.deadlocks_total = Counter(
            "lab_deadlocks_total",
            "Total number of deadlocks detected",
            registry=self._registry,
        )

        self.info = Info(
            "isolation_lab",
            "Isolation lab information",
            registry=self._registry,
        )


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from isolation_lab import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
