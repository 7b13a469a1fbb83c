"""Pytest configuration and fixtures for isolation_lab tests."""

from __future__ import annotations

from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from isolation_lab.adapters.outbound import MemoryEventSink
from isolation_lab.application import SimulationEngine
from isolation_lab.infrastructure.config import SimulationConfig
from isolation_lab.infrastructure.container import reset_container
from isolation_lab.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def collector_registry() -> CollectorRegistry:
    """Provide an isolated Prometheus registry."""
    return CollectorRegistry(auto_describe=True)


@pytest.fixture
def metrics_registry(collector_registry: CollectorRegistry) -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    return MetricsRegistry(registry=collector_registry)


@pytest.fixture
def sink() -> MemoryEventSink:
    """Provide an in-memory event sink."""
    return MemoryEventSink()


@pytest.fixture
def engine(metrics_registry: MetricsRegistry, sink: MemoryEventSink) -> SimulationEngine:
    """Provide an engine at its default level (REPEATABLE-READ)."""
    return SimulationEngine(metrics=metrics_registry, sinks=[sink])


@pytest.fixture
def make_engine(metrics_registry: MetricsRegistry, sink: MemoryEventSink):
    """Factory for engines started at a given isolation level."""

    def _make(level: str = "REPEATABLE-READ") -> SimulationEngine:
        config = SimulationConfig(default_isolation_level=level)
        return SimulationEngine(config=config, metrics=metrics_registry, sinks=[sink])

    return _make


@pytest.fixture
def clean_container() -> Generator[None, None, None]:
    """Reset the global DI container around a test."""
    reset_container()
    yield
    reset_container()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
