"""Unit tests for configuration and dependency wiring."""

from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry

from isolation_lab.application import SimulationEngine
from isolation_lab.domain.value_objects import IsolationLevel
from isolation_lab.infrastructure.config import (
    Config,
    ObservabilityConfig,
    SimulationConfig,
    get_config,
)
from isolation_lab.infrastructure.container import Container, build_container, get_container
from isolation_lab.infrastructure.metrics import MetricsRegistry
from isolation_lab.infrastructure.tracing import get_tracer, setup_tracing_from_config
from isolation_lab.ports.inbound import SimulationPort


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = Config()

        assert config.simulation.default_isolation_level is IsolationLevel.REPEATABLE_READ
        assert config.simulation.event_log_capacity == 50
        assert config.simulation.default_target_row == 1
        assert config.server.port == 8000
        assert config.server.metrics_port == 8001
        assert config.observability.log_format == "json"

    def test_isolation_level_from_string(self) -> None:
        """Isolation levels accept the usual spellings."""
        config = SimulationConfig(default_isolation_level="read committed")

        assert config.default_isolation_level is IsolationLevel.READ_COMMITTED

    def test_invalid_isolation_level(self) -> None:
        with pytest.raises(ValueError):
            SimulationConfig(default_isolation_level="CHAOS")

    def test_invalid_event_log_capacity(self) -> None:
        """Test that a zero-length event log is rejected."""
        with pytest.raises(ValueError):
            SimulationConfig(event_log_capacity=0)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested settings are read from prefixed environment variables."""
        monkeypatch.setenv("ISOLATION_LAB_SIMULATION__DEFAULT_ISOLATION_LEVEL", "SERIALIZABLE")
        monkeypatch.setenv("ISOLATION_LAB_SERVER__PORT", "9000")

        config = Config()

        assert config.simulation.default_isolation_level is IsolationLevel.SERIALIZABLE
        assert config.server.port == 9000

    def test_get_config_cached(self) -> None:
        """Test that get_config returns cached instance."""
        get_config.cache_clear()
        config1 = get_config()
        config2 = get_config()

        assert config1 is config2
        get_config.cache_clear()


@pytest.mark.unit
class TestContainer:
    """Tests for the dependency injection container."""

    def test_singleton_and_factory(self) -> None:
        container = Container()
        container.register_singleton(str, "value")
        calls: list[int] = []
        container.register_factory(int, lambda c: calls.append(1) or len(calls))

        assert container.resolve(str) == "value"
        assert container.resolve(int) == 1
        assert container.resolve(int) == 1
        assert calls == [1]

    def test_missing_registration(self) -> None:
        with pytest.raises(KeyError):
            Container().resolve(float)

    def test_clear(self) -> None:
        container = Container()
        container.register_singleton(str, "value")
        container.clear()

        assert not container.has(str)

    def test_build_container(self, collector_registry: CollectorRegistry) -> None:
        """The built container wires the configured engine."""
        config = Config(
            simulation=SimulationConfig(default_isolation_level="READ-UNCOMMITTED")
        )

        container = build_container(config, registry=collector_registry)
        engine = container.resolve(SimulationEngine)

        assert engine.isolation_level is IsolationLevel.READ_UNCOMMITTED
        assert container.resolve(SimulationPort) is engine  # type: ignore[type-abstract]
        assert isinstance(engine, SimulationPort)
        assert isinstance(container.resolve(MetricsRegistry), MetricsRegistry)

    def test_global_container(self, clean_container: None) -> None:
        assert get_container() is get_container()


@pytest.mark.unit
class TestObservabilitySetup:
    """Tracing is configured from the observability section."""

    def test_setup_tracing_from_config(self) -> None:
        config = ObservabilityConfig(otel_service_name="isolation_lab_test")

        tracer = setup_tracing_from_config(config)

        assert tracer is get_tracer()
        with tracer.start_as_current_span("lab.test") as span:
            assert span.is_recording()
