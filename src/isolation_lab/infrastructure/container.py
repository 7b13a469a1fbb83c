"""Dependency injection container and application wiring."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from prometheus_client import CollectorRegistry

from isolation_lab.infrastructure.config import Config

T = TypeVar("T")


class Container:
    """
    Simple dependency injection container.

    Supports singleton and factory registrations with lazy initialization.
    """

    def __init__(self) -> None:
        """Initialize the container."""
        self._factories: dict[type, Callable[[Container], Any]] = {}
        self._instances: dict[type, Any] = {}

    def register_singleton(self, interface: type[T], instance: T) -> None:
        """
        Register a singleton instance.

        Args:
            interface: The interface/type to register
            instance: The singleton instance
        """
        self._instances[interface] = instance

    def register_factory(
        self,
        interface: type[T],
        factory: Callable[[Container], T],
    ) -> None:
        """
        Register a factory function for lazy instantiation.

        The factory runs once; later resolutions return the same instance.

        Args:
            interface: The interface/type to register
            factory: Factory function that takes the container and returns an instance
        """
        self._factories[interface] = factory

    def resolve(self, interface: type[T]) -> T:
        """
        Resolve a dependency.

        Args:
            interface: The interface/type to resolve

        Returns:
            The resolved instance

        Raises:
            KeyError: If no registration exists for the interface
        """
        if interface in self._instances:
            return self._instances[interface]

        if interface in self._factories:
            instance = self._factories[interface](self)
            self._instances[interface] = instance
            return instance

        raise KeyError(f"No registration found for {interface}")

    def has(self, interface: type) -> bool:
        """Check if an interface is registered."""
        return interface in self._factories or interface in self._instances

    def clear(self) -> None:
        """Clear all registrations and instances."""
        self._factories.clear()
        self._instances.clear()


def build_container(
    config: Config,
    start_exporters: bool = False,
    registry: CollectorRegistry | None = None,
) -> Container:
    """
    Wire configuration, observability and the engine into a container.

    Args:
        config: Application configuration
        start_exporters: Configure logging and tracing, and start the
            Prometheus HTTP server
        registry: Optional custom Prometheus registry

    Returns:
        A container resolving Config, MetricsRegistry, SimulationEngine
        and SimulationPort
    """
    from isolation_lab.adapters.outbound import StructlogEventSink
    from isolation_lab.application import SimulationEngine
    from isolation_lab.infrastructure.logging import setup_logging_from_config
    from isolation_lab.infrastructure.metrics import (
        MetricsRegistry,
        get_metrics,
        setup_metrics,
    )
    from isolation_lab.infrastructure.tracing import setup_tracing_from_config
    from isolation_lab.ports.inbound import SimulationPort

    container = Container()
    container.register_singleton(Config, config)

    if start_exporters:
        setup_logging_from_config(config.observability)
        setup_tracing_from_config(config.observability)
        container.register_singleton(
            MetricsRegistry, setup_metrics(config.server.metrics_port, registry)
        )
    elif registry is not None:
        container.register_factory(MetricsRegistry, lambda c: MetricsRegistry(registry))
    else:
        container.register_factory(MetricsRegistry, lambda c: get_metrics())

    container.register_factory(
        SimulationEngine,
        lambda c: SimulationEngine(
            config=c.resolve(Config).simulation,
            metrics=c.resolve(MetricsRegistry),
            sinks=[StructlogEventSink()],
        ),
    )
    container.register_factory(SimulationPort, lambda c: c.resolve(SimulationEngine))
    return container


# Global container instance
_container: Container | None = None


def get_container() -> Container:
    """Get the global container instance."""
    global _container
    if _container is None:
        _container = build_container(Config())
    return _container


def reset_container() -> None:
    """Reset the global container (useful for testing)."""
    global _container
    if _container is not None:
        _container.clear()
    _container = None
