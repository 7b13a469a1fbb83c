"""Configuration management for the isolation lab."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from isolation_lab.domain.value_objects import IsolationLevel


class SimulationConfig(BaseModel):
    """Simulation engine configuration."""

    default_isolation_level: IsolationLevel = Field(
        default=IsolationLevel.REPEATABLE_READ,
        description="Isolation level the engine starts with",
    )
    event_log_capacity: int = Field(
        default=50, ge=1, le=1000, description="Number of events kept for display"
    )
    default_target_row: int = Field(
        default=1, ge=1, description="Row each session targets after start or reset"
    )

    @field_validator("default_isolation_level", mode="before")
    @classmethod
    def _parse_level(cls, value: object) -> object:
        if isinstance(value, str):
            return IsolationLevel.parse(value)
        return value


class ServerConfig(BaseModel):
    """REST server configuration."""

    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")
    metrics_port: int = Field(default=8001, ge=1, le=65535, description="Prometheus metrics port")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="isolation_lab", description="Service name for tracing")


class Config(BaseSettings):
    """Main configuration for the isolation lab."""

    model_config = SettingsConfigDict(
        env_prefix="ISOLATION_LAB_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
