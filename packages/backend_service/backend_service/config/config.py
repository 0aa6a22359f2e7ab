"""Centralized configuration management for the backend service.

Defaults describe the stock deployment: service name ``backend``, an
OS-assigned HTTP port and a single listener on the ``backend`` destination.
Every value can be overridden through environment variables or a ``.env``
file, and the CLI applies its startup flags on top.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backend_service.infrastructure.logging import LoggingConfig, LogLevel


class ServiceConfig(BaseModel):
    """Service identity and HTTP listener configuration."""

    name: str = Field(
        default="backend", min_length=1, description="Service name advertised to the host"
    )

    host: str = Field(default="127.0.0.1", description="Interface the HTTP listener binds to")

    port: int = Field(
        default=0, ge=0, le=65535, description="HTTP listener port (0 = OS-assigned)"
    )

    startup_timeout: float = Field(
        default=10.0, gt=0, le=120, description="Seconds to wait for the HTTP listener"
    )


class MessagingConfig(BaseModel):
    """Messaging transport configuration."""

    servers: list[str] = Field(
        default_factory=lambda: ["nats://localhost:4222"],
        min_length=1,
        description="NATS server URLs",
    )

    destination: str = Field(
        default="backend", description="Destination the message listener subscribes to"
    )

    reconnect_time_wait: int = Field(
        default=2, ge=1, le=30, description="NATS reconnect wait time in seconds"
    )

    max_reconnect_attempts: int = Field(
        default=10, ge=1, le=100, description="NATS maximum reconnect attempts"
    )

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        """Reject empty destinations and destinations containing whitespace."""
        if not v or any(ch.isspace() for ch in v):
            raise ValueError("destination must be a non-empty subject without whitespace")
        return v


class BackendLoggingConfig(BaseModel):
    """Logging settings exposed through the environment."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Global log level")

    json_format: bool = Field(default=False, description="Emit structured JSON logs")

    file_path: Path | None = Field(
        default=None, description="Also write logs to this rotating file"
    )

    max_bytes: int = Field(default=10_485_760, gt=0, description="Log file rotation size")

    backup_count: int = Field(default=5, ge=0, le=100, description="Rotated log files kept")

    def to_logging_config(self, service_name: str = "backend") -> LoggingConfig:
        """Build the infrastructure logging configuration."""
        return LoggingConfig(
            level=self.level,
            json_format=self.json_format,
            service_name=service_name,
            file_path=self.file_path,
            max_bytes=self.max_bytes,
            backup_count=self.backup_count,
        )


class BackendConfig(BaseSettings):
    """Main service configuration.

    All configuration values can be overridden using environment variables
    with the prefix BACKEND_ (e.g., BACKEND_MESSAGING__DESTINATION).
    """

    model_config = SettingsConfigDict(
        env_prefix="BACKEND_",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    messaging: MessagingConfig = Field(default_factory=MessagingConfig)
    logging: BackendLoggingConfig = Field(default_factory=BackendLoggingConfig)


@lru_cache(maxsize=1)
def get_config() -> BackendConfig:
    """Get the singleton configuration instance.

    Returns:
        BackendConfig: The configuration instance
    """
    return BackendConfig()


def reload_config() -> BackendConfig:
    """Reload configuration from environment.

    This clears the cache and creates a new configuration instance.

    Returns:
        BackendConfig: The new configuration instance
    """
    get_config.cache_clear()
    return get_config()
