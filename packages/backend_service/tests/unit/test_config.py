"""Unit tests for configuration management."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from backend_service.config import BackendConfig, get_config, reload_config
from backend_service.config.config import MessagingConfig
from backend_service.infrastructure.logging import LogLevel
from pydantic import ValidationError


class TestBackendConfig:
    """Test configuration functionality."""

    def test_default_configuration(self) -> None:
        """Test that default configuration values are loaded correctly."""
        config = BackendConfig()

        assert config.service.name == "backend"
        assert config.service.host == "127.0.0.1"
        assert config.service.port == 0
        assert config.service.startup_timeout == 10.0

        assert config.messaging.servers == ["nats://localhost:4222"]
        assert config.messaging.destination == "backend"
        assert config.messaging.reconnect_time_wait == 2
        assert config.messaging.max_reconnect_attempts == 10

        assert config.logging.level == LogLevel.INFO
        assert config.logging.json_format is False

    def test_environment_variable_override(self) -> None:
        """Test that environment variables override defaults."""
        env = {
            "BACKEND_SERVICE__NAME": "backend-2",
            "BACKEND_SERVICE__PORT": "8081",
            "BACKEND_MESSAGING__DESTINATION": "orders",
            "BACKEND_MESSAGING__SERVERS": '["nats://a:4222", "nats://b:4222"]',
            "BACKEND_LOGGING__LEVEL": "DEBUG",
        }
        with patch.dict(os.environ, env):
            config = BackendConfig()

        assert config.service.name == "backend-2"
        assert config.service.port == 8081
        assert config.messaging.destination == "orders"
        assert config.messaging.servers == ["nats://a:4222", "nats://b:4222"]
        assert config.logging.level == LogLevel.DEBUG

    @pytest.mark.parametrize("port", ["-1", "65536"])
    def test_port_out_of_range(self, port: str) -> None:
        """Test that invalid ports are rejected."""
        with patch.dict(os.environ, {"BACKEND_SERVICE__PORT": port}), pytest.raises(
            ValidationError
        ):
            BackendConfig()

    @pytest.mark.parametrize("destination", ["", "has space", "tab\tbed"])
    def test_invalid_destination(self, destination: str) -> None:
        """Test that unusable destinations are rejected."""
        with pytest.raises(ValidationError):
            MessagingConfig(destination=destination)

    def test_invalid_destination_from_environment(self) -> None:
        """Test that destination validation also applies to environment values."""
        with patch.dict(os.environ, {"BACKEND_MESSAGING__DESTINATION": "a b"}):
            with pytest.raises(ValidationError):
                BackendConfig()

    def test_logging_section_converts(self) -> None:
        """Test conversion to the infrastructure logging config."""
        config = BackendConfig()
        logging_config = config.logging.to_logging_config()
        assert logging_config.level == LogLevel.INFO
        assert logging_config.json_format is False

    def test_log_file_from_environment(self, tmp_path: Path) -> None:
        """Test that file logging is reachable through the environment."""
        log_file = tmp_path / "backend.log"
        env = {
            "BACKEND_LOGGING__FILE_PATH": str(log_file),
            "BACKEND_LOGGING__BACKUP_COUNT": "2",
        }
        with patch.dict(os.environ, env):
            config = BackendConfig()

        logging_config = config.logging.to_logging_config("audit")
        assert logging_config.file_path == log_file
        assert logging_config.backup_count == 2
        assert logging_config.max_bytes == 10_485_760
        assert logging_config.service_name == "audit"


class TestConfigCache:
    """Test the cached accessors."""

    def test_get_config_is_cached(self) -> None:
        """Test that get_config returns the same instance."""
        reload_config()
        assert get_config() is get_config()

    def test_reload_config_picks_up_environment(self) -> None:
        """Test that reload_config re-reads the environment."""
        with patch.dict(os.environ, {"BACKEND_SERVICE__NAME": "reloaded"}):
            config = reload_config()
        assert config.service.name == "reloaded"

        reload_config()
        assert get_config().service.name == "backend"
