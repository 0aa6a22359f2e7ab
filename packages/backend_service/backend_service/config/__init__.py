"""Configuration package for the backend service."""

from .config import BackendConfig, get_config, reload_config

__all__ = ["BackendConfig", "get_config", "reload_config"]
