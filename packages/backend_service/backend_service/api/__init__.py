"""HTTP API for the backend service."""

from .http_app import create_http_app

__all__ = ["create_http_app"]
