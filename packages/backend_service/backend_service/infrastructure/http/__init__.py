"""HTTP server infrastructure for the backend service."""

from .server import EmbeddedHTTPServer

__all__ = ["EmbeddedHTTPServer"]
