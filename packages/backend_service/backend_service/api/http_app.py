"""HTTP application served by the backend service."""

from __future__ import annotations

from fastapi import FastAPI

from backend_service.version import __version__


def create_http_app(service_name: str) -> FastAPI:
    """Create the HTTP application for the service.

    The application defines no routes and has the generated documentation
    endpoints switched off, so every request is answered with 404.

    Args:
        service_name: Service identity, used as the application title

    Returns:
        FastAPI application without endpoints
    """
    return FastAPI(
        title=service_name,
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
