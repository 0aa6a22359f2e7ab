"""Infrastructure layer for the backend service."""
