"""Domain layer for the backend service."""
