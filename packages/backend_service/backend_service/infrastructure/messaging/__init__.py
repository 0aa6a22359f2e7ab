"""Messaging infrastructure for the backend service."""

from __future__ import annotations

from .nats_client import NATSClient

__all__ = ["NATSClient"]
