"""Application layer for the backend service."""

from .listener_registration import ListenerRegistration
from .message_sink import MessageSink

__all__ = ["ListenerRegistration", "MessageSink"]
