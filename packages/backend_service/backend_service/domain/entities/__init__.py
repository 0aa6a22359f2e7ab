"""Domain entities."""

from .message import InboundMessage, ListenerBinding, MessageCallback

__all__ = ["InboundMessage", "ListenerBinding", "MessageCallback"]
