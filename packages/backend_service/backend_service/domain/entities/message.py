"""Inbound message and listener binding entities.

An inbound message is opaque to this service: the body and headers are kept
exactly as the transport delivered them and are only ever rendered as text.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class InboundMessage:
    """A message delivered by the messaging transport.

    Attributes:
        destination: Subject the message was delivered on
        body: Raw payload bytes, possibly empty
        headers: Transport headers, empty when none were sent
        reply: Reply subject set by the publisher, if any
    """

    destination: str
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    reply: str | None = None

    @classmethod
    def from_nats(cls, msg: Any) -> InboundMessage:
        """Wrap a ``nats.aio.msg.Msg`` without touching its payload."""
        return cls(
            destination=msg.subject,
            body=msg.data or b"",
            headers=dict(msg.headers or {}),
            reply=msg.reply or None,
        )

    @property
    def text(self) -> str:
        """Body decoded as UTF-8, undecodable bytes replaced."""
        return self.body.decode("utf-8", errors="replace")

    def __str__(self) -> str:
        # repr() escapes newlines, so a rendering is always a single line.
        return (
            f"InboundMessage(destination={self.destination!r}, reply={self.reply!r}, "
            f"headers={self.headers!r}, body={self.text!r})"
        )


MessageCallback = Callable[[InboundMessage], Awaitable[None]]


@dataclass(frozen=True)
class ListenerBinding:
    """Association between a destination and the callback receiving its messages."""

    destination: str
    callback: MessageCallback
