"""Message sink writing every received message to the diagnostic stream."""

from __future__ import annotations

import sys
from typing import TextIO

from backend_service.domain.entities.message import InboundMessage
from backend_service.infrastructure.logging import get_logger

logger = get_logger(__name__)


class MessageSink:
    """Render inbound messages as one line each on standard error.

    Messages are accepted as-is, including empty or undecodable bodies. Any
    failure while rendering or writing propagates to the caller.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize the sink.

        Args:
            stream: Target stream; ``None`` means whatever ``sys.stderr`` is at write time
        """
        self._stream = stream
        self.invocations = 0

    @property
    def stream(self) -> TextIO:
        """Stream the next message will be written to."""
        return self._stream if self._stream is not None else sys.stderr

    async def __call__(self, message: InboundMessage) -> None:
        stream = self.stream
        stream.write(f"{message}\n")
        stream.flush()
        self.invocations += 1

        logger.debug(
            "Message written to diagnostic stream",
            extra={
                "destination": message.destination,
                "body_size": len(message.body),
            },
        )
