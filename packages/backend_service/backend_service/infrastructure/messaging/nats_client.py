"""NATS client for messaging infrastructure."""

from __future__ import annotations

from typing import Any

import nats
from nats.aio.client import Client as NATSConnection
from nats.aio.msg import Msg
from nats.aio.subscription import Subscription

from backend_service.domain.entities.message import InboundMessage, MessageCallback
from backend_service.domain.exceptions import (
    ConnectionError as BackendConnectionError,
)
from backend_service.infrastructure.logging import get_logger

logger = get_logger(__name__)


class NATSClient:
    """NATS client for handling messaging operations.

    Payloads are passed through as raw bytes in both directions; the client
    adds no serialization layer of its own.
    """

    def __init__(
        self,
        servers: list[str] | str = "nats://localhost:4222",
        name: str = "backend",
        reconnect_time_wait: int = 2,
        max_reconnect_attempts: int = 10,
    ) -> None:
        """Initialize the NATS client.

        Args:
            servers: NATS server URLs
            name: Client name, advertised to the server as the service identity
            reconnect_time_wait: Time to wait between reconnection attempts
            max_reconnect_attempts: Maximum number of reconnection attempts
        """
        self.servers = servers if isinstance(servers, list) else [servers]
        self.name = name
        self.reconnect_time_wait = reconnect_time_wait
        self.max_reconnect_attempts = max_reconnect_attempts
        self._nc: NATSConnection | None = None
        self._subscriptions: dict[str, Subscription] = {}
        self._connected = False

    async def connect(self) -> None:
        """Connect to NATS server."""
        if self._connected:
            logger.warning("NATS client already connected")
            return

        try:
            self._nc = await nats.connect(
                servers=self.servers,
                name=self.name,
                reconnect_time_wait=self.reconnect_time_wait,
                max_reconnect_attempts=self.max_reconnect_attempts,
                error_cb=self._error_callback,
                disconnected_cb=self._disconnected_callback,
                reconnected_cb=self._reconnected_callback,
                closed_cb=self._closed_callback,
            )
            self._connected = True
            logger.info(
                "Connected to NATS server",
                extra={
                    "servers": self.servers,
                    "client_name": self.name,
                },
            )
        except Exception as e:
            logger.error(
                "Failed to connect to NATS server",
                exc_info=e,
                extra={"servers": self.servers},
            )
            raise BackendConnectionError(
                service="NATS",
                endpoint=str(self.servers),
                reason=str(e),
            ) from e

    async def disconnect(self) -> None:
        """Disconnect from NATS server.

        Works while the connection is down and reconnecting: subscriptions are
        dropped and the underlying connection is closed, which also stops its
        reconnect loop.
        """
        if not self.has_connection:
            logger.warning("NATS client not connected")
            return

        try:
            for subject in list(self._subscriptions):
                await self.unsubscribe(subject)
        finally:
            self._subscriptions.clear()
            await self._nc.close()  # type: ignore[union-attr]
            self._connected = False
            logger.info("Disconnected from NATS server")

    async def publish(
        self,
        subject: str,
        data: bytes | str,
        reply: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Publish a message to a subject.

        Args:
            subject: Subject to publish to
            data: Payload; strings are sent UTF-8 encoded
            reply: Optional reply subject
            headers: Optional headers
        """
        self._ensure_connected()

        payload = data.encode("utf-8") if isinstance(data, str) else data

        publish_kwargs: dict[str, Any] = {
            "subject": subject,
            "payload": payload,
            "headers": headers,
        }
        if reply is not None:
            publish_kwargs["reply"] = reply

        try:
            await self._nc.publish(**publish_kwargs)  # type: ignore[union-attr]
            await self._nc.flush()  # type: ignore[union-attr]
        except Exception as e:
            logger.error(
                "Failed to publish message",
                exc_info=e,
                extra={"subject": subject},
            )
            raise

        logger.debug(
            "Published message",
            extra={
                "subject": subject,
                "payload_size": len(payload),
                "reply": reply,
            },
        )

    async def subscribe(
        self,
        subject: str,
        callback: MessageCallback,
        queue: str | None = None,
    ) -> None:
        """Subscribe to a subject.

        Every delivered message is wrapped in an :class:`InboundMessage` and
        handed to ``callback`` unchanged. Callback failures are logged here and
        are not retried. Subscribing again to a subject replaces the previous
        subscription, so each subject has at most one live subscription.

        Args:
            subject: Subject to subscribe to
            callback: Async callback receiving the inbound message
            queue: Optional queue group name
        """
        self._ensure_connected()

        if subject in self._subscriptions:
            logger.warning(
                "Replacing existing subscription",
                extra={"subject": subject},
            )
            await self.unsubscribe(subject)

        async def message_handler(msg: Msg) -> None:
            try:
                await callback(InboundMessage.from_nats(msg))
            except Exception as e:
                logger.error(
                    "Error handling message",
                    exc_info=e,
                    extra={
                        "subject": subject,
                        "reply": msg.reply,
                    },
                )

        if queue is not None:
            subscription = await self._nc.subscribe(  # type: ignore[union-attr]
                subject=subject,
                cb=message_handler,
                queue=queue,
            )
        else:
            subscription = await self._nc.subscribe(  # type: ignore[union-attr]
                subject=subject,
                cb=message_handler,
            )

        self._subscriptions[subject] = subscription

        logger.info(
            "Subscribed to subject",
            extra={
                "subject": subject,
                "queue": queue,
            },
        )

    async def unsubscribe(self, subject: str) -> None:
        """Unsubscribe from a subject.

        Args:
            subject: Subject to unsubscribe from
        """
        subscription = self._subscriptions.pop(subject, None)
        if subscription is None:
            logger.warning(
                "Attempted to unsubscribe from unknown subject",
                extra={"subject": subject},
            )
            return

        await subscription.unsubscribe()
        logger.info(
            "Unsubscribed from subject",
            extra={"subject": subject},
        )

    def _ensure_connected(self) -> None:
        if not self._connected or not self._nc:
            raise BackendConnectionError(
                service="NATS",
                endpoint=str(self.servers),
                reason="Not connected",
            )

    async def _error_callback(self, e: Exception) -> None:
        """Handle NATS errors."""
        logger.error("NATS error", exc_info=e)

    async def _disconnected_callback(self) -> None:
        """Handle NATS disconnection."""
        self._connected = False
        logger.warning("Disconnected from NATS server")

    async def _reconnected_callback(self) -> None:
        """Handle NATS reconnection."""
        self._connected = True
        logger.info("Reconnected to NATS server")

    async def _closed_callback(self) -> None:
        """Handle NATS connection closure."""
        self._connected = False
        logger.info("NATS connection closed")

    @property
    def is_connected(self) -> bool:
        """Check if client is connected."""
        return self._connected

    @property
    def has_connection(self) -> bool:
        """Check if an underlying connection exists and has not been closed.

        Stays true while the client is disconnected and reconnecting.
        """
        return self._nc is not None and not self._nc.is_closed

    @property
    def subscriptions(self) -> list[str]:
        """Subjects with an active subscription."""
        return list(self._subscriptions)
