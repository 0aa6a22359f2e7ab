"""Listener registration binding the message sink to its destination."""

from __future__ import annotations

from typing import Protocol

from backend_service.domain.entities.message import ListenerBinding, MessageCallback
from backend_service.domain.exceptions import ListenerAlreadyRegisteredError
from backend_service.infrastructure.logging import get_logger

logger = get_logger(__name__)


class SubscribingClient(Protocol):
    """Subset of the messaging client the registration relies on."""

    async def subscribe(self, subject: str, callback: MessageCallback) -> None: ...

    async def unsubscribe(self, subject: str) -> None: ...


class ListenerRegistration:
    """Single, non-reconfigurable subscription of a callback to one destination.

    The binding is created by :meth:`start` and exists until :meth:`stop`.
    Neither the destination nor the callback can change afterwards, and a
    stopped registration is never re-created.
    """

    def __init__(
        self,
        client: SubscribingClient,
        destination: str,
        callback: MessageCallback,
    ) -> None:
        """Initialize the registration.

        Args:
            client: Messaging client used to subscribe
            destination: Destination to listen on
            callback: Receives every message delivered to the destination
        """
        self._client = client
        self._destination = destination
        self._callback = callback
        self._binding: ListenerBinding | None = None
        self._used = False

    async def start(self) -> ListenerBinding:
        """Subscribe the callback to the destination.

        Returns:
            The created listener binding

        Raises:
            ListenerAlreadyRegisteredError: If this registration was started before
        """
        if self._used:
            raise ListenerAlreadyRegisteredError(self._destination)

        self._used = True
        await self._client.subscribe(self._destination, self._callback)
        self._binding = ListenerBinding(destination=self._destination, callback=self._callback)

        logger.info(
            "Listener registered",
            extra={"destination": self._destination},
        )
        return self._binding

    async def stop(self) -> None:
        """Tear down the subscription. Safe to call more than once."""
        if self._binding is None:
            return

        binding, self._binding = self._binding, None
        await self._client.unsubscribe(binding.destination)
        logger.info(
            "Listener unregistered",
            extra={"destination": binding.destination},
        )

    @property
    def destination(self) -> str:
        return self._destination

    @property
    def binding(self) -> ListenerBinding | None:
        return self._binding

    @property
    def is_active(self) -> bool:
        return self._binding is not None
