"""Process bootstrap: explicit construction, startup and teardown of the service.

:class:`ApplicationContext` owns every runtime component. It is built once,
started once and stopped on shutdown; nothing is kept in module-level state.
"""

from __future__ import annotations

import asyncio
import signal
from enum import Enum

from backend_service.api.http_app import create_http_app
from backend_service.application.listener_registration import ListenerRegistration
from backend_service.application.message_sink import MessageSink
from backend_service.config import BackendConfig
from backend_service.domain.exceptions import ApplicationError
from backend_service.infrastructure.http import EmbeddedHTTPServer
from backend_service.infrastructure.logging import get_logger
from backend_service.infrastructure.messaging import NATSClient

logger = get_logger(__name__)


class LifecycleState(str, Enum):
    """Lifecycle states of the application context."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


class ApplicationContext:
    """Runtime components of one service process.

    Startup order is messaging client, listener registration, HTTP server.
    Shutdown runs in reverse.
    """

    def __init__(
        self,
        config: BackendConfig,
        client: NATSClient | None = None,
        sink: MessageSink | None = None,
        http_server: EmbeddedHTTPServer | None = None,
    ) -> None:
        """Build the context.

        Args:
            config: Service configuration
            client: Messaging client, built from ``config`` when omitted
            sink: Message sink, writes to stderr when omitted
            http_server: HTTP server, built from ``config`` when omitted
        """
        self.config = config
        self.client = client if client is not None else NATSClient(
            servers=config.messaging.servers,
            name=config.service.name,
            reconnect_time_wait=config.messaging.reconnect_time_wait,
            max_reconnect_attempts=config.messaging.max_reconnect_attempts,
        )
        self.sink = sink if sink is not None else MessageSink()
        self.registration = ListenerRegistration(
            self.client,
            config.messaging.destination,
            self.sink,
        )
        self.http_server = http_server if http_server is not None else EmbeddedHTTPServer(
            create_http_app(config.service.name),
            host=config.service.host,
            port=config.service.port,
            startup_timeout=config.service.startup_timeout,
        )
        self._state = LifecycleState.NOT_STARTED

    async def start(self) -> None:
        """Connect, register the listener and start the HTTP server.

        Raises:
            ApplicationError: If the context has already been started
        """
        if self._state is not LifecycleState.NOT_STARTED:
            raise ApplicationError(
                f"Application context cannot be started from state '{self._state.value}'",
                error_code="INVALID_LIFECYCLE_STATE",
                details={"state": self._state.value},
            )

        service_name = self.config.service.name
        logger.info("Starting service", extra={"service_name": service_name})

        try:
            await self.client.connect()
            await self.registration.start()
            await self.http_server.start()
        except Exception:
            logger.error("Service startup failed", extra={"service_name": service_name})
            await self._teardown()
            self._state = LifecycleState.STOPPED
            raise

        self._state = LifecycleState.RUNNING
        logger.info(
            f"Started {service_name} on port {self.port}",
            extra={
                "service_name": service_name,
                "port": self.port,
                "destination": self.registration.destination,
            },
        )

    async def stop(self) -> None:
        """Tear everything down. Safe to call more than once."""
        if self._state is not LifecycleState.RUNNING:
            return

        logger.info("Stopping service", extra={"service_name": self.config.service.name})
        try:
            await self._teardown()
        finally:
            self._state = LifecycleState.STOPPED

    async def _teardown(self) -> None:
        await self.http_server.stop()
        await self.registration.stop()
        if self.client.has_connection:
            await self.client.disconnect()

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def port(self) -> int:
        """Port the HTTP listener is bound to."""
        return self.http_server.port


async def run(config: BackendConfig, shutdown_event: asyncio.Event | None = None) -> None:
    """Run the service until SIGINT/SIGTERM or until ``shutdown_event`` is set.

    Args:
        config: Service configuration
        shutdown_event: Optional event that stops the service when set
    """
    stop_event = shutdown_event if shutdown_event is not None else asyncio.Event()
    loop = asyncio.get_running_loop()

    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Not available off the main thread or on some platforms.
            logger.debug("Signal handler not installed", extra={"signal": sig.name})

    context = ApplicationContext(config)
    try:
        await context.start()
        await stop_event.wait()
        logger.info("Shutdown requested")
    finally:
        await context.stop()
        for sig in installed:
            loop.remove_signal_handler(sig)
