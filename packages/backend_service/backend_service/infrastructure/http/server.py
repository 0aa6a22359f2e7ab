"""Embedded uvicorn server bound to an ephemeral port."""

from __future__ import annotations

import asyncio
import contextlib
import socket
from collections.abc import Iterator

import uvicorn
from fastapi import FastAPI

from backend_service.domain.exceptions import ServerStartupError
from backend_service.infrastructure.logging import get_logger

logger = get_logger(__name__)


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves process signal handling to its owner."""

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield

    def install_signal_handlers(self) -> None:
        pass


class EmbeddedHTTPServer:
    """Serve an ASGI application in the running event loop.

    The listening socket is bound before uvicorn starts, so a port of ``0``
    resolves to a concrete OS-assigned port that :attr:`port` reports.
    """

    def __init__(
        self,
        app: FastAPI,
        host: str = "127.0.0.1",
        port: int = 0,
        startup_timeout: float = 10.0,
    ) -> None:
        """Initialize the server.

        Args:
            app: ASGI application to serve
            host: Interface to bind
            port: Port to bind, 0 for an OS-assigned port
            startup_timeout: Seconds to wait for uvicorn to report startup
        """
        self.app = app
        self.host = host
        self.requested_port = port
        self.startup_timeout = startup_timeout
        self._server: _EmbeddedServer | None = None
        self._socket: socket.socket | None = None
        self._task: asyncio.Task[None] | None = None
        self._port = 0

    async def start(self) -> None:
        """Bind the socket and start serving."""
        if self._task is not None:
            logger.warning("HTTP server already started")
            return

        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        try:
            self._socket = socket.create_server((self.host, self.requested_port), family=family)
        except OSError as e:
            raise ServerStartupError(
                f"cannot bind {self.host}:{self.requested_port}: {e}",
                details={"host": self.host, "port": self.requested_port},
            ) from e
        self._port = int(self._socket.getsockname()[1])

        config = uvicorn.Config(
            self.app,
            log_config=None,
            access_log=False,
            lifespan="on",
        )
        self._server = _EmbeddedServer(config)
        self._task = asyncio.create_task(self._server.serve(sockets=[self._socket]))

        try:
            await asyncio.wait_for(self._wait_started(), timeout=self.startup_timeout)
        except TimeoutError as e:
            await self.stop()
            raise ServerStartupError(
                f"not started after {self.startup_timeout}s",
                details={"host": self.host},
            ) from e
        except ServerStartupError:
            await self.stop()
            raise

        logger.info(
            "HTTP server listening",
            extra={"host": self.host, "port": self.port},
        )

    async def stop(self) -> None:
        """Ask uvicorn to exit and wait for it. Safe to call more than once."""
        if self._task is None or self._server is None:
            return

        self._server.should_exit = True
        task, self._task = self._task, None
        try:
            await task
        finally:
            if self._socket is not None:
                self._socket.close()
            logger.info("HTTP server stopped", extra={"port": self.port})

    async def _wait_started(self) -> None:
        assert self._server is not None and self._task is not None
        while not self._server.started:
            if self._task.done():
                raise ServerStartupError("server exited during startup")
            await asyncio.sleep(0.05)

    @property
    def port(self) -> int:
        """Bound port, 0 before :meth:`start`."""
        return self._port

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()
