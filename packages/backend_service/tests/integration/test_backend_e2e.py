"""End-to-end tests against a real NATS server."""

from __future__ import annotations

import asyncio
import io

import httpx
import pytest
from backend_service.application.message_sink import MessageSink
from backend_service.bootstrap import ApplicationContext, LifecycleState
from backend_service.config import BackendConfig
from backend_service.infrastructure.messaging import NATSClient


def make_config(nats_url: str, destination: str) -> BackendConfig:
    return BackendConfig.model_validate(
        {
            "service": {"name": "backend", "port": 0},
            "messaging": {"servers": [nats_url], "destination": destination},
        }
    )


async def wait_for_lines(stream: io.StringIO, count: int, timeout: float) -> list[str]:
    """Poll the sink stream until ``count`` lines arrived or the timeout passes."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        lines = stream.getvalue().splitlines()
        if len(lines) >= count:
            return lines
        await asyncio.sleep(0.05)
    return stream.getvalue().splitlines()


@pytest.mark.integration
class TestBackendEndToEnd:
    """The service wired to a real broker."""

    @pytest.mark.asyncio
    async def test_ping_produces_one_line(
        self,
        nats_client: NATSClient,
        nats_url: str,
        destination: str,
        timeout_seconds: float,
    ) -> None:
        """Test that one 'ping' yields exactly one diagnostic line."""
        stream = io.StringIO()
        context = ApplicationContext(
            make_config(nats_url, destination), sink=MessageSink(stream=stream)
        )
        await context.start()
        try:
            assert context.state is LifecycleState.RUNNING
            assert context.port > 0

            await nats_client.publish(destination, b"ping")
            lines = await wait_for_lines(stream, 1, timeout_seconds)

            # Give a duplicate delivery the chance to show up.
            await asyncio.sleep(0.2)
            lines = stream.getvalue().splitlines()
        finally:
            await context.stop()

        assert len(lines) == 1
        assert "body='ping'" in lines[0]
        assert f"destination='{destination}'" in lines[0]

    @pytest.mark.asyncio
    async def test_n_messages_produce_n_lines(
        self,
        nats_client: NATSClient,
        nats_url: str,
        destination: str,
        timeout_seconds: float,
    ) -> None:
        """Test that N messages yield N lines, in whatever order they arrive."""
        stream = io.StringIO()
        context = ApplicationContext(
            make_config(nats_url, destination), sink=MessageSink(stream=stream)
        )
        await context.start()
        try:
            bodies = [f"message-{i}" for i in range(20)]
            for body in bodies:
                await nats_client.publish(destination, body)
            lines = await wait_for_lines(stream, len(bodies), timeout_seconds)
        finally:
            await context.stop()

        assert len(lines) == len(bodies)
        for body in bodies:
            assert sum(f"body='{body}'" in line for line in lines) == 1

    @pytest.mark.asyncio
    async def test_headers_and_empty_body_pass_through(
        self,
        nats_client: NATSClient,
        nats_url: str,
        destination: str,
        timeout_seconds: float,
    ) -> None:
        """Test that messages are neither filtered nor transformed."""
        stream = io.StringIO()
        context = ApplicationContext(
            make_config(nats_url, destination), sink=MessageSink(stream=stream)
        )
        await context.start()
        try:
            await nats_client.publish(destination, b"", headers={"X-Trace": "abc"})
            lines = await wait_for_lines(stream, 1, timeout_seconds)
        finally:
            await context.stop()

        assert len(lines) == 1
        assert "body=''" in lines[0]
        assert "'X-Trace': 'abc'" in lines[0]

    @pytest.mark.asyncio
    async def test_http_listener_has_no_endpoints(
        self, nats_client: NATSClient, nats_url: str, destination: str
    ) -> None:
        """Test that the bound HTTP port answers but defines nothing."""
        context = ApplicationContext(make_config(nats_url, destination))
        await context.start()
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(f"http://127.0.0.1:{context.port}/")
        finally:
            await context.stop()

        assert response.status_code == 404
        assert context.state is LifecycleState.STOPPED
