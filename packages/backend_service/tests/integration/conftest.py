"""Integration test configuration and fixtures."""

from __future__ import annotations

import os
import uuid
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from backend_service.domain.exceptions import ConnectionError as BackendConnectionError
from backend_service.infrastructure.messaging import NATSClient


@pytest.fixture(scope="session")
def nats_url() -> str:
    """NATS server URL for tests."""
    # Can be overridden by environment variable
    return os.environ.get("NATS_URL", "nats://localhost:4222")


@pytest_asyncio.fixture
async def nats_client(nats_url: str) -> AsyncGenerator[NATSClient]:
    """Create a connected NATS client, skipping when no server is reachable.

    Start one with ``docker run -p 4222:4222 nats`` or point NATS_URL at an
    existing server.
    """
    client = NATSClient([nats_url], name="backend-tests", max_reconnect_attempts=1)
    try:
        await client.connect()
    except BackendConnectionError as e:
        pytest.skip(f"NATS server not available at {nats_url}: {e.details.get('reason')}")

    try:
        yield client
    finally:
        await client.disconnect()


@pytest.fixture
def destination() -> str:
    """Unique destination so concurrent runs do not see each other's messages."""
    return f"backend.test.{uuid.uuid4().hex}"


@pytest.fixture
def timeout_seconds() -> float:
    """Upper bound for a message to travel through the broker."""
    return 5.0
