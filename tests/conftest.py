"""
Shared test fixtures for Redis Pub/Sub Stream tests.
"""

from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest

from redis_pubsub_stream.config.models import AppConfig, StreamConfig
from redis_pubsub_stream.streaming.events import StreamEvent
from redis_pubsub_stream.streaming.implementations.memory import InMemoryBrokerClient
from redis_pubsub_stream.streaming.stream import RedisPubsubStream


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def stream_config() -> StreamConfig:
    """Stream configuration on the in-memory backend."""
    return StreamConfig(channel="orders", backend="memory")


@pytest.fixture
def app_config(stream_config: StreamConfig) -> AppConfig:
    return AppConfig(stream=stream_config)


# =============================================================================
# Stream Fixtures
# =============================================================================


@pytest.fixture
def memory_client() -> InMemoryBrokerClient:
    return InMemoryBrokerClient()


@pytest.fixture
def stream(memory_client: InMemoryBrokerClient) -> Iterator[RedisPubsubStream]:
    """Stream on channel 'orders' publishing into memory_client.

    Tests call stream.join() before asserting on memory_client.
    """
    s = RedisPubsubStream(channel="orders", client=memory_client)
    yield s
    s.join(timeout=5)


@pytest.fixture
def recorded_events(stream: RedisPubsubStream) -> list[str]:
    """Names of lifecycle notifications emitted by `stream`, in order."""
    seen: list[str] = []
    for name in ("pause", "drain", "end", "close", "flush"):
        stream.on(name, lambda name=name: seen.append(name))
    stream.on(StreamEvent.ERROR, lambda e: seen.append("error"))
    return seen


@pytest.fixture
def mock_logger() -> MagicMock:
    return MagicMock()
