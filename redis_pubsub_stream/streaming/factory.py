"""
Factory for creating broker clients and streams from configuration.
"""

from typing import Any

from redis_pubsub_stream.config.models import StreamConfig
from redis_pubsub_stream.streaming.publisher import BrokerClient, create_redis_client
from redis_pubsub_stream.streaming.stream import RedisPubsubStream


def create_client(config: StreamConfig) -> BrokerClient:
    """
    Create a broker client based on configuration.

    Args:
        config: Stream configuration

    Returns:
        A BrokerClient implementation
    """
    backend = config.backend.lower()

    if backend == "redis":
        return create_redis_client(
            config.server_address,
            config.server_port,
            config.redis_options,
        )

    elif backend == "log":
        from redis_pubsub_stream.streaming.implementations.log import LogBrokerClient

        return LogBrokerClient(level=config.log_level)

    elif backend == "memory":
        from redis_pubsub_stream.streaming.implementations.memory import (
            InMemoryBrokerClient,
        )

        return InMemoryBrokerClient()

    else:
        from redis_pubsub_stream.streaming.implementations.noop import NoopBrokerClient

        return NoopBrokerClient()


def create_stream(config: StreamConfig, logger: Any = None) -> RedisPubsubStream:
    """Create a RedisPubsubStream whose client matches the configured backend."""
    return RedisPubsubStream.from_config(
        config,
        client=create_client(config),
        logger=logger,
    )
