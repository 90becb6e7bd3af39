"""
Redis Pub/Sub Stream
====================

Publish-only stream adapter that serializes application records to JSON and
forwards each one as a message on a Redis pub/sub channel.

Usage:
    from redis_pubsub_stream import RedisPubsubStream

    stream = RedisPubsubStream(channel="orders")
    stream.write({"id": 1})
    stream.end()
"""

from redis_pubsub_stream.exceptions import (
    InvalidStateError,
    SerializationError,
    StreamError,
)
from redis_pubsub_stream.streaming.events import StreamEvent
from redis_pubsub_stream.streaming.stream import RedisPubsubStream

__version__ = "0.1.0"

__all__ = [
    "RedisPubsubStream",
    "StreamEvent",
    "StreamError",
    "InvalidStateError",
    "SerializationError",
]
