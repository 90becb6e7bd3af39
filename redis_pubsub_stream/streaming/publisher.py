"""
Core publishing abstractions: the Record type, JSON serialization and the
BrokerClient protocol.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Protocol, Union, runtime_checkable
from uuid import UUID

import redis
from redis.backoff import NoBackoff
from redis.retry import Retry

from redis_pubsub_stream.exceptions import SerializationError

# Any value the JSON encoder below accepts. Containers are checked at encode
# time, not by the type system.
Record = Union[
    None,
    bool,
    int,
    float,
    str,
    UUID,
    Decimal,
    date,
    datetime,
    bytes,
    list[Any],
    tuple[Any, ...],
    dict[str, Any],
]


class _JsonEncoder(json.JSONEncoder):
    """JSON encoder for the non-native record types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, bytes):
            return obj.decode("utf-8", errors="replace")
        return super().default(obj)


def serialize_record(record: Record) -> str:
    """
    Encode a record as the compact JSON payload published on the channel.

    Args:
        record: Any JSON-encodable value

    Returns:
        JSON text with no insignificant whitespace, e.g. '{"id":1}'

    Raises:
        SerializationError: If the record contains values JSON cannot encode
    """
    try:
        return json.dumps(record, cls=_JsonEncoder, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise SerializationError(f"record is not JSON serializable: {e}") from e


@runtime_checkable
class BrokerClient(Protocol):
    """Protocol for the broker client a stream publishes through.

    redis.Redis satisfies it, as do the backends in
    redis_pubsub_stream.streaming.implementations.
    """

    def publish(self, channel: str, message: str) -> Any:
        """Publish a message on a channel."""
        ...

    def close(self) -> None:
        """Release the client's connections."""
        ...


def create_redis_client(
    host: str,
    port: int,
    redis_options: dict[str, Any] | None = None,
) -> redis.Redis:
    """
    Build a redis.Redis client for publishing.

    The client makes a single attempt per command: redis-py's default retry
    policy is replaced unless redis_options supplies its own "retry".
    redis-py connects lazily, so an unreachable server surfaces on publish.
    """
    options: dict[str, Any] = {"retry": Retry(NoBackoff(), 0)}
    options.update(redis_options or {})
    return redis.Redis(host=host, port=port, **options)
