"""
Configuration validation for Redis Pub/Sub Stream.

Provides checks beyond Pydantic model validation.
"""

import redis
import structlog

from redis_pubsub_stream.config.models import AppConfig
from redis_pubsub_stream.streaming.publisher import create_redis_client

logger = structlog.get_logger()

_GLOB_CHARS = set("*?[]")


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    pass


def validate_config(config: AppConfig) -> list[str]:
    """
    Validate configuration.

    Args:
        config: AppConfig to validate

    Returns:
        List of warning messages (non-fatal issues)

    Raises:
        ConfigurationError: If configuration has fatal issues
    """
    warnings: list[str] = []
    errors: list[str] = []
    stream = config.stream

    if not stream.channel.strip():
        errors.append("stream.channel must not be empty")
    else:
        if any(c.isspace() for c in stream.channel):
            warnings.append(
                f"Channel name {stream.channel!r} contains whitespace; "
                "subscribers must quote it exactly."
            )
        if _GLOB_CHARS & set(stream.channel):
            warnings.append(
                f"Channel name {stream.channel!r} contains glob characters; "
                "pattern subscribers (PSUBSCRIBE) may match it unexpectedly."
            )

    shadowed = sorted({"host", "port"} & set(stream.redis_options))
    if shadowed:
        warnings.append(
            f"stream.redis_options sets {', '.join(shadowed)}; use "
            "server_address/server_port instead."
        )

    if stream.backend != "redis" and stream.redis_options:
        warnings.append(
            f"stream.redis_options is ignored by the '{stream.backend}' backend."
        )

    if errors:
        for error in errors:
            logger.error("config_validation_error", error=error)
        raise ConfigurationError(
            f"Configuration validation failed with {len(errors)} error(s):\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    for warning in warnings:
        logger.warning("config_validation_warning", warning=warning)

    return warnings


def validate_redis_connection(config: AppConfig) -> bool:
    """
    Test the Redis connection described by the configuration.

    Args:
        config: AppConfig with stream connection settings

    Returns:
        True if the server answered PING

    Raises:
        ConfigurationError: If the connection fails
    """
    stream = config.stream
    client = create_redis_client(
        stream.server_address, stream.server_port, stream.redis_options
    )
    try:
        client.ping()
        logger.info(
            "redis_connection_validated",
            host=stream.server_address,
            port=stream.server_port,
        )
        return True
    except redis.RedisError as e:
        raise ConfigurationError(
            f"Redis connection failed ({stream.server_address}:{stream.server_port}): {e}"
        ) from e
    finally:
        client.close()
