"""
Configuration module for Redis Pub/Sub Stream.

This module provides:
- Pydantic configuration models
- YAML configuration loading
- Configuration validation
"""

from redis_pubsub_stream.config.models import AppConfig, LoggingConfig, StreamConfig
from redis_pubsub_stream.config.loader import load_config
from redis_pubsub_stream.config.validation import (
    ConfigurationError,
    validate_config,
    validate_redis_connection,
)

__all__ = [
    "AppConfig",
    "LoggingConfig",
    "StreamConfig",
    "ConfigurationError",
    "load_config",
    "validate_config",
    "validate_redis_connection",
]
