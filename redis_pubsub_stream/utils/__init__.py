"""
Utility modules for Redis Pub/Sub Stream.
"""

from redis_pubsub_stream.utils.logging import configure_logging

__all__ = ["configure_logging"]
