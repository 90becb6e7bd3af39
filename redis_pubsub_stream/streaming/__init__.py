"""
Stream package for Redis Pub/Sub Stream.

Provides the publish stream itself, its lifecycle notifications, record
serialization and the broker client backends (redis, log, memory, noop).
"""
