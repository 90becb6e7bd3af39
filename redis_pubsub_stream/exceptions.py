"""
Exception hierarchy for redis_pubsub_stream.
"""


class StreamError(Exception):
    """Base class for errors raised by a publish stream."""

    pass


class InvalidStateError(StreamError):
    """Raised when an operation is not legal in the stream's current state."""

    pass


class SerializationError(StreamError):
    """Raised when a record cannot be encoded as JSON."""

    pass
