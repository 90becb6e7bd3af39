"""
RedisPubsubStream: publish-only stream that forwards each written record to a
Redis pub/sub channel.
"""

import queue
import threading
from typing import TYPE_CHECKING, Any

import structlog

from redis_pubsub_stream.exceptions import InvalidStateError
from redis_pubsub_stream.streaming.events import EventEmitter, Handler, StreamEvent
from redis_pubsub_stream.streaming.publisher import (
    BrokerClient,
    Record,
    create_redis_client,
    serialize_record,
)

if TYPE_CHECKING:
    from redis_pubsub_stream.config.models import StreamConfig

DEFAULT_CHANNEL = "Default"
DEFAULT_SERVER_ADDRESS = "localhost"
DEFAULT_SERVER_PORT = 6379
DEFAULT_CLOSE_TIMEOUT = 30.0

_MISSING = object()
_SENTINEL = object()


class RedisPubsubStream:
    """
    Writable stream over a single Redis pub/sub channel.

    write() serializes the record to JSON and hands the payload to a
    background publisher thread, then returns without waiting for the broker.
    The thread publishes payloads one at a time in write() order, so a slow
    or unreachable broker never blocks the producer.

    pause() makes write() return False and drop the record; nothing is queued.
    end() and destroy() are terminal for writing and emit "end" then "close".
    Payloads already handed off are still published after end()/destroy().

    The broker client is created at construction and is not closed by end()
    or destroy(). Call close() to wait for the publisher thread and release it.

    Not thread-safe: concurrent producers must serialize access. "error"
    handlers run on the publisher thread.
    """

    def __init__(
        self,
        channel: str | None = None,
        server_address: str | None = None,
        server_port: int | None = None,
        redis_options: dict[str, Any] | None = None,
        *,
        client: BrokerClient | None = None,
        verbose: bool = False,
        logger: Any = None,
        fail_open: bool = True,
        close_timeout: float = DEFAULT_CLOSE_TIMEOUT,
    ) -> None:
        self._channel = channel or DEFAULT_CHANNEL
        self._server_address = server_address or DEFAULT_SERVER_ADDRESS
        self._server_port = server_port or DEFAULT_SERVER_PORT
        self._verbose = verbose
        self._fail_open = fail_open
        self._close_timeout = close_timeout
        self._log = logger if logger is not None else structlog.get_logger()

        if client is None:
            client = create_redis_client(
                self._server_address, self._server_port, redis_options
            )
        self._client = client

        self._events = EventEmitter()

        self._writable = True
        self._readable = True
        self._paused = False
        self._ended = False
        self._destroyed = False
        self._client_closed = False

        # Publisher thread, started on the first write
        self._queue: queue.Queue[str | object] = queue.Queue()
        self._thread: threading.Thread | None = None
        self._stopping = False
        self._pending = 0
        self._idle = threading.Condition()
        self._failure: BaseException | None = None

        self._stats = {
            "published": 0,
            "dropped_while_paused": 0,
            "publish_errors": 0,
        }

    @classmethod
    def from_config(
        cls,
        config: "StreamConfig",
        client: BrokerClient | None = None,
        logger: Any = None,
    ) -> "RedisPubsubStream":
        """Build a stream from a StreamConfig."""
        return cls(
            channel=config.channel,
            server_address=config.server_address,
            server_port=config.server_port,
            redis_options=config.redis_options,
            client=client,
            verbose=config.verbose,
            logger=logger,
            fail_open=config.fail_open,
            close_timeout=config.close_timeout_seconds,
        )

    # ---- State ----

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def client(self) -> BrokerClient:
        return self._client

    @property
    def writable(self) -> bool:
        return self._writable

    @property
    def readable(self) -> bool:
        return self._readable

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def pending(self) -> int:
        """Number of payloads handed off but not yet published."""
        with self._idle:
            return self._pending

    @property
    def stats(self) -> dict[str, int]:
        """Return stream statistics merged with the client backend's, if any."""
        combined = dict(self._stats)
        client_stats = getattr(self._client, "stats", None)
        if isinstance(client_stats, dict):
            combined.update(client_stats)
        return combined

    # ---- Observers ----

    def on(self, event: StreamEvent | str, handler: Handler) -> Handler:
        return self._events.on(event, handler)

    def once(self, event: StreamEvent | str, handler: Handler) -> Handler:
        return self._events.once(event, handler)

    def off(self, event: StreamEvent | str, handler: Handler) -> None:
        self._events.off(event, handler)

    # ---- Stream lifecycle ----

    def write(self, record: Record) -> bool:
        """
        Serialize a record and hand it off for publishing on the channel.

        Args:
            record: Any JSON-encodable value

        Returns:
            True if the record was handed off, False if the stream is paused
            (the record is dropped). Delivery is never reflected here.

        Raises:
            InvalidStateError: After end()/destroy(), or if not writable
            SerializationError: If the record cannot be encoded as JSON
            Exception: With fail_open=False, the first publish failure
                reported by the publisher thread since the last check
        """
        if self._ended:
            raise InvalidStateError("write after end")

        if not self._writable:
            raise InvalidStateError("not writable")

        self._raise_failure()

        if self._paused:
            self._stats["dropped_while_paused"] += 1
            return False

        payload = serialize_record(record)

        if self._verbose:
            self._log.info("publish_record", channel=self._channel, message=payload)

        self._enqueue(payload)
        return True

    def end(self, record: Record = _MISSING) -> None:  # type: ignore[assignment]
        """Optionally write a final record, then terminate the stream."""
        if self._ended:
            return

        if not self._writable:
            return

        if record is not _MISSING:
            self.write(record)

        self._ended = True
        self._readable = False
        self._writable = False
        self._stop_worker()

        self._log.debug("stream_ended", channel=self._channel)
        self._events.emit(StreamEvent.END)
        self._events.emit(StreamEvent.CLOSE)

    def pause(self) -> None:
        if self._paused or self._destroyed:
            return

        self._paused = True
        self._events.emit(StreamEvent.PAUSE)

    def resume(self) -> None:
        """Clear the paused state and emit "drain" so producers can write again."""
        if not self._paused or self._destroyed:
            return

        self._paused = False
        self._events.emit(StreamEvent.DRAIN)

    def destroy(self) -> None:
        """Mark the stream destroyed. The broker client is left open."""
        if self._destroyed:
            return

        self._destroyed = True
        self._ended = True
        self._readable = False
        self._writable = False
        self._stop_worker()

        self._log.debug("stream_destroyed", channel=self._channel)
        self._events.emit(StreamEvent.END)
        self._events.emit(StreamEvent.CLOSE)

    def flush(self) -> None:
        """Emit "flush". Does not wait for handed-off payloads, see join()."""
        client_flush = getattr(self._client, "flush", None)
        if callable(client_flush):
            client_flush()
        self._events.emit(StreamEvent.FLUSH)

    def join(self, timeout: float | None = None) -> bool:
        """
        Block until every handed-off payload has been published or has failed.

        Args:
            timeout: Maximum seconds to wait, None waits indefinitely

        Returns:
            True if nothing is pending, False if the timeout expired

        Raises:
            Exception: With fail_open=False, a pending publish failure
        """
        with self._idle:
            idle = self._idle.wait_for(lambda: self._pending == 0, timeout)
        self._raise_failure()
        return idle

    def close(self) -> None:
        """Destroy the stream, wait for the publisher thread and close the client."""
        self.destroy()
        if self._client_closed:
            return
        self._client_closed = True

        if self._thread is not None:
            self._thread.join(timeout=self._close_timeout)
            if self._thread.is_alive():
                self._log.warning(
                    "publisher_thread_join_timeout",
                    channel=self._channel,
                    pending=self.pending,
                )

        try:
            self._client.close()
        except Exception as e:
            self._log.warning("client_close_error", channel=self._channel, error=str(e))

    # ---- Context manager ----

    def __enter__(self) -> "RedisPubsubStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.end()
        else:
            self.destroy()

    def __repr__(self) -> str:
        return (
            f"RedisPubsubStream(channel={self._channel!r}, "
            f"server={self._server_address}:{self._server_port}, "
            f"ended={self._ended}, paused={self._paused}, destroyed={self._destroyed})"
        )

    # ---- Publisher thread ----

    def _enqueue(self, payload: str) -> None:
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._publish_loop,
                name=f"redis-pubsub-{self._channel}",
                daemon=True,
            )
            self._thread.start()
        with self._idle:
            self._pending += 1
        self._queue.put(payload)

    def _stop_worker(self) -> None:
        """Let the publisher thread exit once the queue is drained."""
        if self._thread is None or self._stopping:
            return
        self._stopping = True
        self._queue.put(_SENTINEL)

    def _raise_failure(self) -> None:
        if self._failure is None:
            return
        failure, self._failure = self._failure, None
        raise failure

    def _publish_loop(self) -> None:
        """Background thread: publish queued payloads in order."""
        while True:
            payload = self._queue.get()
            if payload is _SENTINEL:
                return
            try:
                self._client.publish(self._channel, payload)
                self._stats["published"] += 1
            except Exception as e:
                self._stats["publish_errors"] += 1
                self._report_failure(e)
            finally:
                with self._idle:
                    self._pending -= 1
                    self._idle.notify_all()

    def _report_failure(self, error: Exception) -> None:
        if not self._fail_open:
            if self._failure is None:
                self._failure = error
            return

        self._log.warning(
            "publish_error",
            channel=self._channel,
            error=str(error),
            error_type=error.__class__.__name__,
        )
        try:
            self._events.emit(StreamEvent.ERROR, error)
        except Exception:
            self._log.exception("error_handler_failed", channel=self._channel)
