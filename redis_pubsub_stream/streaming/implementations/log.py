"""
Log broker client: emits published messages through structlog.
"""

import structlog

logger = structlog.get_logger()


class LogBrokerClient:
    """Stands in for a Redis connection by logging each publish via structlog."""

    def __init__(self, level: str = "debug") -> None:
        self._level = level.lower()
        self._count = 0

    def _log(self, **kwargs: object) -> None:
        log_fn = getattr(logger, self._level, logger.debug)
        log_fn(**kwargs)

    def publish(self, channel: str, message: str) -> int:
        self._log(
            event="pubsub_message",
            channel=channel,
            message=message,
            size=len(message),
        )
        self._count += 1
        return 0

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass

    @property
    def stats(self) -> dict[str, int]:
        return {"log_messages": self._count}
