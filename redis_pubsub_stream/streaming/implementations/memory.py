"""
In-memory broker client for unit testing.
"""

import json
from typing import Any


class InMemoryBrokerClient:
    """
    Captures all published messages in memory for testing and inspection.

    NOT thread-safe by design - intended for single-threaded test use.
    """

    def __init__(self) -> None:
        self._messages: list[tuple[str, str]] = []
        self._flush_count = 0
        self._closed = False

    def publish(self, channel: str, message: str) -> int:
        self._messages.append((channel, message))
        # Redis returns the number of subscribers that received the message
        return 0

    def flush(self) -> None:
        self._flush_count += 1

    def close(self) -> None:
        self._closed = True

    @property
    def stats(self) -> dict[str, int]:
        return {
            "memory_messages": len(self._messages),
            "memory_flushes": self._flush_count,
        }

    # ---- Test helpers ----

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def messages(self) -> list[tuple[str, str]]:
        """All captured (channel, message) pairs."""
        return list(self._messages)

    def get_messages_for_channel(self, channel: str) -> list[str]:
        """Get the raw payloads published on a channel."""
        return [m for c, m in self._messages if c == channel]

    def get_records(self, channel: str) -> list[Any]:
        """Get the decoded JSON records published on a channel."""
        return [json.loads(m) for m in self.get_messages_for_channel(channel)]

    def clear(self) -> None:
        """Clear all captured messages."""
        self._messages.clear()
        self._flush_count = 0
