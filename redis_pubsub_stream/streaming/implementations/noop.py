"""
No-op broker client: discards all messages silently.
"""


class NoopBrokerClient:
    """Client that discards all messages. Used for dry runs."""

    def publish(self, channel: str, message: str) -> int:
        return 0

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass

    @property
    def stats(self) -> dict[str, int]:
        return {}
