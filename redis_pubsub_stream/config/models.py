"""
Pydantic configuration models for Redis Pub/Sub Stream.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class StreamConfig(BaseModel):
    """Target channel and broker connection for a publish stream."""

    channel: str = Field(
        default="Default",
        description="Name of the pub/sub channel records are published on",
    )
    server_address: str = Field(
        default="localhost",
        description="Redis server host",
    )
    server_port: int = Field(
        default=6379,
        ge=1,
        le=65535,
        description="Redis server port",
    )
    redis_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra keyword arguments passed verbatim to redis.Redis",
    )
    backend: Literal["redis", "log", "memory", "noop"] = Field(
        default="redis",
        description="Broker client backend: redis | log | memory | noop",
    )
    verbose: bool = Field(
        default=False,
        description="Log every published channel and payload",
    )
    fail_open: bool = Field(
        default=True,
        description=(
            "If True, broker errors on publish are logged and emitted as 'error' "
            "instead of raised from write()"
        ),
    )
    log_level: str = Field(
        default="debug",
        description="Log level for the log backend",
    )
    close_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=600,
        description="Seconds close() waits for queued publishes before giving up",
    )

    @field_validator("backend", mode="before")
    @classmethod
    def normalize_backend(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v


class LoggingConfig(BaseModel):
    """Structured logging settings."""

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("level")
    @classmethod
    def valid_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class AppConfig(BaseSettings):
    """
    Root configuration.

    Values can be loaded from YAML files and overridden via environment
    variables, e.g. REDIS_PUBSUB_STREAM_STREAM__CHANNEL=orders.
    """

    stream: StreamConfig = Field(default_factory=StreamConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "REDIS_PUBSUB_STREAM_",
        "env_nested_delimiter": "__",
    }
