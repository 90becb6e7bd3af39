"""
YAML configuration loader for Redis Pub/Sub Stream.

Values may reference environment variables as ${VAR} or ${VAR:-default}.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from redis_pubsub_stream.config.models import AppConfig

DEFAULT_CONFIG_PATHS = [
    Path("config/stream.yaml"),
    Path("stream.yaml"),
    Path.home() / ".redis_pubsub_stream" / "stream.yaml",
]

_ENV_REF = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _find_default_config() -> Path | None:
    return next((p for p in DEFAULT_CONFIG_PATHS if p.exists()), None)


def load_config(
    config_path: str | Path | None = None,
    override_values: dict[str, Any] | None = None,
) -> AppConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: YAML file to read. If None, the first existing default
                    location is used, or built-in defaults when there is none.
        override_values: Nested values applied on top of the file

    Returns:
        Validated AppConfig object

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        yaml.YAMLError: If the YAML is invalid
        ValidationError: If configuration is invalid
    """
    path = Path(config_path) if config_path is not None else _find_default_config()

    raw: dict[str, Any] = {}
    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        with open(path) as f:
            raw = _expand_env(yaml.safe_load(f) or {})

    if override_values:
        raw = _merge(raw, override_values)

    return AppConfig(**raw)
