"""Environment variable loaders for configuration."""

from __future__ import annotations

import os

from .errors import ConfigurationError


def optional_int_env(name: str, default: int) -> int:
    """Return an integer environment variable, falling back to ``default`` when unset."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def optional_list_env(name: str, *, separator: str = ",") -> tuple[str, ...]:
    """Split a delimited environment variable into trimmed, non-empty items."""

    raw = os.getenv(name)
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(separator) if item.strip())
