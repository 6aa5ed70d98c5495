"""Application configuration helpers."""

from __future__ import annotations

from .errors import ConfigurationError
from .logging import configure_logging
from .presence import (
    DEFAULT_MIN_MINUTES,
    DEFAULT_MIN_PERCENT,
    PresenceDefaults,
    get_presence_defaults,
)
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_MIN_MINUTES",
    "DEFAULT_MIN_PERCENT",
    "ConfigurationError",
    "DatabaseConfig",
    "PresenceDefaults",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_presence_defaults",
    "get_storage_config",
]
