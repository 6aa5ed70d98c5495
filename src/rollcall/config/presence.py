"""Defaults for attendance validation runs."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import optional_int_env, optional_list_env
from .errors import ConfigurationError

DEFAULT_MIN_MINUTES = 60
DEFAULT_MIN_PERCENT = 90


@dataclass(frozen=True, slots=True)
class PresenceDefaults:
    min_minutes: int = DEFAULT_MIN_MINUTES
    min_percent: int = DEFAULT_MIN_PERCENT
    excluded_names: tuple[str, ...] = field(default_factory=tuple)


def get_presence_defaults() -> PresenceDefaults:
    min_minutes = optional_int_env("ROLLCALL_MIN_MINUTES", DEFAULT_MIN_MINUTES)
    min_percent = optional_int_env("ROLLCALL_MIN_PERCENT", DEFAULT_MIN_PERCENT)
    if min_minutes < 0:
        raise ConfigurationError("ROLLCALL_MIN_MINUTES must be non-negative")
    if not 0 <= min_percent <= 100:
        raise ConfigurationError("ROLLCALL_MIN_PERCENT must be between 0 and 100")
    return PresenceDefaults(
        min_minutes=min_minutes,
        min_percent=min_percent,
        excluded_names=optional_list_env("ROLLCALL_EXCLUDE_NAMES"),
    )
