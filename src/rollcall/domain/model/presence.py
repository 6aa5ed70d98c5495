"""Validation window configuration and per-participant presence analysis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rollcall.config.presence import DEFAULT_MIN_MINUTES, DEFAULT_MIN_PERCENT
from rollcall.domain.errors import InvalidConfigurationError

if TYPE_CHECKING:
    from datetime import datetime

SUPPORTED_TOTAL_DAYS = (1, 2)


@dataclass(slots=True, frozen=True, kw_only=True)
class WindowConfig:
    """Bounds and thresholds for one training session.

    ``live_end`` may be left empty; the pipeline fills it from the latest
    leave time found in the export. Without an activity window
    (``has_window=False``) approval depends on total minutes alone and the
    window bounds are ignored. Two-day trainings are validated one day at a
    time; ``current_day`` names the day the export belongs to.
    """

    training_id: str
    live_start: datetime | None
    window_start: datetime | None = None
    window_end: datetime | None = None
    live_end: datetime | None = None
    has_window: bool = True
    min_minutes: int = DEFAULT_MIN_MINUTES
    min_percent: int = DEFAULT_MIN_PERCENT
    total_days: int = 1
    current_day: int = 1

    def validate(self) -> None:
        required: list[tuple[str, object]] = [
            ("training_id", self.training_id),
            ("live_start", self.live_start),
        ]
        if self.has_window:
            required += [("window_start", self.window_start), ("window_end", self.window_end)]
        missing = [name for name, value in required if not value]
        if missing:
            raise InvalidConfigurationError(
                f"Missing validation window settings: {', '.join(missing)}"
            )
        if self.min_minutes < 0:
            raise InvalidConfigurationError("Minimum minutes must be non-negative")
        if not 0 <= self.min_percent <= 100:
            raise InvalidConfigurationError("Minimum percentage must be between 0 and 100")
        if self.total_days not in SUPPORTED_TOTAL_DAYS:
            raise InvalidConfigurationError(
                f"Trainings span 1 or 2 days, got {self.total_days}"
            )
        if not 1 <= self.current_day <= self.total_days:
            raise InvalidConfigurationError(
                f"Day {self.current_day} is outside a {self.total_days}-day training"
            )

    @property
    def window_duration_minutes(self) -> int:
        if not self.has_window or self.window_start is None or self.window_end is None:
            return 0
        seconds = (self.window_end - self.window_start).total_seconds()
        if seconds <= 0:
            return 0
        return int(seconds // 60 + (1 if seconds % 60 >= 30 else 0))


@dataclass(slots=True, frozen=True, kw_only=True)
class PresenceAnalysis:
    total_minutes: int
    window_minutes: int
    window_percentage: int
    meets_minimum: bool
    meets_window: bool
    manual_override: bool = False

    @property
    def approved(self) -> bool:
        # sub-flags keep their computed values under an override
        return self.manual_override or (self.meets_minimum and self.meets_window)
