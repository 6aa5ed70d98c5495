"""Presence scoring against the configured activity window."""

from __future__ import annotations

import math
from dataclasses import replace
from typing import TYPE_CHECKING

from rollcall.domain.model import PresenceAnalysis

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from rollcall.domain.model import (
        ConsolidatedParticipant,
        RawSessionRecord,
        SessionInterval,
        WindowConfig,
    )


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (``round`` rounds half to even)."""

    return math.floor(value + 0.5)


def overlap_minutes(
    sessions: Iterable[SessionInterval],
    window_start: datetime,
    window_end: datetime,
) -> int:
    """Minutes of ``sessions`` falling inside ``[window_start, window_end]``.

    Sessions are summed independently, so overlapping sessions of the same
    person count twice, matching how the provider reports durations.
    """

    total_seconds = 0.0
    for session in sessions:
        effective_start = max(session.join_time, window_start)
        effective_end = min(session.leave_time, window_end)
        if effective_start < effective_end:
            total_seconds += (effective_end - effective_start).total_seconds()
    return round_half_up(total_seconds / 60)


def analyze_presence(
    participant: ConsolidatedParticipant,
    config: WindowConfig,
) -> PresenceAnalysis:
    """Score one participant; without an activity window only total minutes count."""

    meets_minimum = participant.total_minutes >= config.min_minutes
    if not config.has_window:
        return PresenceAnalysis(
            total_minutes=participant.total_minutes,
            window_minutes=0,
            window_percentage=0,
            meets_minimum=meets_minimum,
            meets_window=True,
        )

    window_minutes = 0
    if config.window_start is not None and config.window_end is not None:
        window_minutes = overlap_minutes(
            participant.sessions, config.window_start, config.window_end
        )

    window_duration = config.window_duration_minutes
    percentage = round_half_up(100 * window_minutes / window_duration) if window_duration > 0 else 0

    return PresenceAnalysis(
        total_minutes=participant.total_minutes,
        window_minutes=window_minutes,
        window_percentage=percentage,
        meets_minimum=meets_minimum,
        meets_window=percentage >= config.min_percent,
    )


def force_approve(analysis: PresenceAnalysis) -> PresenceAnalysis:
    """Grant an exception without rewriting the computed sub-flags."""

    return replace(analysis, manual_override=True)


def revoke_override(analysis: PresenceAnalysis) -> PresenceAnalysis:
    return replace(analysis, manual_override=False)


def detect_end_time(records: Iterable[RawSessionRecord]) -> datetime | None:
    """Latest leave time in the export, used when no live end was configured."""

    latest: datetime | None = None
    for record in records:
        if latest is None or record.leave_time > latest:
            latest = record.leave_time
    return latest
