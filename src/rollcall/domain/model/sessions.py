"""Session-log records: raw export rows and consolidated per-person timelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(slots=True, frozen=True, kw_only=True)
class RawSessionRecord:
    """One join/leave row of a provider export."""

    name: str
    email: str | None
    join_time: datetime
    leave_time: datetime
    duration_minutes: int = 0
    guest: bool = False
    waiting_room: bool = False


@dataclass(slots=True, frozen=True)
class SessionInterval:
    join_time: datetime
    leave_time: datetime
    duration_minutes: int = 0


@dataclass(eq=False, kw_only=True)
class ConsolidatedParticipant:
    """All sessions sharing one exact (trimmed) display name.

    ``display_name`` is the identity key; ``normalized_name`` is only used for
    similarity scoring and exclusion tests.
    """

    display_name: str
    normalized_name: str
    email: str | None = None
    sessions: list[SessionInterval] = field(default_factory=list[SessionInterval])
    total_minutes: int = 0
    first_join: datetime
    last_leave: datetime
    removed: bool = False

    def add_session(self, interval: SessionInterval, *, email: str | None = None) -> None:
        self.sessions.append(interval)
        self.total_minutes += interval.duration_minutes
        self.first_join = min(self.first_join, interval.join_time)
        self.last_leave = max(self.last_leave, interval.leave_time)
        if not self.email and email:
            self.email = email
