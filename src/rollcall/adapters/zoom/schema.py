"""Column synonyms and row model for videoconference participant exports.

Exports come localised; the synonym table maps Portuguese and English header
labels onto canonical field names before rows are validated.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Final

from pydantic import BaseModel, ConfigDict, field_validator

from rollcall.domain.model import RawSessionRecord

HEADER_SYNONYMS: Final[dict[str, str]] = {
    # Portuguese
    "nome (nome original)": "name",
    "nome": "name",
    "e-mail": "email",
    "e-mail do usuário": "email",
    "ingressar na hora": "join_time",
    "hora de entrada": "join_time",
    "hora de saída": "leave_time",
    "duração (minutos)": "duration_minutes",
    "convidado": "guest",
    "na sala de espera": "waiting_room",
    # English
    "name (original name)": "name",
    "name": "name",
    "participant": "name",
    "email": "email",
    "user email": "email",
    "join time": "join_time",
    "leave time": "leave_time",
    "duration (minutes)": "duration_minutes",
    "guest": "guest",
    "in waiting room": "waiting_room",
}

CANONICAL_FIELDS: Final[frozenset[str]] = frozenset(HEADER_SYNONYMS.values())
TRUE_FLAGS: Final[frozenset[str]] = frozenset({"yes", "sim", "true", "1"})

_EXPORT_TIMESTAMP = re.compile(
    r"^(\d{2})/(\d{2})/(\d{4})\s+(\d{1,2}):(\d{2}):(\d{2})(?:\s+(AM|PM))?$",
    re.IGNORECASE,
)
_LEADING_INT = re.compile(r"^\s*(\d+)")


def canonical_header(label: str) -> str:
    normalized = label.strip().lower()
    return HEADER_SYNONYMS.get(normalized, normalized)


def parse_export_timestamp(value: str) -> datetime | None:
    """Parse ``DD/MM/YYYY h:mm:ss AM/PM`` with ISO-8601 as a fallback.

    Results are naive wall-clock times. An aware ISO value is converted to the
    local zone first. A missing AM/PM marker reads the hour as 24h.
    """

    text = value.strip()
    if not text:
        return None

    match = _EXPORT_TIMESTAMP.match(text)
    if match is None:
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed

    day, month, year, hour_text, minute, second, period = match.groups()
    hour = int(hour_text)
    if period is not None:
        if hour > 12:
            return None
        period = period.upper()
        if period == "PM" and hour != 12:
            hour += 12
        elif period == "AM" and hour == 12:
            hour = 0
    try:
        return datetime(int(year), int(month), int(day), hour, int(minute), int(second))
    except ValueError:
        return None


def parse_flag(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if not isinstance(value, str):
        return False
    return value.strip().lower() in TRUE_FLAGS


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class ExportRow(BaseModel):
    """One data row after header canonicalisation."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    email: str | None = None
    join_time: datetime
    leave_time: datetime
    duration_minutes: int = 0
    guest: bool = False
    waiting_room: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def _require_name(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip()
        if not value:
            raise ValueError("participant name is empty")
        return value

    @field_validator("join_time", "leave_time", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: object) -> object:
        if isinstance(value, datetime):
            return value
        parsed = parse_export_timestamp(value) if isinstance(value, str) else None
        if parsed is None:
            raise ValueError(f"unrecognised timestamp {value!r}")
        return parsed

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def _parse_duration(cls, value: object) -> object:
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            match = _LEADING_INT.match(value)
            return int(match.group(1)) if match else 0
        return 0

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: object) -> object:
        return _blank_to_none(value)

    @field_validator("guest", "waiting_room", mode="before")
    @classmethod
    def _parse_flags(cls, value: object) -> bool:
        return parse_flag(value)

    def to_record(self) -> RawSessionRecord:
        return RawSessionRecord(
            name=self.name,
            email=self.email,
            join_time=self.join_time,
            leave_time=self.leave_time,
            duration_minutes=self.duration_minutes,
            guest=self.guest,
            waiting_room=self.waiting_room,
        )
