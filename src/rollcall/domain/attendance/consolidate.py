"""Session consolidation: one timeline per exact display name."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rollcall.domain.model import ConsolidatedParticipant, SessionInterval

from .normalize import is_excluded, normalize_name
from .presence import analyze_presence

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from rollcall.domain.model import PresenceAnalysis, RawSessionRecord, WindowConfig

log = logging.getLogger(__name__)


def consolidate(
    records: Iterable[RawSessionRecord],
    exclusions: Sequence[str] = (),
) -> list[ConsolidatedParticipant]:
    """Group raw sessions by exact trimmed display name, in first-seen order.

    Distinct spellings ("Ana", "ana", "iPhone de Ana") stay separate people;
    merging them is an explicit operator action (see ``merge_participants``).
    """

    by_name: dict[str, ConsolidatedParticipant] = {}
    skipped = 0
    for record in records:
        key = record.name.strip()
        normalized = normalize_name(key)
        if exclusions and is_excluded(normalized, exclusions):
            skipped += 1
            continue

        interval = SessionInterval(record.join_time, record.leave_time, record.duration_minutes)
        existing = by_name.get(key)
        if existing is None:
            by_name[key] = ConsolidatedParticipant(
                display_name=key,
                normalized_name=normalized,
                email=record.email,
                sessions=[interval],
                total_minutes=record.duration_minutes,
                first_join=record.join_time,
                last_leave=record.leave_time,
            )
        else:
            existing.add_session(interval, email=record.email)

    if skipped:
        log.info("Excluded %s session rows matching the exclusion list", skipped)
    return list(by_name.values())


def merge_participants(
    participants: Sequence[ConsolidatedParticipant],
    config: WindowConfig,
) -> tuple[ConsolidatedParticipant, PresenceAnalysis]:
    """Fold several participants into the one with the greatest total duration.

    The primary keeps its display name (and its email unless it has none);
    every other participant is flagged ``removed``. The merge is not
    reversible, but a removed participant can be restored on its own.
    """

    unique: list[ConsolidatedParticipant] = []
    for participant in participants:
        if participant.removed:
            raise ValueError(f"Cannot merge removed participant {participant.display_name!r}")
        if all(participant is not seen for seen in unique):
            unique.append(participant)
    if len(unique) < 2:
        raise ValueError("Merging requires at least two distinct participants")

    primary = max(unique, key=lambda participant: participant.total_minutes)
    secondaries = [participant for participant in unique if participant is not primary]

    sessions = list(primary.sessions)
    email = primary.email
    for secondary in secondaries:
        sessions.extend(secondary.sessions)
        if not email and secondary.email:
            email = secondary.email
        secondary.removed = True

    primary.sessions = sessions
    primary.email = email
    primary.total_minutes = sum(session.duration_minutes for session in sessions)
    primary.first_join = min(session.join_time for session in sessions)
    primary.last_leave = max(session.leave_time for session in sessions)

    log.info(
        "Merged %s into %r (total=%s min)",
        [secondary.display_name for secondary in secondaries],
        primary.display_name,
        primary.total_minutes,
    )
    return primary, analyze_presence(primary, config)


def exclude_participant(participant: ConsolidatedParticipant) -> None:
    participant.removed = True


def restore_participant(participant: ConsolidatedParticipant) -> None:
    participant.removed = False
