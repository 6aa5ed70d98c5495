"""Identity matching between consolidated participants and registrations.

Batch assignment is greedy: participants are visited by best score,
descending, and a participant whose best registration was already claimed is
re-matched against the unclaimed pool once. This is not a globally optimal
bipartite assignment; deep conflict chains can leave a participant pending
even though a better overall assignment exists. Scores are advisory and every
outcome can be overridden by the operator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rollcall.domain.model import (
    AssociationStatus,
    AutoMatchedAssociation,
    MatchReason,
    PendingAssociation,
    SuggestedAssociation,
)

from .normalize import name_parts, normalize_name
from .presence import round_half_up

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from rollcall.domain.model import (
        AssociationsByParticipant,
        ConsolidatedParticipant,
        RegistrationCandidate,
    )

AUTO_MATCH_THRESHOLD = 90
SUGGESTION_THRESHOLD = 60

log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class MatchResult:
    candidate: RegistrationCandidate | None
    score: int
    reason: MatchReason | None


_NO_MATCH = MatchResult(candidate=None, score=0, reason=None)


def levenshtein(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def name_similarity(name_a: str, name_b: str) -> int:
    """Score two display names from 0 to 100; a name with no letters or digits scores 0."""

    parts_a = name_parts(name_a)
    parts_b = name_parts(name_b)

    if not parts_a.full or not parts_b.full:
        return 0
    if parts_a.full == parts_b.full:
        return 100
    if parts_a.first == parts_b.first:
        if parts_a.last == parts_b.last:
            return 95
        if parts_a.last[:1] == parts_b.last[:1]:
            return 85
        if len(parts_a.first) >= 3:
            return 70

    longest = max(len(parts_a.full), len(parts_b.full))
    distance = levenshtein(parts_a.full, parts_b.full)
    return max(0, round_half_up((1 - distance / longest) * 100))


def _reason_for_score(score: int) -> MatchReason:
    if score >= 95:
        return MatchReason.IDENTICAL_NAME
    if score >= 85:
        return MatchReason.VERY_SIMILAR_NAME
    if score >= 70:
        return MatchReason.FIRST_NAME_MATCH
    return MatchReason.PARTIALLY_SIMILAR


def _same_email(left: str | None, right: str | None) -> bool:
    if not left or not right:
        return False
    return left.strip().lower() == right.strip().lower()


def find_best_match(
    participant: ConsolidatedParticipant,
    candidates: Iterable[RegistrationCandidate],
) -> MatchResult:
    """Return the single highest-scoring candidate (first one wins ties).

    An identical email short-circuits the scan.
    """

    best = _NO_MATCH
    for candidate in candidates:
        if _same_email(participant.email, candidate.email):
            return MatchResult(candidate, 100, MatchReason.IDENTICAL_EMAIL)

        score = name_similarity(participant.display_name, candidate.display_name)
        if score > best.score:
            best = MatchResult(candidate, score, _reason_for_score(score))
    return best


def status_for_score(score: int) -> AssociationStatus:
    if score >= AUTO_MATCH_THRESHOLD:
        return AssociationStatus.AUTO_MATCHED
    if score >= SUGGESTION_THRESHOLD:
        return AssociationStatus.SUGGESTED
    return AssociationStatus.PENDING


def association_for_match(
    match: MatchResult,
) -> AutoMatchedAssociation | SuggestedAssociation | PendingAssociation:
    if match.candidate is None or match.reason is None:
        return PendingAssociation()
    status = status_for_score(match.score)
    if status is AssociationStatus.AUTO_MATCHED:
        return AutoMatchedAssociation(
            candidate=match.candidate, score=match.score, reason=match.reason
        )
    if status is AssociationStatus.SUGGESTED:
        return SuggestedAssociation(
            candidate=match.candidate, score=match.score, reason=match.reason
        )
    return PendingAssociation()


def match_participants(
    participants: Sequence[ConsolidatedParticipant],
    candidates: Sequence[RegistrationCandidate],
) -> AssociationsByParticipant:
    """Assign each participant at most one unclaimed registration, best scores first."""

    scored = [
        (participant, find_best_match(participant, candidates)) for participant in participants
    ]
    scored.sort(key=lambda item: item[1].score, reverse=True)

    claimed: set[int] = set()
    associations: AssociationsByParticipant = {}
    for participant, match in scored:
        chosen = match
        if match.candidate is not None and match.candidate.id in claimed:
            remaining = [candidate for candidate in candidates if candidate.id not in claimed]
            chosen = find_best_match(participant, remaining)
            log.debug(
                "Registration %s already claimed; %r re-matched to %s (score=%s)",
                match.candidate.id,
                participant.display_name,
                chosen.candidate.id if chosen.candidate else None,
                chosen.score,
            )

        if chosen.candidate is None or chosen.score < SUGGESTION_THRESHOLD:
            associations[participant.display_name] = PendingAssociation()
            continue

        claimed.add(chosen.candidate.id)
        associations[participant.display_name] = association_for_match(chosen)
    return associations


def normalized_query_matches(candidate: RegistrationCandidate, query: str) -> bool:
    """Case/accent-insensitive substring test on name, plain substring on phone."""

    needle = normalize_name(query)
    if needle and needle in normalize_name(candidate.display_name):
        return True
    return bool(candidate.phone) and query.strip() in (candidate.phone or "")
