"""Association lifecycle transitions.

    Pending -> AutoMatched | Suggested         (matcher proposals)
    AutoMatched | Suggested --confirm--> Confirmed
    any non-Confirmed --select_candidate--> Confirmed
    any non-Confirmed, non-Doubt --mark_not_found--> NotFound
    any non-Confirmed, non-Doubt --mark_doubt--> Doubt
    NotFound | Doubt --reset--> Pending

Confirmed is terminal for a review session; unlinking a stored confirmation
happens against the registration store, not here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rollcall.domain.errors import InvalidTransitionError
from rollcall.domain.model import (
    AssociationStatus,
    AutoMatchedAssociation,
    ConfirmedAssociation,
    DoubtAssociation,
    NotFoundAssociation,
    PendingAssociation,
    SuggestedAssociation,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from rollcall.domain.model import Association, RegistrationCandidate

BLOCKING_STATUSES = frozenset(
    {
        AssociationStatus.PENDING,
        AssociationStatus.AUTO_MATCHED,
        AssociationStatus.SUGGESTED,
    }
)


def _refuse(association: Association, action: str) -> InvalidTransitionError:
    return InvalidTransitionError(f"Cannot {action} an association in state {association.status}")


def confirm(association: Association) -> ConfirmedAssociation:
    if isinstance(association, AutoMatchedAssociation | SuggestedAssociation):
        return ConfirmedAssociation(candidate=association.candidate)
    raise _refuse(association, "confirm")


def select_candidate(
    association: Association,
    candidate: RegistrationCandidate,
) -> ConfirmedAssociation:
    if isinstance(association, ConfirmedAssociation):
        raise _refuse(association, "select a candidate for")
    return ConfirmedAssociation(candidate=candidate)


def mark_not_found(association: Association) -> NotFoundAssociation:
    if isinstance(association, ConfirmedAssociation | DoubtAssociation):
        raise _refuse(association, "mark as not found")
    return NotFoundAssociation()


def mark_doubt(
    association: Association,
    candidate_a: RegistrationCandidate,
    candidate_b: RegistrationCandidate,
) -> DoubtAssociation:
    if isinstance(association, ConfirmedAssociation | DoubtAssociation):
        raise _refuse(association, "mark as doubt")
    if candidate_a.id == candidate_b.id:
        raise InvalidTransitionError("A doubt needs two distinct registrations")
    return DoubtAssociation(candidate_a=candidate_a, candidate_b=candidate_b)


def reset(association: Association) -> PendingAssociation:
    if isinstance(association, NotFoundAssociation | DoubtAssociation):
        return PendingAssociation()
    raise _refuse(association, "reset")


def blocking_participants(associations: Mapping[str, Association]) -> list[str]:
    """Participants that still need an operator decision."""

    return [
        name
        for name, association in associations.items()
        if association.status in BLOCKING_STATUSES
    ]


def can_advance(associations: Mapping[str, Association]) -> bool:
    return not blocking_participants(associations)


def count_by_status(associations: Iterable[Association]) -> dict[AssociationStatus, int]:
    counts = dict.fromkeys(AssociationStatus, 0)
    for association in associations:
        counts[association.status] += 1
    return counts
