"""Association between a consolidated participant and a candidate registration.

Each variant carries a literal ``status`` discriminator so an association can
never hold fields that belong to another state (a non-doubt record with a
stray second candidate, a pending record with a score, ...).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from .enums import AssociationStatus

if TYPE_CHECKING:
    from .enums import MatchReason
    from .registrations import RegistrationCandidate


@dataclass(slots=True, frozen=True, kw_only=True)
class PendingAssociation:
    """No candidate proposed yet; waiting for operator action."""

    status: Literal[AssociationStatus.PENDING] = AssociationStatus.PENDING


@dataclass(slots=True, frozen=True, kw_only=True)
class AutoMatchedAssociation:
    """High-confidence proposal produced by the matcher."""

    candidate: RegistrationCandidate
    score: int
    reason: MatchReason
    status: Literal[AssociationStatus.AUTO_MATCHED] = AssociationStatus.AUTO_MATCHED


@dataclass(slots=True, frozen=True, kw_only=True)
class SuggestedAssociation:
    """Medium-confidence proposal that needs an explicit confirmation."""

    candidate: RegistrationCandidate
    score: int
    reason: MatchReason
    status: Literal[AssociationStatus.SUGGESTED] = AssociationStatus.SUGGESTED


@dataclass(slots=True, frozen=True, kw_only=True)
class ConfirmedAssociation:
    candidate: RegistrationCandidate
    status: Literal[AssociationStatus.CONFIRMED] = AssociationStatus.CONFIRMED


@dataclass(slots=True, frozen=True, kw_only=True)
class NotFoundAssociation:
    status: Literal[AssociationStatus.NOT_FOUND] = AssociationStatus.NOT_FOUND


@dataclass(slots=True, frozen=True, kw_only=True)
class DoubtAssociation:
    """Operator could not decide between exactly two registrations."""

    candidate_a: RegistrationCandidate
    candidate_b: RegistrationCandidate
    status: Literal[AssociationStatus.DOUBT] = AssociationStatus.DOUBT

    def __post_init__(self) -> None:
        if self.candidate_a.id == self.candidate_b.id:
            raise ValueError("Doubt association requires two distinct registrations")


type ProposedAssociation = AutoMatchedAssociation | SuggestedAssociation

type Association = (
    PendingAssociation
    | AutoMatchedAssociation
    | SuggestedAssociation
    | ConfirmedAssociation
    | NotFoundAssociation
    | DoubtAssociation
)
type AssociationsByParticipant = dict[str, Association]


def linked_candidate(association: Association) -> RegistrationCandidate | None:
    """Return the registration an association currently points at, if any."""

    if isinstance(
        association,
        AutoMatchedAssociation | SuggestedAssociation | ConfirmedAssociation,
    ):
        return association.candidate
    return None
