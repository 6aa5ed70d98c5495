"""In-memory review workspace for one uploaded export.

The workspace is the single mutable object passed between pipeline stages and
operator actions. The set of claimed registrations is always derived from the
current associations of live (non-removed) participants, never stored on its
own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rollcall.domain.errors import RegistrationClaimedError
from rollcall.domain.model import (
    AssociationStatus,
    PendingAssociation,
    linked_candidate,
)

from . import lifecycle
from .consolidate import exclude_participant, merge_participants, restore_participant
from .matching import normalized_query_matches
from .presence import force_approve, revoke_override

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rollcall.domain.model import (
        Association,
        ConsolidatedParticipant,
        PresenceAnalysis,
        RegistrationCandidate,
        WindowConfig,
    )

log = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2


@dataclass(slots=True, frozen=True, kw_only=True)
class ValidationResult:
    """Aggregate view of a workspace, including the full candidate list."""

    total_rows: int
    dropped_rows: int
    consolidated: int
    approved: int
    rejected: int
    auto_matched: int
    suggested: int
    pending: int
    confirmed: int
    not_found: int
    doubt: int
    candidates: tuple[RegistrationCandidate, ...]


@dataclass(slots=True, frozen=True)
class ReviewRow:
    participant: ConsolidatedParticipant
    analysis: PresenceAnalysis
    association: Association


@dataclass(kw_only=True)
class ReviewWorkspace:
    config: WindowConfig
    participants: dict[str, ConsolidatedParticipant]
    analyses: dict[str, PresenceAnalysis]
    associations: dict[str, Association]
    candidates: tuple[RegistrationCandidate, ...] = field(default_factory=tuple)
    total_rows: int = 0
    dropped_rows: int = 0

    # lookups -----------------------------------------------------------------

    def participant(self, name: str) -> ConsolidatedParticipant:
        try:
            return self.participants[name]
        except KeyError:
            raise KeyError(f"Unknown participant {name!r}") from None

    def candidate(self, registration_id: int) -> RegistrationCandidate:
        for candidate in self.candidates:
            if candidate.id == registration_id:
                return candidate
        raise KeyError(f"Unknown registration {registration_id}")

    def live_participants(self) -> list[ConsolidatedParticipant]:
        return [
            participant for participant in self.participants.values() if not participant.removed
        ]

    def live_associations(self) -> dict[str, Association]:
        return {
            participant.display_name: self.associations[participant.display_name]
            for participant in self.live_participants()
        }

    @property
    def claimed_ids(self) -> dict[int, str]:
        """Registration id -> participant name for every live linked association."""

        claimed: dict[int, str] = {}
        for name, association in self.live_associations().items():
            candidate = linked_candidate(association)
            if candidate is not None:
                claimed.setdefault(candidate.id, name)
        return claimed

    # participant corrections -------------------------------------------------

    def merge(self, names: Sequence[str]) -> ConsolidatedParticipant:
        primary, analysis = merge_participants(
            [self.participant(name) for name in names],
            self.config,
        )
        self.analyses[primary.display_name] = analysis
        return primary

    def exclude(self, name: str) -> None:
        exclude_participant(self.participant(name))

    def restore(self, name: str) -> None:
        participant = self.participant(name)
        if not participant.removed:
            return
        candidate = linked_candidate(self.associations[name])
        claimed_by = self.claimed_ids.get(candidate.id) if candidate is not None else None
        restore_participant(participant)
        if claimed_by is not None and claimed_by != name:
            log.info(
                "Restored %r lost its link to registration %s (now linked to %r)",
                name,
                candidate.id if candidate else None,
                claimed_by,
            )
            self.associations[name] = PendingAssociation()

    def force_approve(self, name: str) -> PresenceAnalysis:
        self.participant(name)
        self.analyses[name] = force_approve(self.analyses[name])
        return self.analyses[name]

    def revoke_override(self, name: str) -> PresenceAnalysis:
        self.participant(name)
        self.analyses[name] = revoke_override(self.analyses[name])
        return self.analyses[name]

    # association lifecycle ---------------------------------------------------

    def confirm(self, name: str) -> Association:
        self.participant(name)
        self.associations[name] = lifecycle.confirm(self.associations[name])
        return self.associations[name]

    def confirm_all_auto_matched(self) -> int:
        confirmed = 0
        for name, association in self.live_associations().items():
            if association.status is AssociationStatus.AUTO_MATCHED:
                self.associations[name] = lifecycle.confirm(association)
                confirmed += 1
        return confirmed

    def select_candidate(
        self,
        name: str,
        registration_id: int,
        *,
        force: bool = False,
    ) -> Association:
        self.participant(name)
        candidate = self.candidate(registration_id)
        claimed_by = self.claimed_ids.get(registration_id)
        if claimed_by is not None and claimed_by != name:
            if not force:
                raise RegistrationClaimedError(registration_id, claimed_by)
            log.warning(
                "Registration %s linked to both %r and %r by operator override",
                registration_id,
                claimed_by,
                name,
            )
        self.associations[name] = lifecycle.select_candidate(self.associations[name], candidate)
        return self.associations[name]

    def mark_not_found(self, name: str) -> Association:
        self.participant(name)
        self.associations[name] = lifecycle.mark_not_found(self.associations[name])
        return self.associations[name]

    def mark_doubt(self, name: str, registration_a: int, registration_b: int) -> Association:
        self.participant(name)
        self.associations[name] = lifecycle.mark_doubt(
            self.associations[name],
            self.candidate(registration_a),
            self.candidate(registration_b),
        )
        return self.associations[name]

    def reset(self, name: str) -> Association:
        self.participant(name)
        self.associations[name] = lifecycle.reset(self.associations[name])
        return self.associations[name]

    def blocking(self) -> list[str]:
        return lifecycle.blocking_participants(self.live_associations())

    def can_advance(self) -> bool:
        return lifecycle.can_advance(self.live_associations())

    # read views --------------------------------------------------------------

    def rows(self) -> list[ReviewRow]:
        """Approved first (best match score first), then rejected by total minutes."""

        rows = [
            ReviewRow(
                participant,
                self.analyses[participant.display_name],
                self.associations[participant.display_name],
            )
            for participant in self.live_participants()
        ]
        approved = [row for row in rows if row.analysis.approved]
        rejected = [row for row in rows if not row.analysis.approved]
        approved.sort(key=lambda row: getattr(row.association, "score", 0), reverse=True)
        rejected.sort(key=lambda row: row.analysis.total_minutes, reverse=True)
        return approved + rejected

    def summary(self) -> ValidationResult:
        live = self.live_participants()
        approved = sum(
            1 for participant in live if self.analyses[participant.display_name].approved
        )
        counts = lifecycle.count_by_status(self.live_associations().values())
        return ValidationResult(
            total_rows=self.total_rows,
            dropped_rows=self.dropped_rows,
            consolidated=len(live),
            approved=approved,
            rejected=len(live) - approved,
            auto_matched=counts[AssociationStatus.AUTO_MATCHED],
            suggested=counts[AssociationStatus.SUGGESTED],
            pending=counts[AssociationStatus.PENDING],
            confirmed=counts[AssociationStatus.CONFIRMED],
            not_found=counts[AssociationStatus.NOT_FOUND],
            doubt=counts[AssociationStatus.DOUBT],
            candidates=tuple(
                sorted(self.candidates, key=lambda candidate: candidate.display_name.casefold())
            ),
        )

    def search_candidates(self, query: str, *, limit: int = 20) -> list[RegistrationCandidate]:
        if len(query.strip()) < MIN_SEARCH_LENGTH:
            return []
        matches = [
            candidate
            for candidate in self.candidates
            if normalized_query_matches(candidate, query)
        ]
        return matches[:limit]
