"""Domain model for attendance reconciliation."""

from __future__ import annotations

from .associations import (
    Association,
    AssociationsByParticipant,
    AutoMatchedAssociation,
    ConfirmedAssociation,
    DoubtAssociation,
    NotFoundAssociation,
    PendingAssociation,
    ProposedAssociation,
    SuggestedAssociation,
    linked_candidate,
)
from .enums import AssociationStatus, MatchReason, PendingStatus
from .presence import PresenceAnalysis, WindowConfig
from .registrations import (
    ATTENDANCE_FIELDS,
    CandidateRef,
    ConfirmationRecord,
    PendingAttendance,
    Registration,
    RegistrationCandidate,
)
from .sessions import ConsolidatedParticipant, RawSessionRecord, SessionInterval

__all__ = [
    "ATTENDANCE_FIELDS",
    "Association",
    "AssociationStatus",
    "AssociationsByParticipant",
    "AutoMatchedAssociation",
    "CandidateRef",
    "ConfirmationRecord",
    "ConfirmedAssociation",
    "ConsolidatedParticipant",
    "DoubtAssociation",
    "MatchReason",
    "NotFoundAssociation",
    "PendingAssociation",
    "PendingAttendance",
    "PendingStatus",
    "PresenceAnalysis",
    "ProposedAssociation",
    "RawSessionRecord",
    "Registration",
    "RegistrationCandidate",
    "SessionInterval",
    "SuggestedAssociation",
    "WindowConfig",
    "linked_candidate",
]
