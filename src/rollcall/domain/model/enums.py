"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class AssociationStatus(StrEnum):
    PENDING = "pending"
    AUTO_MATCHED = "auto_matched"
    SUGGESTED = "suggested"
    CONFIRMED = "confirmed"
    NOT_FOUND = "not_found"
    DOUBT = "doubt"


class PendingStatus(StrEnum):
    """Association outcomes that are queued for later manual resolution."""

    NOT_FOUND = "not_found"
    DOUBT = "doubt"


class MatchReason(StrEnum):
    IDENTICAL_EMAIL = "identical email"
    IDENTICAL_NAME = "identical name"
    VERY_SIMILAR_NAME = "very similar name"
    FIRST_NAME_MATCH = "first-name match"
    PARTIALLY_SIMILAR = "partially similar"
