"""Name normalisation used for similarity scoring and exclusion tests.

Never used to group sessions: consolidation keys on the exact trimmed display
name.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Lowercase, strip accents and punctuation, collapse whitespace."""

    decomposed = unicodedata.normalize("NFD", name.lower())
    without_marks = "".join(char for char in decomposed if not unicodedata.combining(char))
    cleaned = _NON_ALNUM.sub("", without_marks)
    return _WHITESPACE.sub(" ", cleaned).strip()


@dataclass(slots=True, frozen=True)
class NameParts:
    first: str
    last: str
    full: str


def name_parts(name: str) -> NameParts:
    normalized = normalize_name(name)
    tokens = normalized.split()
    return NameParts(
        first=tokens[0] if tokens else "",
        last=tokens[-1] if tokens else "",
        full=normalized,
    )


def is_excluded(normalized: str, exclusions: Iterable[str]) -> bool:
    """Return whether a normalised name hits any operator exclusion term."""

    for term in exclusions:
        excluded = normalize_name(term)
        if not excluded:
            continue
        if normalized == excluded or normalized.startswith(excluded + " "):
            return True
        if excluded in normalized:
            return True
    return False
