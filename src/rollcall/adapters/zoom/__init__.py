"""Public interface for the participant export adapter."""

from __future__ import annotations

from .parser import parse_export
from .schema import HEADER_SYNONYMS, ExportRow, canonical_header, parse_export_timestamp

__all__ = [
    "HEADER_SYNONYMS",
    "ExportRow",
    "canonical_header",
    "parse_export",
    "parse_export_timestamp",
]
