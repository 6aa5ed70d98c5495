"""Port for turning a provider export into raw session records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rollcall.domain.model import RawSessionRecord


@dataclass(slots=True, frozen=True)
class ParseResult:
    """Parsed rows plus diagnostics about rows that had to be skipped."""

    records: tuple[RawSessionRecord, ...]
    total_rows: int
    dropped_rows: int


@runtime_checkable
class ExportParser(Protocol):
    def __call__(self, text: str) -> ParseResult: ...


__all__ = ["ExportParser", "ParseResult"]
