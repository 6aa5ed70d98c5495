"""Read participant exports into raw session records."""

from __future__ import annotations

import csv
import io
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from rollcall.domain.errors import EmptyInputError, MalformedInputError
from rollcall.domain.ports.parsing import ParseResult

from .schema import CANONICAL_FIELDS, ExportRow, canonical_header

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rollcall.domain.model import RawSessionRecord

log = getLogger(__name__)

BOM = "\ufeff"


def _non_blank(rows: Iterable[list[str]]) -> list[list[str]]:
    return [row for row in rows if any(cell.strip() for cell in row)]


def _column_index(header: list[str]) -> dict[str, int]:
    index: dict[str, int] = {}
    for position, label in enumerate(header):
        field = canonical_header(label)
        if field in CANONICAL_FIELDS and field not in index:
            index[field] = position
    return index


def _row_payload(row: list[str], columns: dict[str, int]) -> dict[str, str]:
    return {field: row[position] for field, position in columns.items() if position < len(row)}


def parse_export(text: str) -> ParseResult:
    """Parse a participant export.

    Rows that fail validation are dropped and counted. An export without a
    name column raises :class:`MalformedInputError`; one that yields no usable
    rows raises :class:`EmptyInputError`.
    """

    rows = _non_blank(csv.reader(io.StringIO(text.removeprefix(BOM))))
    if not rows:
        raise EmptyInputError("Participant export is empty")

    header, *data = rows
    columns = _column_index(header)
    if "name" not in columns:
        raise MalformedInputError(
            "Participant export has no name column; headers were: "
            + ", ".join(label.strip() for label in header)
        )

    records: list[RawSessionRecord] = []
    dropped = 0
    for line, row in enumerate(data, start=2):
        try:
            parsed = ExportRow.model_validate(_row_payload(row, columns))
        except ValidationError as exc:
            dropped += 1
            log.warning("Dropping export row %d: %s", line, exc.errors()[0]["msg"])
            continue
        records.append(parsed.to_record())

    if not records:
        raise EmptyInputError(f"Participant export has no usable rows ({dropped} dropped)")

    log.info("Parsed %d session records (%d rows dropped)", len(records), dropped)
    return ParseResult(records=tuple(records), total_rows=len(data), dropped_rows=dropped)
