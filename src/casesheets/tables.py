from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

logger = logging.getLogger(__name__)

# A row is the header row only if its raw cells contain every one of these.
MARKER_TOKENS = ("EXPEDIENTE", "NOMBRES", "RUT")
SCAN_WINDOW = 10
# First sheet row (1-based) rewritten by a bulk overwrite.
DATA_START_ROW = 4

RawGrid = list[list[Any]]
CaseRecord = dict[str, Any]


@dataclass
class HeaderLocation:
    """Header row found inside a grid: 0-based grid index plus the trimmed header names."""
    index: int
    values: list[str]

    @property
    def sheet_row(self) -> int:
        return self.index + 1


@dataclass
class CaseTable:
    headers: list[str] = field(default_factory=list)
    cases: list[CaseRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"headers": self.headers, "cases": self.cases}


def build_header_list(row: Sequence[Any]) -> list[str]:
    return [str(cell).strip() if cell else "" for cell in row]


def locate_header_row(grid: Optional[Sequence[Sequence[Any]]]) -> Optional[HeaderLocation]:
    """
    Scans the first SCAN_WINDOW rows for the header row.

    Markers are matched against the raw cells, so a marker padded with whitespace
    does not qualify. Returns None when no row in the window qualifies.
    """
    if not grid:
        return None

    for index, row in enumerate(grid[:SCAN_WINDOW]):
        if row and all(token in row for token in MARKER_TOKENS):
            return HeaderLocation(index=index, values=build_header_list(row))
    return None


def project_records(grid: Sequence[Sequence[Any]], header: HeaderLocation) -> list[CaseRecord]:
    data_start = header.index + 1
    records: list[CaseRecord] = []
    for offset, row in enumerate(grid[data_start:]):
        row = row or []
        record: CaseRecord = {}
        # Columns past the end of a short row are unset; with repeated header
        # names the last column wins, even when it is unset.
        for i, name in enumerate(header.values):
            if i < len(row):
                record[name] = row[i]
            else:
                record.pop(name, None)
        record["rowIndex"] = data_start + offset + 1
        records.append(record)
    return records


def project_case_table(grid: Optional[Sequence[Sequence[Any]]]) -> CaseTable:
    if not grid:
        return CaseTable()

    header = locate_header_row(grid)
    if header is None:
        logger.error("Header row not found in the first %s rows of the sheet.", SCAN_WINDOW)
        return CaseTable()

    return CaseTable(headers=header.values, cases=project_records(grid, header))


def serialize_records(headers: Sequence[str], records: Iterable[CaseRecord]) -> RawGrid:
    """
    Inverse of project_records: one row per record in header order.
    Missing or falsy fields become None so the target cell is cleared.
    """
    return [[_field(record, name) for name in headers] for record in records]


def _field(record: Any, name: Any) -> Any:
    if not isinstance(record, dict):
        return None
    key = name if isinstance(name, str) else str(name)
    return record.get(key) or None
