"""
roster_ingestion.domain.types -- Frozen table snapshots.  ZERO I/O.

A ``TableSnapshot`` is what every workbook adapter hands to the loaders:
header text as found in the source plus one dict per non-blank data row.
Header lookups are case- and whitespace-insensitive, matching how the
source tables are maintained by hand.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

Grid = Sequence[Sequence[Any]]


def normalize_header(value: Any) -> str:
    """Lookup form of a header cell."""
    if value is None:
        return ""
    return " ".join(str(value).split()).lower()


@dataclass(frozen=True)
class TableSnapshot:
    """One input table read from a workbook source."""

    name: str
    headers: tuple[str, ...]
    records: tuple[dict[str, Any], ...] = ()

    def header_index(self) -> dict[str, str]:
        """``normalized header -> header as written``; first occurrence wins."""
        index: dict[str, str] = {}
        for header in self.headers:
            index.setdefault(normalize_header(header), header)
        return index

    def has_header(self, header: str) -> bool:
        return normalize_header(header) in self.header_index()

    def missing_headers(self, required: Sequence[str]) -> list[str]:
        index = self.header_index()
        return [h for h in required if normalize_header(h) not in index]

    def project(self, header_map: Mapping[str, str]) -> list[dict[str, Any]]:
        """Re-key every record by logical key.

        ``header_map`` maps logical keys to header text.  Logical keys whose
        header is absent from the table come back as None.
        """
        index = self.header_index()
        resolved = {key: index.get(normalize_header(h)) for key, h in header_map.items()}
        return [
            {key: (record.get(actual) if actual else None) for key, actual in resolved.items()}
            for record in self.records
        ]

    def __len__(self) -> int:
        return len(self.records)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def table_from_grid(name: str, grid: Grid, header_row: int = 1) -> TableSnapshot:
    """Build a snapshot from a 2-D grid whose header is on ``header_row`` (1-based).

    Blank header cells become ``Column_<n>``; duplicate headers get a numeric
    suffix.  Rows with no non-blank cell are skipped.
    """
    if len(grid) < header_row:
        return TableSnapshot(name=name, headers=())

    raw_headers = list(grid[header_row - 1])
    while raw_headers and _is_blank(raw_headers[-1]):
        raw_headers.pop()

    headers: list[str] = []
    for i, cell in enumerate(raw_headers):
        key = " ".join(str(cell).split()) if not _is_blank(cell) else f"Column_{i + 1}"
        base, count = key, 0
        while key in headers:
            count += 1
            key = f"{base}_{count}"
        headers.append(key)

    records = []
    for row in grid[header_row:]:
        values = list(row[: len(headers)])
        values += [None] * (len(headers) - len(values))
        if all(_is_blank(v) for v in values):
            continue
        records.append(dict(zip(headers, values)))

    return TableSnapshot(name=name, headers=tuple(headers), records=tuple(records))
