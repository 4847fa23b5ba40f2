"""In-memory workbook source for tests and for embedding the engine."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from roster_ingestion.adapters.base import GridWorkbookSource, normalize_cell
from roster_kernel.exceptions import MissingTableError


class MemoryWorkbookSource(GridWorkbookSource):
    """Tabs held as grids in a dict."""

    def __init__(self, grids: Mapping[str, Sequence[Sequence[Any]]], name: str = "memory"):
        super().__init__(name)
        self._grids = {
            sheet: [[normalize_cell(v) for v in row] for row in grid]
            for sheet, grid in grids.items()
        }

    @classmethod
    def from_records(
        cls,
        tables: Mapping[str, Sequence[Mapping[str, Any]]],
        headers: Mapping[str, Sequence[str]] | None = None,
        name: str = "memory",
    ) -> MemoryWorkbookSource:
        """Build tabs from lists of dicts.

        Column order is ``headers[tab]`` when given, else the order in which
        keys first appear across the records.
        """
        headers = headers or {}
        grids: dict[str, list[list[Any]]] = {}
        for sheet, records in tables.items():
            columns = list(headers.get(sheet, ()))
            for record in records:
                for key in record:
                    if key not in columns:
                        columns.append(key)
            grids[sheet] = [columns] + [[r.get(c) for c in columns] for r in records]
        return cls(grids, name=name)

    def sheet_names(self) -> tuple[str, ...]:
        return tuple(self._grids)

    def read_grid(self, sheet: str) -> list[list[Any]]:
        if sheet not in self._grids:
            raise MissingTableError([sheet])
        return self._grids[sheet]
