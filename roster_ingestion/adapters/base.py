"""
Workbook source protocol.

Contract:
    A WorkbookSource exposes named tabs.  ``read_grid`` returns the raw
    cell grid of one tab (roster tabs need it: their header is not on row
    1); ``read_table`` returns a ``TableSnapshot`` with the header on row 1.

Architecture: roster_ingestion/adapters. File I/O only, no DB imports.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from roster_ingestion.domain.types import Grid, TableSnapshot, table_from_grid


@runtime_checkable
class WorkbookSource(Protocol):
    """Protocol for reading tabs from a workbook-like source."""

    @property
    def name(self) -> str:
        """Identifier used in logs (file path, directory, label)."""
        ...

    def sheet_names(self) -> tuple[str, ...]:
        ...

    def read_grid(self, sheet: str) -> list[list[Any]]:
        """Raw rows of ``sheet``.  Raises MissingTableError when absent."""
        ...

    def read_table(self, sheet: str) -> TableSnapshot:
        ...


class GridWorkbookSource:
    """Shared behavior for sources that can produce a grid per tab."""

    def __init__(self, name: str):
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def sheet_names(self) -> tuple[str, ...]:
        raise NotImplementedError

    def read_grid(self, sheet: str) -> list[list[Any]]:
        raise NotImplementedError

    def has_sheet(self, sheet: str) -> bool:
        return sheet in self.sheet_names()

    def read_table(self, sheet: str) -> TableSnapshot:
        return table_from_grid(sheet, self.read_grid(sheet))


def normalize_cell(value: Any) -> Any:
    """Cell value as the loaders expect it.

    None -> "", integral floats -> int, strings stripped; dates and other
    values pass through unchanged.
    """
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return value.strip()
    return value


def trim_grid(grid: Grid) -> list[list[Any]]:
    """Drop trailing blank rows so ``len(grid)`` reflects real content."""
    rows = [list(row) for row in grid]
    while rows and all(v in ("", None) for v in rows[-1]):
        rows.pop()
    return rows
