"""
XLSX workbook source (openpyxl).

Workbooks are opened read-only with cached values (``data_only``), so
formula cells yield their last computed value.  Each tab is read once and
cached; the workbook handle is closed after every read.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import openpyxl

from roster_ingestion.adapters.base import GridWorkbookSource, normalize_cell, trim_grid
from roster_kernel.exceptions import MissingTableError, WorkspaceNotFoundError


class XlsxWorkbookSource(GridWorkbookSource):
    """Read tabs of an .xlsx file as grids and tables."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        if not self.path.is_file():
            raise WorkspaceNotFoundError(str(self.path))
        super().__init__(str(self.path))
        self._sheet_names: tuple[str, ...] | None = None
        self._grids: dict[str, list[list[Any]]] = {}

    def _open(self) -> Any:
        return openpyxl.load_workbook(self.path, read_only=True, data_only=True)

    def sheet_names(self) -> tuple[str, ...]:
        if self._sheet_names is None:
            wb = self._open()
            try:
                self._sheet_names = tuple(wb.sheetnames)
            finally:
                wb.close()
        return self._sheet_names

    def read_grid(self, sheet: str) -> list[list[Any]]:
        if sheet in self._grids:
            return self._grids[sheet]
        if sheet not in self.sheet_names():
            raise MissingTableError([sheet])

        wb = self._open()
        try:
            ws = wb[sheet]
            grid = [
                [normalize_cell(v) for v in row]
                for row in ws.iter_rows(values_only=True)
            ]
        finally:
            wb.close()

        grid = trim_grid(grid)
        self._grids[sheet] = grid
        return grid
