"""
CSV directory workbook source.

A directory stands in for a workbook: every ``<tab>.csv`` file in it is a
tab.  Files are read with ``utf-8-sig`` so a BOM left by spreadsheet
exports is stripped.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any

from roster_ingestion.adapters.base import GridWorkbookSource, normalize_cell, trim_grid
from roster_kernel.exceptions import MissingTableError, WorkspaceNotFoundError


class CsvDirectorySource(GridWorkbookSource):
    """One CSV file per tab inside ``directory``."""

    def __init__(
        self,
        directory: Path | str,
        encoding: str = "utf-8-sig",
        delimiter: str = ",",
    ):
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise WorkspaceNotFoundError(str(self.directory))
        super().__init__(str(self.directory))
        self.encoding = encoding
        self.delimiter = delimiter

    def sheet_names(self) -> tuple[str, ...]:
        return tuple(sorted(p.stem for p in self.directory.glob("*.csv")))

    def read_grid(self, sheet: str) -> list[list[Any]]:
        path = self.directory / f"{sheet}.csv"
        if not path.is_file():
            raise MissingTableError([sheet])
        with path.open("r", encoding=self.encoding, newline="") as f:
            reader = csv.reader(f, delimiter=self.delimiter)
            return trim_grid([[normalize_cell(v) for v in row] for row in reader])
