"""Workbook sources (file I/O only, no DB)."""

from __future__ import annotations

from pathlib import Path

from roster_ingestion.adapters.base import GridWorkbookSource, WorkbookSource
from roster_ingestion.adapters.csv_adapter import CsvDirectorySource
from roster_ingestion.adapters.memory_adapter import MemoryWorkbookSource
from roster_ingestion.adapters.xlsx_adapter import XlsxWorkbookSource
from roster_kernel.exceptions import WorkspaceNotFoundError

XLSX_SUFFIXES = frozenset({".xlsx", ".xlsm"})


def open_workbook(path: Path | str) -> GridWorkbookSource:
    """Pick the source for ``path``: a directory of CSVs or an .xlsx file.

    Raises:
        WorkspaceNotFoundError: Path missing or of an unsupported kind.
    """
    path = Path(path)
    if path.is_dir():
        return CsvDirectorySource(path)
    if path.is_file() and path.suffix.lower() in XLSX_SUFFIXES:
        return XlsxWorkbookSource(path)
    raise WorkspaceNotFoundError(str(path))


__all__ = [
    "CsvDirectorySource",
    "GridWorkbookSource",
    "MemoryWorkbookSource",
    "WorkbookSource",
    "XlsxWorkbookSource",
    "open_workbook",
]
