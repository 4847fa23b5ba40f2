"""
roster_ingestion -- reading central tables and roster tabs.

Workbook sources (xlsx, CSV directory, in-memory) feed the schema
validator, the context loader and the roster parser.  Nothing here writes.
"""

from roster_ingestion.adapters import (
    CsvDirectorySource,
    MemoryWorkbookSource,
    WorkbookSource,
    XlsxWorkbookSource,
    open_workbook,
)
from roster_ingestion.context_loader import (
    build_engine_context,
    load_active_workspaces,
    load_holidays,
    load_leaves,
    load_ledger_assignments,
    load_shift_mapping,
    load_status_assignments,
)
from roster_ingestion.domain.types import TableSnapshot, table_from_grid
from roster_ingestion.roster_parser import RosterSheet, parse_roster_grid
from roster_ingestion.schema_validator import (
    validate_central_tables,
    validate_table_headers,
    validate_workspace,
)

__all__ = [
    "CsvDirectorySource",
    "MemoryWorkbookSource",
    "RosterSheet",
    "TableSnapshot",
    "WorkbookSource",
    "XlsxWorkbookSource",
    "build_engine_context",
    "load_active_workspaces",
    "load_holidays",
    "load_leaves",
    "load_ledger_assignments",
    "load_shift_mapping",
    "load_status_assignments",
    "open_workbook",
    "parse_roster_grid",
    "table_from_grid",
    "validate_central_tables",
    "validate_table_headers",
    "validate_workspace",
]
