"""
Schema validation -- protects the engine against structure drift.

Responsibility:
    Verify, before any resolution runs, that every required input table
    exists and carries every configured header, and that each workspace
    has its roster tabs.

Failure modes:
    - MissingTableError: one or more required tables/tabs are absent.
      All missing names are reported together.
    - MissingColumnsError: a table lacks configured headers.
    Both are logged as ``schema_validation_failed`` before being raised.
"""

from __future__ import annotations

from roster_config.schema import EngineConfig, RosterLayout, TableSchema
from roster_ingestion.adapters.base import WorkbookSource
from roster_ingestion.domain.types import TableSnapshot
from roster_kernel.exceptions import MissingColumnsError, MissingTableError
from roster_kernel.logging_config import get_logger

logger = get_logger("ingestion.schema")


def validate_table_headers(table: TableSnapshot, schema: TableSchema) -> None:
    """Raise MissingColumnsError if ``table`` lacks any configured header."""
    missing = table.missing_headers([h for _, h in schema.headers])
    if missing:
        logger.error(
            "schema_validation_failed",
            extra={"table_name": schema.name, "missing_headers": missing},
        )
        raise MissingColumnsError(schema.name, missing)


def validate_central_tables(
    source: WorkbookSource,
    config: EngineConfig,
) -> dict[str, TableSnapshot]:
    """
    Check and read every configured central table.

    Optional tables that are absent are left out of the result.

    Returns:
        ``logical key -> TableSnapshot`` for every table present.

    Raises:
        MissingTableError: Any required table is absent.
        MissingColumnsError: A present table lacks configured headers.
    """
    available = set(source.sheet_names())
    missing = [t.name for t in config.required_tables if t.name not in available]
    if missing:
        logger.error(
            "schema_validation_failed",
            extra={"source": source.name, "missing_tables": missing},
        )
        raise MissingTableError(missing)

    tables: dict[str, TableSnapshot] = {}
    for schema in config.tables:
        if schema.name not in available:
            continue
        table = source.read_table(schema.name)
        validate_table_headers(table, schema)
        tables[schema.key] = table

    logger.info(
        "schema_validated",
        extra={"source": source.name, "tables": sorted(t.name for t in tables.values())},
    )
    return tables


def validate_workspace(source: WorkbookSource, layout: RosterLayout) -> None:
    """Raise MissingTableError if the workspace lacks any roster tab."""
    available = set(source.sheet_names())
    missing = [tab for tab in layout.tabs if tab not in available]
    if missing:
        logger.error(
            "schema_validation_failed",
            extra={"source": source.name, "missing_tabs": missing},
        )
        raise MissingTableError(missing)
