"""Pure ingestion value objects."""

from roster_ingestion.domain.types import Grid, TableSnapshot, normalize_header, table_from_grid

__all__ = ["Grid", "TableSnapshot", "normalize_header", "table_from_grid"]
