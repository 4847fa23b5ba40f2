"""
Engine configuration schema.

Frozen dataclasses the YAML configuration is parsed into.  One
``EngineConfig`` is built per run by ``roster_config.get_active_config()``
and handed to constructors; nothing reads configuration files after that.
"""

from __future__ import annotations

from dataclasses import dataclass

from roster_kernel.domain.resolution import ResolutionSettings

# Logical table keys the loaders look up
WORKSPACES = "workspaces"
RULES = "rules"
DECISION = "decision"
LEAVES = "leaves"
HOLIDAYS = "holidays"
MAPPING = "mapping"
LEDGER = "ledger"


@dataclass(frozen=True)
class TableSchema:
    """A named input table and its logical-key -> header-text map."""

    key: str
    name: str
    headers: tuple[tuple[str, str], ...]
    required: bool = True

    @property
    def header_map(self) -> dict[str, str]:
        return dict(self.headers)

    def header(self, logical_key: str) -> str:
        return self.header_map[logical_key]


@dataclass(frozen=True)
class RosterLayout:
    """Where things live on a roster tab.  Row numbers are 1-based."""

    tabs: tuple[str, ...] = ("Consolidated",)
    header_row: int = 4
    data_row: int = 5
    columns: tuple[tuple[str, str], ...] = (
        ("employee_id", "Employee ID"),
        ("default_shift", "Default Shift"),
        ("primary_off_day", "Primary Off Day"),
        ("secondary_off_day", "Secondary Off Day"),
    )

    @property
    def column_map(self) -> dict[str, str]:
        return dict(self.columns)


@dataclass(frozen=True)
class EngineConfig:
    """Everything a run needs to know that is not data."""

    dry_run: bool
    database_url: str
    default_shift: str
    half_day_shifts: frozenset[str]
    max_runtime_seconds: float
    max_workers: int
    roster: RosterLayout
    tables: tuple[TableSchema, ...]
    checksum: str = ""

    def table(self, key: str) -> TableSchema:
        for table in self.tables:
            if table.key == key:
                return table
        raise KeyError(key)

    @property
    def required_tables(self) -> tuple[TableSchema, ...]:
        return tuple(t for t in self.tables if t.required)

    def resolution_settings(self) -> ResolutionSettings:
        return ResolutionSettings(
            default_shift=self.default_shift,
            half_day_shifts=self.half_day_shifts,
        )
