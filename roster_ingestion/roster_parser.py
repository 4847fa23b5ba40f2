"""
Roster parser -- reads one roster tab into employees and schedule days.

Layout (row numbers 1-based, configurable):
    - The header row names the employee columns and holds one date per
      schedule column.  Any header cell that parses as a date is a
      schedule column; everything else is ignored.
    - Data rows start at ``data_row``.  Rows with a blank employee cell are
      skipped.

Failure modes:
    - RosterLayoutError: header row missing, required employee columns
      missing, or no date columns at all.
"""

from __future__ import annotations

from dataclasses import dataclass

from roster_config.schema import RosterLayout
from roster_ingestion.domain.types import Grid, normalize_header
from roster_kernel.domain.calendar import coerce_text, parse_safe_date
from roster_kernel.domain.roster import DayFact, Employee
from roster_kernel.exceptions import RosterLayoutError


@dataclass(frozen=True)
class RosterSheet:
    """A parsed roster tab."""

    tab_name: str
    employees: tuple[Employee, ...]
    days: tuple[DayFact, ...]

    @property
    def cell_count(self) -> int:
        return len(self.employees) * len(self.days)


def _cell(row, index: int):
    return row[index] if index < len(row) else None


def parse_roster_grid(grid: Grid, layout: RosterLayout, tab_name: str = "") -> RosterSheet:
    """Parse a raw roster grid according to ``layout``."""
    if len(grid) < layout.header_row:
        raise RosterLayoutError(tab_name, f"no header row at row {layout.header_row}")
    header = grid[layout.header_row - 1]

    positions: dict[str, int] = {}
    for i, cell in enumerate(header):
        positions.setdefault(normalize_header(cell), i)

    columns: dict[str, int] = {}
    missing = []
    for key, text in layout.columns:
        index = positions.get(normalize_header(text))
        if index is None:
            missing.append(text)
        else:
            columns[key] = index
    if missing:
        raise RosterLayoutError(tab_name, f"missing required columns: {', '.join(missing)}")

    date_columns: list[tuple[int, DayFact]] = []
    for i, cell in enumerate(header):
        parsed = parse_safe_date(cell)
        if parsed is not None:
            date_columns.append((i, DayFact.of(parsed)))
    if not date_columns:
        raise RosterLayoutError(tab_name, "no date columns detected")

    employees = []
    for row in grid[layout.data_row - 1 :]:
        if not coerce_text(_cell(row, columns["employee_id"])):
            continue
        employees.append(
            Employee.from_cells(
                _cell(row, columns["employee_id"]),
                _cell(row, columns["default_shift"]),
                _cell(row, columns["primary_off_day"]),
                _cell(row, columns["secondary_off_day"]),
            )
        )

    return RosterSheet(
        tab_name=tab_name,
        employees=tuple(employees),
        days=tuple(day for _, day in date_columns),
    )
