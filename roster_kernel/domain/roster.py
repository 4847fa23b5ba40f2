"""
Roster value objects: the employee baseline and the calendar day.

Both are frozen so that a resolution can never observe another cell's
changes to its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from roster_kernel.domain.calendar import (
    coerce_text,
    day_code,
    format_date,
    normalize_day,
    normalize_employee_id,
)

OFF_SHIFT = "OFF"


class WorkFlag(str, Enum):
    """Work/off state of a day, before or after rules."""

    WORK = "WORK"
    OFF = "OFF"


@dataclass(frozen=True)
class Employee:
    """One worker's static weekly baseline.

    ``base_shift`` is a shift code or ``"OFF"`` for employees who do not work
    unless a rule says so.
    """

    employee_id: str
    display_name: str
    base_shift: str
    primary_off_day: str
    secondary_off_day: str

    @classmethod
    def from_cells(
        cls,
        employee: Any,
        base_shift: Any,
        primary_off_day: Any,
        secondary_off_day: Any,
    ) -> Employee:
        """Build an employee from raw roster cells.

        A blank Default Shift is read as ``"OFF"`` on purpose: the employee
        works only when a rule puts them on.
        """
        shift = coerce_text(base_shift)
        if not shift or shift.upper() == OFF_SHIFT:
            shift = OFF_SHIFT
        return cls(
            employee_id=normalize_employee_id(employee),
            display_name=coerce_text(employee),
            base_shift=shift,
            primary_off_day=normalize_day(primary_off_day),
            secondary_off_day=normalize_day(secondary_off_day),
        )

    @property
    def off_days(self) -> tuple[str, str]:
        return (self.primary_off_day, self.secondary_off_day)

    @property
    def works_by_default(self) -> bool:
        return self.base_shift != OFF_SHIFT


@dataclass(frozen=True)
class DayFact:
    """One calendar day with its canonical key and weekday code."""

    day: date
    date_str: str
    day_code: str

    @classmethod
    def of(cls, value: date) -> DayFact:
        return cls(day=value, date_str=format_date(value), day_code=day_code(value))
