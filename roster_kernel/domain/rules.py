"""
Override rule value objects.

Rules are tagged variants: a ``DayPatternRule`` may change whether a day is
worked, a ``ShiftOverrideRule`` may only change the shift of a worked day.
A shift override without a usable shift cannot be constructed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, ClassVar

from roster_kernel.domain.calendar import DAY_CODES, normalize_day
from roster_kernel.domain.roster import DayFact

_FREQUENCY_SPLIT = re.compile(r"[^A-Za-z]+")


class RuleKind(str, Enum):
    """Rule variant tag."""

    DAY_PATTERN = "DAY_PATTERN"
    SHIFT_OVERRIDE = "SHIFT_OVERRIDE"


@dataclass(frozen=True)
class Frequency:
    """Weekdays a rule applies on; ``days is None`` means every day (ALL)."""

    days: frozenset[str] | None = None

    ALL_TOKEN: ClassVar[str] = "ALL"

    @classmethod
    def parse(cls, value: Any) -> Frequency:
        """Parse ``"ALL"``, blank, or a list such as ``"Mon, Wed"``."""
        text = str(value or "").strip().upper()
        if not text or text == cls.ALL_TOKEN:
            return cls()
        days = {normalize_day(part) for part in _FREQUENCY_SPLIT.split(text) if part}
        days &= set(DAY_CODES)
        return cls(days=frozenset(days))

    @property
    def is_all(self) -> bool:
        return self.days is None

    def applies_on(self, day_code: str) -> bool:
        return self.days is None or day_code in self.days

    def __str__(self) -> str:
        if self.days is None:
            return self.ALL_TOKEN
        return ",".join(d for d in DAY_CODES if d in self.days)


@dataclass(frozen=True)
class Rule:
    """Fields shared by every rule variant."""

    rule_id: str
    employee_id: str
    start: date
    end: date
    frequency: Frequency
    priority: int
    shift: str

    kind: ClassVar[RuleKind]

    def covers(self, day: DayFact) -> bool:
        """Date within [start, end] inclusive and frequency includes the weekday."""
        return self.start <= day.day <= self.end and self.frequency.applies_on(
            day.day_code
        )

    @property
    def has_usable_shift(self) -> bool:
        """Shift is non-empty and not ``OFF``."""
        text = self.shift.strip().upper()
        return text not in ("", "OFF")


@dataclass(frozen=True)
class DayPatternRule(Rule):
    """State-changing rule: the days it lists are off, every other day is work."""

    off_days: tuple[str, ...] = ()

    kind: ClassVar[RuleKind] = RuleKind.DAY_PATTERN

    def marks_off(self, day_code: str) -> bool:
        return day_code in self.off_days


@dataclass(frozen=True)
class ShiftOverrideRule(Rule):
    """Attribute-changing rule: replaces the shift of a worked day."""

    kind: ClassVar[RuleKind] = RuleKind.SHIFT_OVERRIDE

    def __post_init__(self) -> None:
        if not self.shift.strip():
            raise ValueError(f"Shift override {self.rule_id!r} has no shift value")
