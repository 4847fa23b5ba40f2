"""
Decision table value objects.

A decision row maps four lookup flags to a final status and an entitlement
action.  Each of its four criteria is either ``Exact`` or ``Wildcard``
(``ANY`` / ``IGNORED``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from roster_kernel.domain.roster import WorkFlag

WILDCARD_TOKENS: frozenset[str] = frozenset({"ANY", "IGNORED"})


class RuleImpact(str, Enum):
    """Whether the rules changed the base state, and to what."""

    WORK = "WORK"
    OFF = "OFF"
    NONE = "NONE"


class HolidayFlag(str, Enum):
    TRUE = "TRUE"
    FALSE = "FALSE"


class RequestType(str, Enum):
    """What the employee asked for on the day (leave or comp day usage)."""

    NONE = "NONE"
    COMP_DAY = "COMP_DAY"
    LEAVE = "LEAVE"


class EntitlementAction(str, Enum):
    GRANT = "GRANT"
    REVOKE = "REVOKE"
    NONE = "NONE"

    @classmethod
    def parse(cls, value: object) -> EntitlementAction:
        text = str(value or "").strip().upper()
        try:
            return cls(text)
        except ValueError:
            return cls.NONE


# Concrete values each dimension expands to
BASE_VALUES: tuple[str, ...] = tuple(f.value for f in WorkFlag)
RULE_VALUES: tuple[str, ...] = tuple(f.value for f in RuleImpact)
HOLIDAY_VALUES: tuple[str, ...] = (HolidayFlag.TRUE.value, HolidayFlag.FALSE.value)
REQUEST_VALUES: tuple[str, ...] = tuple(f.value for f in RequestType)


@dataclass(frozen=True)
class Wildcard:
    """Matches every value of its dimension."""

    token: str = "ANY"

    def matches(self, value: str) -> bool:
        return True

    def expand(self, domain: tuple[str, ...]) -> tuple[str, ...]:
        return domain

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class Exact:
    """Matches one concrete value; a COMP_DAY criterion also accepts OFF."""

    value: str

    def matches(self, value: str) -> bool:
        value = str(value).strip().upper()
        if self.value == RequestType.COMP_DAY.value:
            return value in (RequestType.COMP_DAY.value, WorkFlag.OFF.value)
        return self.value == value

    def expand(self, domain: tuple[str, ...]) -> tuple[str, ...]:
        return (self.value,)

    def __str__(self) -> str:
        return self.value


Criterion = Union[Wildcard, Exact]


def parse_criterion(value: object, default: str | None = None) -> Criterion:
    """Parse a decision cell into a criterion (upper-cased, trimmed)."""
    text = str(value if value is not None else "").strip().upper()
    if not text and default is not None:
        text = default
    if text in WILDCARD_TOKENS:
        return Wildcard(text)
    return Exact(text)


@dataclass(frozen=True)
class LookupFlags:
    """The exact four-flag key a cell is looked up under."""

    base: str
    rule: str
    holiday: str
    request: str

    @property
    def key(self) -> str:
        return f"{self.base}|{self.rule}|{self.holiday}|{self.request}"


@dataclass(frozen=True)
class DecisionRow:
    """One line of the declarative outcome table."""

    base: Criterion
    rule: Criterion
    holiday: Criterion
    request: Criterion
    final_status: str
    action: EntitlementAction
    reason: str
    source_index: int = 0

    def matches(self, flags: LookupFlags) -> bool:
        return (
            self.base.matches(flags.base)
            and self.rule.matches(flags.rule)
            and self.holiday.matches(flags.holiday)
            and self.request.matches(flags.request)
        )
