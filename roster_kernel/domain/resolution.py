"""
Resolution inputs and outputs.

``EngineContext`` is built once per run and shared read-only by every
resolution; ``ResolutionResult`` is produced fresh per cell.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType

from roster_kernel.domain.decision import DecisionRow, EntitlementAction
from roster_kernel.domain.rules import Rule

ERROR_STATUS = "ERROR"
MISSING_LOGIC_REASON = "Missing Logic"
ERROR_TRACE = "ERROR_TRACE"

AUDIT_HEADERS: tuple[str, ...] = (
    "Key",
    "Employee",
    "Date",
    "Base_Status",
    "Base_Shift",
    "Rule_Input",
    "Leave_Input",
    "PH_Input",
    "Entitlement_Input",
    "Final_Status",
    "Final_Shift",
    "Reason",
    "Note",
    "Final_Val",
)


@dataclass(frozen=True)
class ResolutionSettings:
    """Run-wide constants the resolver needs."""

    default_shift: str = "09:00 - 18:00"
    half_day_shifts: frozenset[str] = frozenset({"HAL1", "HAL2"})


@dataclass(frozen=True)
class AuditRow:
    """The 14-field audit trace of one employee-day."""

    key: str
    display_name: str
    day: date
    base_flag: str
    base_shift: str
    derived_shift: str
    leave_category: str
    holiday_flag: str
    entitlement_input: str
    final_status: str
    final_shift: str
    reason: str
    trace: str
    final_weight: float

    def as_tuple(self) -> tuple:
        """Values in output column order (see ``AUDIT_HEADERS``)."""
        return (
            self.key,
            self.display_name,
            self.day,
            self.base_flag,
            self.base_shift,
            self.derived_shift,
            self.leave_category,
            self.holiday_flag,
            self.entitlement_input,
            self.final_status,
            self.final_shift,
            self.reason,
            self.trace,
            self.final_weight,
        )


@dataclass(frozen=True)
class ResolutionResult:
    audit_row: AuditRow
    entitlement_action: EntitlementAction
    final_status: str

    @property
    def is_error(self) -> bool:
        return self.final_status == ERROR_STATUS


def _frozen(mapping: Mapping | None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class EngineContext:
    """Per-run aggregate of indexed inputs.

    Keys of ``ledger`` and ``leaves`` are ``employee|YYYY-MM-DD`` composite
    keys; ``ledger`` holds only active entries (key -> final status).
    """

    decision_index: Mapping[str, tuple[DecisionRow, ...]]
    rules: Mapping[str, tuple[Rule, ...]] = field(default_factory=dict)
    holidays: frozenset[str] = frozenset()
    leaves: Mapping[str, str] = field(default_factory=dict)
    ledger: Mapping[str, str] = field(default_factory=dict)
    shift_status: Mapping[str, str] = field(default_factory=dict)
    settings: ResolutionSettings = field(default_factory=ResolutionSettings)

    def __post_init__(self) -> None:
        for name in ("decision_index", "rules", "leaves", "ledger", "shift_status"):
            object.__setattr__(self, name, _frozen(getattr(self, name)))
        object.__setattr__(self, "holidays", frozenset(self.holidays))

    def rules_for(self, employee_id: str) -> tuple[Rule, ...]:
        return self.rules.get(employee_id, ())

    @property
    def has_decision_logic(self) -> bool:
        return bool(self.decision_index)
