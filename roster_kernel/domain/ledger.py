"""
Entitlement ledger value objects.

Invariants:
    - An entry is identified by (normalized employee, entitlement date).
    - Activation only moves Active -> Inactive; entries are never deleted.
    - A ``LedgerWriteSet`` is column-scoped: updates name only the
      activation state and the system note.
    - The final entitlement status is owned by the operators who maintain
      the central ledger tab; ``StatusAssignment`` carries it in and
      touches nothing else.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from roster_kernel.domain.calendar import composite_key, format_date, normalize_employee_id

COMP_DAY = "COMP_DAY"
NOTE_COMP_DAY_CONSUMED = "Comp Day Consumed"
NOTE_REVOKED = "Revoked: Work/Rule Change"

# Final statuses on an active entry that imply a comp-day request
COMP_DAY_STATUSES: frozenset[str] = frozenset({"COMP_DAY", "OFF"})


class ActivationState(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"

    @classmethod
    def parse(cls, value: Any) -> ActivationState:
        """Anything other than ``inactive`` (any case) counts as Active."""
        text = str(value or "").strip().upper()
        return cls.INACTIVE if text == "INACTIVE" else cls.ACTIVE


@dataclass(frozen=True)
class LedgerEntry:
    """Snapshot of one ledger record."""

    employee_id: str
    entitlement_date: date
    activation: ActivationState
    entitlement_type: str = COMP_DAY
    final_status: str = ""
    note: str = ""
    date_used: date | None = None

    @property
    def key(self) -> str:
        return composite_key(
            normalize_employee_id(self.employee_id), format_date(self.entitlement_date)
        )

    @property
    def is_active(self) -> bool:
        return self.activation is ActivationState.ACTIVE


@dataclass(frozen=True)
class GrantIntent:
    """Resolver asked for a new entitlement on this employee-day."""

    employee: str
    day: date


@dataclass(frozen=True)
class RevokeIntent:
    """Resolver asked for an entitlement to be consumed or revoked.

    ``reason`` is the final status of the cell that triggered it.
    """

    employee: str
    date_str: str
    reason: str


@dataclass(frozen=True)
class LedgerInsert:
    """A new Active entry to append."""

    employee_id: str
    entitlement_date: date
    granted_at: datetime
    entitlement_type: str = COMP_DAY
    activation: ActivationState = ActivationState.ACTIVE

    @property
    def key(self) -> str:
        return composite_key(
            normalize_employee_id(self.employee_id), format_date(self.entitlement_date)
        )


@dataclass(frozen=True)
class LedgerUpdate:
    """Column-scoped change to an existing entry (activation + note only)."""

    employee_key: str
    entitlement_date: date
    activation: ActivationState
    note: str

    @property
    def key(self) -> str:
        return composite_key(self.employee_key, format_date(self.entitlement_date))


@dataclass(frozen=True)
class LedgerWriteSet:
    """Deterministic diff a storage collaborator applies atomically."""

    inserts: tuple[LedgerInsert, ...] = ()
    updates: tuple[LedgerUpdate, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.inserts and not self.updates

    def merge(self, other: LedgerWriteSet) -> LedgerWriteSet:
        return LedgerWriteSet(
            inserts=self.inserts + other.inserts,
            updates=self.updates + other.updates,
        )


@dataclass(frozen=True)
class StatusAssignment:
    """Operator-set final status for one ledger entry."""

    employee_id: str
    entitlement_date: date
    final_status: str

    @property
    def employee_key(self) -> str:
        return normalize_employee_id(self.employee_id)

    @property
    def key(self) -> str:
        return composite_key(self.employee_key, format_date(self.entitlement_date))
