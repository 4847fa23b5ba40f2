"""
Pure domain layer.

Value objects and helpers with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Workbooks or files
- Wall-clock time (see ``Clock``)

All domain objects are immutable and deterministic.
"""

from roster_kernel.domain.calendar import (
    DAY_CODES,
    coerce_text,
    composite_key,
    day_code,
    format_date,
    normalize_day,
    normalize_employee_id,
    parse_safe_date,
)
from roster_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from roster_kernel.domain.decision import (
    Criterion,
    DecisionRow,
    EntitlementAction,
    Exact,
    HolidayFlag,
    LookupFlags,
    RequestType,
    RuleImpact,
    Wildcard,
    parse_criterion,
)
from roster_kernel.domain.ledger import (
    ActivationState,
    GrantIntent,
    LedgerEntry,
    LedgerInsert,
    LedgerUpdate,
    LedgerWriteSet,
    RevokeIntent,
    StatusAssignment,
)
from roster_kernel.domain.resolution import (
    AUDIT_HEADERS,
    AuditRow,
    EngineContext,
    ResolutionResult,
    ResolutionSettings,
)
from roster_kernel.domain.roster import OFF_SHIFT, DayFact, Employee, WorkFlag
from roster_kernel.domain.rules import (
    DayPatternRule,
    Frequency,
    Rule,
    RuleKind,
    ShiftOverrideRule,
)

__all__ = [
    # Calendar helpers
    "DAY_CODES",
    "coerce_text",
    "composite_key",
    "day_code",
    "format_date",
    "normalize_day",
    "normalize_employee_id",
    "parse_safe_date",
    # Time
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # Roster
    "OFF_SHIFT",
    "DayFact",
    "Employee",
    "WorkFlag",
    # Rules
    "DayPatternRule",
    "Frequency",
    "Rule",
    "RuleKind",
    "ShiftOverrideRule",
    # Decision table
    "Criterion",
    "DecisionRow",
    "EntitlementAction",
    "Exact",
    "HolidayFlag",
    "LookupFlags",
    "RequestType",
    "RuleImpact",
    "Wildcard",
    "parse_criterion",
    # Ledger
    "ActivationState",
    "GrantIntent",
    "LedgerEntry",
    "LedgerInsert",
    "LedgerUpdate",
    "LedgerWriteSet",
    "RevokeIntent",
    "StatusAssignment",
    # Resolution
    "AUDIT_HEADERS",
    "AuditRow",
    "EngineContext",
    "ResolutionResult",
    "ResolutionSettings",
]
