"""
roster_engines.resolver -- Per employee-day status resolution.

Responsibility:
    Resolve one (employee, day) cell into a final status, shift, weight and
    entitlement action, and record how it got there in a 14-field audit row.

    Resolution hierarchy:
        1. Base roster (weekly off days, default shift)
        2. DAY_PATTERN rules -- may change WORK/OFF
        3. SHIFT_OVERRIDE rules -- may only change the shift of a WORK day
        4. Holiday / leave / entitlement facts -> four lookup flags
        5. Decision table lookup -> final status and entitlement action
        6. Weight computation
        7. Mirror audit of the SHIFT_OVERRIDE outcome

Architecture position:
    Engines -- pure calculation layer, zero I/O.  A pure function of its
    arguments: safe to call from many threads against one ``EngineContext``.

Invariants enforced:
    - A SHIFT_OVERRIDE rule never turns a WORK day OFF.
    - Rules are visible to the decision table (rule flag) only when they
      changed the base WORK/OFF state.
    - No matching decision row -> ERROR result returned as data, never raised.
    - Mirror-audit failures replace the reason text but never the outcome.
"""

from __future__ import annotations

from collections.abc import Sequence

from roster_kernel.domain.calendar import composite_key
from roster_kernel.domain.decision import (
    EntitlementAction,
    HolidayFlag,
    LookupFlags,
    RequestType,
    RuleImpact,
)
from roster_kernel.domain.ledger import COMP_DAY_STATUSES
from roster_kernel.domain.resolution import (
    ERROR_STATUS,
    ERROR_TRACE,
    MISSING_LOGIC_REASON,
    AuditRow,
    EngineContext,
    ResolutionResult,
)
from roster_kernel.domain.roster import OFF_SHIFT, DayFact, Employee, WorkFlag
from roster_kernel.domain.rules import DayPatternRule, Rule, RuleKind
from roster_kernel.logging_config import get_logger

from roster_engines.decision_table import lookup_decision
from roster_engines.rule_index import passes_sanitation, select_winning_rule

logger = get_logger("engines.resolver")

NONE_MARKER = "NONE"
WORK_STATUS = WorkFlag.WORK.value
COMP_DAY_STATUS = RequestType.COMP_DAY.value
LEAVE_STATUS = RequestType.LEAVE.value

# Final statuses/shifts that legitimately differ from a winning shift override
_AUDIT_EXEMPT = frozenset({LEAVE_STATUS, COMP_DAY_STATUS, OFF_SHIFT})


def active_rules_for(rules: Sequence[Rule], day: DayFact) -> list[Rule]:
    """Rules covering ``day`` that pass the sanitation gate, in input order."""
    return [r for r in rules if r.covers(day) and passes_sanitation(r)]


def verify_shift_override(
    is_work_day: bool,
    final_status: str,
    final_shift: str,
    active_rules: Sequence[Rule],
) -> str | None:
    """Mirror audit: recompute the SHIFT_OVERRIDE winner independently.

    Returns an audit-fail message, or None when the outcome is consistent.
    """
    if not is_work_day:
        return None
    winner = select_winning_rule(active_rules, RuleKind.SHIFT_OVERRIDE)
    if winner is None or not winner.shift:
        return None
    if final_status in _AUDIT_EXEMPT or final_shift in _AUDIT_EXEMPT:
        return None
    if final_shift != winner.shift:
        return (
            f'AUDIT FAIL: Exp "{winner.shift}" (Rule {winner.rule_id}) '
            f'but got "{final_shift}"'
        )
    return None


def _request_inputs(key: str, context: EngineContext) -> tuple[str, str, str]:
    """(request flag, leave category, entitlement input) for one cell.

    A leave record takes precedence over an active comp-day entitlement for
    the request flag; the entitlement input still reports the ledger state.
    """
    request = RequestType.NONE.value
    leave = NONE_MARKER
    entitlement = NONE_MARKER

    category = context.leaves.get(key)
    if category:
        request = RequestType.LEAVE.value
        leave = category

    ledger_status = context.ledger.get(key)
    if ledger_status in COMP_DAY_STATUSES:
        entitlement = ledger_status
        if request == RequestType.NONE.value:
            request = RequestType.COMP_DAY.value

    return request, leave, entitlement


def resolve_employee_day(
    employee: Employee,
    day: DayFact,
    context: EngineContext,
    rules: Sequence[Rule],
) -> ResolutionResult:
    """Resolve one employee-day cell.

    Args:
        employee: The employee's baseline.
        day: The calendar day.
        context: Run-wide indexed inputs (read-only).
        rules: The employee's indexed rules (any order).

    Returns:
        ResolutionResult with the audit row, the matched entitlement action
        and the final status (``ERROR`` when no decision row matched).
    """
    settings = context.settings
    key = composite_key(employee.employee_id, day.date_str)
    trace: list[str] = []

    # 1. Base state
    base_is_work = day.day_code not in employee.off_days and employee.works_by_default
    is_work_day = base_is_work
    current_shift = employee.base_shift if base_is_work else OFF_SHIFT
    base_flag = WorkFlag.WORK.value if base_is_work else WorkFlag.OFF.value
    trace.append(f"[BASE:{base_flag}:{current_shift}]")

    # 2. Active rules
    active = active_rules_for(rules, day)

    # 3. Pass 1: DAY_PATTERN sets the state
    pattern = select_winning_rule(active, RuleKind.DAY_PATTERN)
    if isinstance(pattern, DayPatternRule):
        if pattern.marks_off(day.day_code):
            is_work_day = False
            current_shift = OFF_SHIFT
        else:
            is_work_day = True
            if pattern.has_usable_shift:
                current_shift = pattern.shift
            elif current_shift == OFF_SHIFT:
                current_shift = (
                    employee.base_shift
                    if employee.works_by_default
                    else settings.default_shift
                )
                trace.append("[FIX:AppliedFallback]")
        trace.append(
            f"[DAY_PATTERN:{pattern.rule_id}:{current_shift}:P{pattern.priority}]"
        )

    # 4. Pass 2: SHIFT_OVERRIDE only touches the shift of a work day
    if is_work_day:
        override = select_winning_rule(active, RuleKind.SHIFT_OVERRIDE)
        if override is not None:
            if override.has_usable_shift:
                current_shift = override.shift
                trace.append(
                    f"[SHIFT:{override.rule_id}:{override.shift}:P{override.priority}]"
                )
            else:
                current_shift = employee.base_shift
                trace.append(f"[SHIFT:FALLBACK_BASE:{override.rule_id}]")

    # 5. Decision table lookup
    derived_flag = WorkFlag.WORK.value if is_work_day else WorkFlag.OFF.value
    rule_flag = RuleImpact.NONE.value if derived_flag == base_flag else derived_flag
    holiday_flag = (
        HolidayFlag.TRUE.value if day.date_str in context.holidays else HolidayFlag.FALSE.value
    )
    request_flag, leave, entitlement = _request_inputs(key, context)
    flags = LookupFlags(base_flag, rule_flag, holiday_flag, request_flag)
    base_shift_out = employee.base_shift if base_is_work else OFF_SHIFT

    match = lookup_decision(context.decision_index, flags)
    if match is None:
        logger.debug("decision_missing", extra={"cell_key": key, "lookup_key": flags.key})
        return ResolutionResult(
            audit_row=AuditRow(
                key=key,
                display_name=employee.display_name,
                day=day.day,
                base_flag=base_flag,
                base_shift=base_shift_out,
                derived_shift=current_shift,
                leave_category=leave,
                holiday_flag=holiday_flag,
                entitlement_input=entitlement,
                final_status=ERROR_STATUS,
                final_shift="",
                reason=MISSING_LOGIC_REASON,
                trace=ERROR_TRACE,
                final_weight=0.0,
            ),
            entitlement_action=EntitlementAction.NONE,
            final_status=ERROR_STATUS,
        )

    final_status = match.final_status
    if final_status == LEAVE_STATUS:
        final_status = leave

    # 6. Value
    if final_status == WORK_STATUS:
        final_shift = current_shift
        weight = 0.5 if current_shift in settings.half_day_shifts else 1.0
    elif final_status == COMP_DAY_STATUS:
        final_shift = OFF_SHIFT
        weight = 1.0
    else:
        final_shift = OFF_SHIFT
        weight = 0.0

    # 7. Mirror audit
    audit_error = verify_shift_override(is_work_day, final_status, final_shift, active)
    if audit_error:
        logger.warning(
            "mirror_audit_failed", extra={"cell_key": key, "audit_message": audit_error}
        )

    return ResolutionResult(
        audit_row=AuditRow(
            key=key,
            display_name=employee.display_name,
            day=day.day,
            base_flag=base_flag,
            base_shift=base_shift_out,
            derived_shift=current_shift,
            leave_category=leave,
            holiday_flag=holiday_flag,
            entitlement_input=entitlement,
            final_status=final_status,
            final_shift=final_shift,
            reason=audit_error or match.reason,
            trace=" | ".join(trace),
            final_weight=weight,
        ),
        entitlement_action=match.action,
        final_status=final_status,
    )
