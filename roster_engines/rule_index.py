"""
roster_engines.rule_index -- Rule parsing, indexing and winner selection.

Responsibility:
    Turn raw rule records into typed rules, keep approved ones only, group
    them by employee and sort each group into a deterministic order.  Also
    owns the priority/id winner comparison the resolver uses.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Only records whose approval state contains ``APPROVED`` are loaded.
    - A shift override with no usable shift is dropped at load time and is
      rejected again by ``passes_sanitation`` at resolution time.
    - Winner law: highest priority wins; equal priority -> lexicographically
      greater id wins.  Independent of list order.
    - Per-employee order: DAY_PATTERN before SHIFT_OVERRIDE, specific
      frequency before ALL, higher priority first, greater id first.

Failure modes:
    - Malformed records are skipped and logged at DEBUG (``rule_dropped``);
      nothing is raised.

Record keys:
    id, employee_id, kind, start_date, end_date, shift_value,
    primary_off_day, secondary_off_day, frequency, approval_state, priority
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from roster_kernel.domain.calendar import coerce_text, normalize_day, normalize_employee_id, parse_safe_date
from roster_kernel.domain.rules import (
    DayPatternRule,
    Frequency,
    Rule,
    RuleKind,
    ShiftOverrideRule,
)
from roster_kernel.logging_config import get_logger

from roster_engines.tracer import traced_engine

logger = get_logger("engines.rule_index")

APPROVED_MARKER = "APPROVED"


def _parse_priority(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _drop(record: Mapping[str, Any], reason: str) -> None:
    logger.debug(
        "rule_dropped",
        extra={"rule_id": coerce_text(record.get("id")), "drop_reason": reason},
    )


def parse_rule(record: Mapping[str, Any]) -> Rule | None:
    """Parse one raw record into a typed rule, or None if it must be dropped."""
    if APPROVED_MARKER not in coerce_text(record.get("approval_state")).upper():
        _drop(record, "not_approved")
        return None

    employee_id = normalize_employee_id(record.get("employee_id"))
    start = parse_safe_date(record.get("start_date"))
    if not employee_id or start is None:
        _drop(record, "missing_employee_or_start")
        return None
    end = parse_safe_date(record.get("end_date")) or start

    kind_text = coerce_text(record.get("kind")).upper() or RuleKind.SHIFT_OVERRIDE.value
    try:
        kind = RuleKind(kind_text)
    except ValueError:
        _drop(record, f"unknown_kind:{kind_text}")
        return None

    common = dict(
        rule_id=coerce_text(record.get("id")),
        employee_id=employee_id,
        start=start,
        end=end,
        frequency=Frequency.parse(record.get("frequency")),
        priority=_parse_priority(record.get("priority")),
        shift=coerce_text(record.get("shift_value")),
    )

    if kind is RuleKind.DAY_PATTERN:
        off_days = tuple(
            d
            for d in (
                normalize_day(record.get("primary_off_day")),
                normalize_day(record.get("secondary_off_day")),
            )
            if d
        )
        return DayPatternRule(off_days=off_days, **common)

    if not common["shift"]:
        _drop(record, "shift_override_without_shift")
        return None
    return ShiftOverrideRule(**common)


def passes_sanitation(rule: Rule) -> bool:
    """Resolution-time gate: shift overrides must carry a shift value."""
    if rule.kind is RuleKind.SHIFT_OVERRIDE:
        return bool(rule.shift.strip())
    return True


def _order_rules(rules: list[Rule]) -> tuple[Rule, ...]:
    # Stable sorts: id descending first, then the primary keys ascending.
    ordered = sorted(rules, key=lambda r: r.rule_id, reverse=True)
    ordered.sort(
        key=lambda r: (
            0 if r.kind is RuleKind.DAY_PATTERN else 1,
            1 if r.frequency.is_all else 0,
            -r.priority,
        )
    )
    return tuple(ordered)


@traced_engine("rule_index", "1.0", fingerprint_fields=("records",))
def build_rule_index(records: Iterable[Mapping[str, Any]]) -> dict[str, tuple[Rule, ...]]:
    """Build ``employee_id -> ordered rules`` from raw rule records."""
    grouped: dict[str, list[Rule]] = defaultdict(list)
    total = 0
    for record in records:
        total += 1
        rule = parse_rule(record)
        if rule is not None:
            grouped[rule.employee_id].append(rule)

    index = {employee: _order_rules(rules) for employee, rules in grouped.items()}
    logger.info(
        "rule_index_built",
        extra={
            "records_seen": total,
            "rules_loaded": sum(len(r) for r in index.values()),
            "employees": len(index),
        },
    )
    return index


def select_winning_rule(rules: Sequence[Rule], kind: RuleKind) -> Rule | None:
    """Highest priority rule of ``kind``; equal priority -> greater id wins.

    Returns None when no rule of that kind is present.
    """
    winner: Rule | None = None
    for rule in rules:
        if rule.kind is not kind:
            continue
        if winner is None or (rule.priority, rule.rule_id) > (winner.priority, winner.rule_id):
            winner = rule
    return winner
