"""
Tests for rule parsing, indexing and winner selection.

Tests cover:
- parse_rule: approval filter, required fields, kind handling, drops
- build_rule_index: grouping by normalized employee, deterministic ordering
- select_winning_rule: priority law and id tie-break, order independence
"""

from datetime import date

import pytest

from roster_engines.rule_index import (
    build_rule_index,
    parse_rule,
    passes_sanitation,
    select_winning_rule,
)
from roster_kernel.domain.rules import (
    DayPatternRule,
    Frequency,
    RuleKind,
    ShiftOverrideRule,
)
from tests.conftest import rule_record


def make_override(rule_id: str, priority: int, shift: str = "10:00-19:00") -> ShiftOverrideRule:
    return ShiftOverrideRule(
        rule_id=rule_id,
        employee_id="e1",
        start=date(2025, 1, 1),
        end=date(2025, 1, 31),
        frequency=Frequency(),
        priority=priority,
        shift=shift,
    )


class TestParseRule:

    def test_approved_shift_override(self):
        rule = parse_rule(rule_record(shift_value="10:00-19:00", priority="3"))
        assert isinstance(rule, ShiftOverrideRule)
        assert rule.employee_id == "e1"
        assert rule.priority == 3
        assert rule.start == date(2025, 1, 1)
        assert rule.end == date(2025, 1, 31)

    def test_approval_must_contain_approved(self):
        assert parse_rule(rule_record(shift_value="X", approval_state="Pending")) is None
        assert parse_rule(rule_record(shift_value="X", approval_state="")) is None
        assert parse_rule(rule_record(shift_value="X", approval_state="Manager APPROVED")) is not None

    def test_missing_employee_dropped(self):
        assert parse_rule(rule_record(employee_id="", shift_value="X")) is None

    def test_unparseable_start_dropped(self):
        assert parse_rule(rule_record(start_date="next week", shift_value="X")) is None

    def test_end_defaults_to_start(self):
        rule = parse_rule(rule_record(end_date="", shift_value="X"))
        assert rule.end == rule.start

    def test_blank_kind_is_shift_override(self):
        rule = parse_rule(rule_record(kind="", shift_value="X"))
        assert rule.kind is RuleKind.SHIFT_OVERRIDE

    def test_unknown_kind_dropped(self, captured_logs):
        assert parse_rule(rule_record(kind="ROTATION", shift_value="X")) is None
        dropped = [r for r in captured_logs() if r["message"] == "rule_dropped"]
        assert dropped and dropped[0]["drop_reason"] == "unknown_kind:ROTATION"

    def test_shift_override_without_shift_dropped(self):
        assert parse_rule(rule_record(shift_value="  ")) is None

    def test_day_pattern_off_days_normalized(self):
        rule = parse_rule(
            rule_record(
                kind="day_pattern",
                primary_off_day="friday",
                secondary_off_day="Sat ",
            )
        )
        assert isinstance(rule, DayPatternRule)
        assert rule.off_days == ("FRI", "SAT")

    def test_day_pattern_without_shift_is_kept(self):
        rule = parse_rule(rule_record(kind="DAY_PATTERN", primary_off_day="SUN"))
        assert rule is not None
        assert rule.shift == ""

    def test_bad_priority_defaults_to_zero(self):
        rule = parse_rule(rule_record(shift_value="X", priority="high"))
        assert rule.priority == 0

    def test_float_priority_truncated(self):
        rule = parse_rule(rule_record(shift_value="X", priority=4.0))
        assert rule.priority == 4

    def test_frequency_parsed(self):
        rule = parse_rule(rule_record(shift_value="X", frequency="Mon, Wed"))
        assert rule.frequency.days == frozenset({"MON", "WED"})
        assert not rule.frequency.is_all


class TestPassesSanitation:

    def test_day_pattern_always_passes(self):
        rule = parse_rule(rule_record(kind="DAY_PATTERN"))
        assert passes_sanitation(rule)

    def test_override_with_shift_passes(self):
        assert passes_sanitation(make_override("R1", 1))


class TestBuildRuleIndex:

    def test_groups_by_normalized_employee(self):
        index = build_rule_index(
            [
                rule_record(rule_id="R1", employee_id=" E1 ", shift_value="A"),
                rule_record(rule_id="R2", employee_id="e1", shift_value="B"),
                rule_record(rule_id="R3", employee_id="E2", shift_value="C"),
            ]
        )
        assert set(index) == {"e1", "e2"}
        assert {r.rule_id for r in index["e1"]} == {"R1", "R2"}

    def test_drops_unapproved(self):
        index = build_rule_index([rule_record(shift_value="A", approval_state="Rejected")])
        assert index == {}

    def test_ordering(self):
        index = build_rule_index(
            [
                rule_record(rule_id="S-ALL", shift_value="A", priority=9),
                rule_record(rule_id="S-MON", shift_value="A", frequency="MON", priority=1),
                rule_record(rule_id="D-LOW", kind="DAY_PATTERN", priority=1),
                rule_record(rule_id="D-HIGH", kind="DAY_PATTERN", priority=5),
                rule_record(rule_id="D-HIGH-B", kind="DAY_PATTERN", priority=5),
            ]
        )
        order = [r.rule_id for r in index["e1"]]
        # DAY_PATTERN first; within equal keys the greater id first;
        # specific frequency before ALL regardless of priority
        assert order == ["D-HIGH-B", "D-HIGH", "D-LOW", "S-MON", "S-ALL"]

    def test_emits_engine_trace(self, captured_logs):
        build_rule_index([rule_record(shift_value="A")])
        traces = [r for r in captured_logs() if r["message"] == "ROSTER_ENGINE_TRACE"]
        assert traces
        assert traces[0]["engine_name"] == "rule_index"
        assert len(traces[0]["input_fingerprint"]) == 16


class TestSelectWinningRule:

    def test_none_when_no_rule_of_kind(self):
        assert select_winning_rule([], RuleKind.SHIFT_OVERRIDE) is None
        assert select_winning_rule([make_override("R1", 1)], RuleKind.DAY_PATTERN) is None

    def test_higher_priority_wins(self):
        rules = [make_override("R1", 1), make_override("R2", 5), make_override("R3", 3)]
        assert select_winning_rule(rules, RuleKind.SHIFT_OVERRIDE).rule_id == "R2"

    def test_tie_greater_id_wins(self):
        rules = [make_override("R-A", 2), make_override("R-B", 2)]
        assert select_winning_rule(rules, RuleKind.SHIFT_OVERRIDE).rule_id == "R-B"

    @pytest.mark.parametrize("order", [(0, 1, 2), (2, 1, 0), (1, 2, 0)])
    def test_independent_of_list_order(self, order):
        pool = [make_override("R1", 4), make_override("R9", 4), make_override("R5", 1)]
        rules = [pool[i] for i in order]
        assert select_winning_rule(rules, RuleKind.SHIFT_OVERRIDE).rule_id == "R9"
