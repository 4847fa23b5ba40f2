"""
Property-based tests for the resolution engine.

Properties checked here:
- Winner law: highest priority wins, ties go to the greater id, and the
  result never depends on the order rules are listed in
- A SHIFT_OVERRIDE rule never turns a work day OFF, whatever its shift
- Decision lookup returns the first source row whose criteria match
- Ledger planning is idempotent once its write set has been applied
- Resolution is a pure function of its inputs
"""

from datetime import date, timedelta

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from roster_engines.decision_table import build_decision_index, lookup_decision, parse_decision_row
from roster_engines.ledger import LedgerManager
from roster_engines.resolver import resolve_employee_day
from roster_engines.rule_index import select_winning_rule
from roster_kernel.domain.clock import DeterministicClock
from roster_kernel.domain.decision import (
    BASE_VALUES,
    HOLIDAY_VALUES,
    REQUEST_VALUES,
    RULE_VALUES,
    LookupFlags,
)
from roster_kernel.domain.ledger import (
    ActivationState,
    GrantIntent,
    LedgerEntry,
    LedgerWriteSet,
    RevokeIntent,
)
from roster_kernel.domain.rules import Frequency, RuleKind, ShiftOverrideRule
from tests.conftest import (
    MONDAY,
    decision_record,
    make_context,
    make_day,
    make_employee,
    rule_record,
)

FIXTURE_SAFE = settings(
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)

rule_ids = st.text(alphabet="ABCDEFGHJK0123456789-", min_size=1, max_size=6)
priorities = st.integers(min_value=-5, max_value=20)
shift_values = st.sampled_from(
    ["OFF", "off", " Off ", "HAL1", "HAL2", "10:00-19:00", "07:00 - 16:00", "NIGHT"]
)


@st.composite
def override_rules(draw, min_size=1, max_size=8):
    ids = draw(st.lists(rule_ids, min_size=min_size, max_size=max_size, unique=True))
    return [
        ShiftOverrideRule(
            rule_id=rule_id,
            employee_id="e1",
            start=date(2025, 1, 1),
            end=date(2025, 1, 31),
            frequency=Frequency(),
            priority=draw(priorities),
            shift=draw(shift_values),
        )
        for rule_id in ids
    ]


def criterion(domain):
    return st.sampled_from(("ANY", "IGNORED") + domain)


@st.composite
def decision_tables(draw):
    size = draw(st.integers(min_value=1, max_value=12))
    return [
        decision_record(
            draw(criterion(BASE_VALUES)),
            draw(criterion(RULE_VALUES)),
            draw(criterion(HOLIDAY_VALUES)),
            draw(criterion(REQUEST_VALUES)),
            draw(st.sampled_from(["WORK", "OFF", "LEAVE", "COMP_DAY"])),
            draw(st.sampled_from(["GRANT", "REVOKE", "NONE"])),
            f"row-{i}",
        )
        for i in range(size)
    ]


lookup_flags = st.builds(
    LookupFlags,
    st.sampled_from(BASE_VALUES),
    st.sampled_from(RULE_VALUES),
    st.sampled_from(HOLIDAY_VALUES),
    st.sampled_from(REQUEST_VALUES),
)


def apply_write_set(snapshot: list[LedgerEntry], write_set: LedgerWriteSet) -> list[LedgerEntry]:
    """Mimic the storage collaborator on an in-memory snapshot."""
    inactive = {u.key for u in write_set.updates}
    entries = [
        LedgerEntry(e.employee_id, e.entitlement_date, ActivationState.INACTIVE)
        if e.key in inactive
        else e
        for e in snapshot
    ]
    entries.extend(
        LedgerEntry(i.employee_id, i.entitlement_date, ActivationState.ACTIVE)
        for i in write_set.inserts
    )
    return entries


class TestWinnerLaw:

    @given(rules=override_rules(), data=st.data())
    @FIXTURE_SAFE
    def test_winner_is_max_priority_then_id(self, rules, data):
        shuffled = data.draw(st.permutations(rules))
        winner = select_winning_rule(shuffled, RuleKind.SHIFT_OVERRIDE)
        expected = max(rules, key=lambda r: (r.priority, r.rule_id))
        assert winner == expected

    @given(rules=override_rules(), data=st.data())
    @FIXTURE_SAFE
    def test_winner_independent_of_order(self, rules, data):
        shuffled = data.draw(st.permutations(rules))
        assert select_winning_rule(rules, RuleKind.SHIFT_OVERRIDE) == select_winning_rule(
            shuffled, RuleKind.SHIFT_OVERRIDE
        )


class TestShiftOverrideNeverOff:

    @given(
        shifts=st.lists(st.tuples(shift_values, priorities), min_size=1, max_size=6),
        offset=st.integers(min_value=0, max_value=4),
    )
    @FIXTURE_SAFE
    def test_work_day_stays_work(self, shifts, offset):
        records = [
            rule_record(rule_id=f"R{i}", shift_value=shift, priority=priority)
            for i, (shift, priority) in enumerate(shifts)
        ]
        context = make_context(rules=records)
        employee = make_employee()
        # Monday to Friday are all base work days
        day = make_day(MONDAY + timedelta(days=offset))

        result = resolve_employee_day(employee, day, context, context.rules_for("e1"))

        assert result.final_status == "WORK"
        assert result.audit_row.final_shift.strip().upper() != "OFF"
        assert result.audit_row.derived_shift.strip().upper() != "OFF"


class TestDecisionLookup:

    @given(records=decision_tables(), flags=lookup_flags)
    @FIXTURE_SAFE
    def test_first_matching_row_wins(self, records, flags):
        index = build_decision_index(records)
        rows = [parse_decision_row(r, source_index=i) for i, r in enumerate(records)]
        expected = next((row for row in rows if row.matches(flags)), None)

        assert lookup_decision(index, flags) == expected


class TestLedgerIdempotency:

    @given(
        grant_days=st.lists(st.integers(min_value=0, max_value=20), max_size=10),
        revoke_days=st.lists(st.integers(min_value=0, max_value=20), max_size=10),
        reason=st.sampled_from(["COMP_DAY", "WORK", "OFF"]),
    )
    @FIXTURE_SAFE
    def test_replanning_after_apply_is_empty(self, grant_days, revoke_days, reason):
        clock = DeterministicClock()
        start = date(2025, 1, 1)
        snapshot = [
            LedgerEntry("E1", start + timedelta(days=d), ActivationState.ACTIVE)
            for d in sorted(set(revoke_days))
        ]
        grants = [GrantIntent("E1", start + timedelta(days=d)) for d in grant_days]
        revokes = [
            RevokeIntent("E1", (start + timedelta(days=d)).isoformat(), reason)
            for d in revoke_days
        ]

        first = LedgerManager(snapshot, clock).plan(grants, revokes)
        after = apply_write_set(snapshot, first)
        second = LedgerManager(after, clock).plan(grants, revokes)

        assert second.updates == ()
        assert second.inserts == ()
        assert len({i.key for i in first.inserts}) == len(first.inserts)


class TestDeterminism:

    @given(
        holiday=st.booleans(),
        leave=st.sampled_from([None, "ANNUAL", "SICK"]),
        ledger=st.sampled_from([None, "COMP_DAY", "OFF", "WORK"]),
        offset=st.integers(min_value=0, max_value=6),
    )
    @FIXTURE_SAFE
    def test_same_inputs_same_result(self, holiday, leave, ledger, offset):
        day = make_day(MONDAY + timedelta(days=offset))
        key = f"e1|{day.date_str}"
        context = make_context(
            holidays={day.date_str} if holiday else set(),
            leaves={key: leave} if leave else {},
            ledger={key: ledger} if ledger else {},
        )
        employee = make_employee()

        first = resolve_employee_day(employee, day, context, ())
        second = resolve_employee_day(employee, day, context, ())

        assert first == second
