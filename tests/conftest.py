"""
Pytest fixtures for the roster engine test suite.

Provides:
- Structured-log capture
- In-memory SQLite database sessions (one fresh database per test)
- Factory helpers for employees, days, rules and engine contexts
- The standard decision table used across scenario tests
- Central workbook and roster grid builders
"""

import json
import logging
from datetime import date, datetime, timezone
from io import StringIO

import pytest

from roster_config import get_active_config
from roster_config.schema import DECISION, HOLIDAYS, LEAVES, LEDGER, MAPPING, RULES, WORKSPACES
from roster_engines.decision_table import build_decision_index
from roster_engines.rule_index import build_rule_index
from roster_ingestion.adapters.memory_adapter import MemoryWorkbookSource
from roster_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from roster_kernel.domain.clock import DeterministicClock
from roster_kernel.domain.resolution import EngineContext, ResolutionSettings
from roster_kernel.domain.roster import DayFact, Employee
from roster_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# 2025-01-06 is a Monday
MONDAY = date(2025, 1, 6)
TUESDAY = date(2025, 1, 7)
SATURDAY = date(2025, 1, 11)
SUNDAY = date(2025, 1, 12)

FIXED_NOW = datetime(2025, 1, 15, 8, 30, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture roster_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "rule_index_built" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("roster_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database with every roster table created."""
    engine = init_engine_from_url("sqlite:///:memory:")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine):
    """Session on the test database; rolled back and closed afterwards."""
    s = get_session()
    yield s
    s.rollback()
    s.close()


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(FIXED_NOW)


# =============================================================================
# Factories
# =============================================================================


def make_employee(
    employee: str = "E1",
    base_shift: str = "09:00-18:00",
    primary_off_day: str = "SAT",
    secondary_off_day: str = "SUN",
) -> Employee:
    return Employee.from_cells(employee, base_shift, primary_off_day, secondary_off_day)


def make_day(value: date = MONDAY) -> DayFact:
    return DayFact.of(value)


def rule_record(
    rule_id: str = "R1",
    employee_id: str = "E1",
    kind: str = "SHIFT_OVERRIDE",
    start_date="2025-01-01",
    end_date="2025-01-31",
    shift_value: str = "",
    primary_off_day: str = "",
    secondary_off_day: str = "",
    frequency: str = "ALL",
    approval_state: str = "Approved",
    priority=1,
) -> dict:
    return {
        "id": rule_id,
        "employee_id": employee_id,
        "kind": kind,
        "start_date": start_date,
        "end_date": end_date,
        "shift_value": shift_value,
        "primary_off_day": primary_off_day,
        "secondary_off_day": secondary_off_day,
        "frequency": frequency,
        "approval_state": approval_state,
        "priority": priority,
    }


def decision_record(
    base: str,
    rule_impact: str,
    holiday_flag: str,
    request_type: str,
    final_status: str,
    entitlement_action: str = "NONE",
    reason: str = "",
) -> dict:
    return {
        "base": base,
        "rule_impact": rule_impact,
        "holiday_flag": holiday_flag,
        "request_type": request_type,
        "final_status": final_status,
        "entitlement_action": entitlement_action,
        "reason": reason,
    }


STANDARD_DECISIONS: tuple[dict, ...] = (
    decision_record("ANY", "ANY", "ANY", "LEAVE", "LEAVE", "NONE", "On leave"),
    decision_record("WORK", "NONE", "FALSE", "COMP_DAY", "COMP_DAY", "REVOKE", "Comp day used"),
    decision_record("WORK", "NONE", "TRUE", "NONE", "WORK", "GRANT", "Worked holiday"),
    decision_record("WORK", "NONE", "FALSE", "NONE", "WORK", "NONE", "Regular work"),
    decision_record("OFF", "NONE", "ANY", "NONE", "OFF", "NONE", "Weekly off"),
    decision_record("ANY", "WORK", "TRUE", "NONE", "WORK", "GRANT", "Rule work on holiday"),
    decision_record("ANY", "WORK", "FALSE", "NONE", "WORK", "NONE", "Rule work"),
    decision_record("ANY", "OFF", "ANY", "NONE", "OFF", "NONE", "Rule off"),
)


def make_context(
    decisions=STANDARD_DECISIONS,
    rules=(),
    holidays=(),
    leaves=None,
    ledger=None,
    settings: ResolutionSettings | None = None,
) -> EngineContext:
    return EngineContext(
        decision_index=build_decision_index(list(decisions)),
        rules=build_rule_index(list(rules)),
        holidays=frozenset(holidays),
        leaves=leaves or {},
        ledger=ledger or {},
        settings=settings or ResolutionSettings(),
    )


# =============================================================================
# Workbook fixtures
# =============================================================================


ROSTER_HEADER = ("Employee ID", "Default Shift", "Primary Off Day", "Secondary Off Day")


@pytest.fixture
def engine_config():
    """Packaged defaults with a small worker pool."""
    return get_active_config(overrides={"max_workers": 2})


def central_source(
    config,
    workspaces=(("north", "Active"),),
    rules=(),
    decisions=STANDARD_DECISIONS,
    leaves=(),
    holidays=(),
    mapping=None,
    ledger=None,
    name: str = "central",
) -> MemoryWorkbookSource:
    """
    Central tables under their configured names and headers.

    Records are given by logical key (``rule_record``, ``decision_record``,
    ``{"employee_id", "leave_date", "leave_type"}``); holidays and
    workspaces as plain values and pairs.  ``mapping=None`` and
    ``ledger=None`` leave the optional shift mapping and ledger tabs out;
    ledger rows are ``(employee, entitlement_date, final_status)``.
    """
    logical = {
        WORKSPACES: [{"workspace_id": w, "status": s} for w, s in workspaces],
        RULES: list(rules),
        DECISION: list(decisions),
        LEAVES: list(leaves),
        HOLIDAYS: [{"date": d} for d in holidays],
    }
    if mapping is not None:
        logical[MAPPING] = [{"shift_code": c, "work_status": s} for c, s in mapping]
    if ledger is not None:
        logical[LEDGER] = [
            {"employee_id": e, "entitlement_date": d, "final_status": s} for e, d, s in ledger
        ]

    tables = {}
    headers = {}
    for key, records in logical.items():
        schema = config.table(key)
        header_map = schema.header_map
        headers[schema.name] = list(header_map.values())
        tables[schema.name] = [
            {header_map[k]: v for k, v in record.items() if k in header_map}
            for record in records
        ]
    return MemoryWorkbookSource.from_records(tables, headers=headers, name=name)


def roster_grid(days, employees) -> list[list]:
    """
    A roster tab in the default layout: header on row 4, data from row 5.

    ``employees`` rows are ``(employee, default_shift, primary, secondary)``.
    """
    return [
        ["Weekly roster"],
        [],
        [],
        list(ROSTER_HEADER) + list(days),
        *[list(row) + [""] * len(days) for row in employees],
    ]
