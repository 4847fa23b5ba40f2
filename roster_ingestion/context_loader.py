"""
Context loader -- builds the run-wide ``EngineContext``.

Responsibility:
    Turn the validated central tables and the ledger's active status map
    into the indexed, read-only context every resolution shares.  Also
    lists the workspaces a run should process and reads the operator-set
    entitlement statuses of the optional central ledger tab.

Architecture position:
    Ingestion -- sits between the workbook sources and the pure engines.
    Re-keys records by logical key (see ``roster_config.schema``) so the
    engines never see header text.

Keying:
    Leave and ledger maps are keyed ``employee|YYYY-MM-DD`` with the
    employee id lower-cased, the same key the resolver builds per cell.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from roster_config.schema import (
    DECISION,
    HOLIDAYS,
    LEAVES,
    LEDGER,
    MAPPING,
    RULES,
    WORKSPACES,
    EngineConfig,
    TableSchema,
)
from roster_engines.decision_table import build_decision_index
from roster_engines.rule_index import build_rule_index
from roster_ingestion.domain.types import TableSnapshot
from roster_kernel.domain.calendar import (
    coerce_text,
    composite_key,
    format_date,
    normalize_employee_id,
    parse_safe_date,
)
from roster_kernel.domain.ledger import StatusAssignment
from roster_kernel.domain.resolution import EngineContext
from roster_kernel.logging_config import get_logger

logger = get_logger("ingestion.context")

ACTIVE_WORKSPACE_STATUS = "ACTIVE"


def records_for(
    tables: Mapping[str, TableSnapshot],
    schema: TableSchema,
) -> list[dict[str, Any]]:
    """Records of one table keyed by logical key; [] when the table is absent."""
    table = tables.get(schema.key)
    if table is None:
        return []
    return table.project(schema.header_map)


def load_shift_mapping(records: Iterable[Mapping[str, Any]]) -> dict[str, str]:
    """``shift code -> upper-cased work status``; rows without a code are skipped."""
    mapping: dict[str, str] = {}
    for record in records:
        code = coerce_text(record.get("shift_code"))
        if code:
            mapping[code] = coerce_text(record.get("work_status")).upper()
    return mapping


def load_holidays(records: Iterable[Mapping[str, Any]]) -> frozenset[str]:
    """Canonical date strings of every parseable holiday."""
    days = set()
    for record in records:
        parsed = parse_safe_date(record.get("date"))
        if parsed is not None:
            days.add(format_date(parsed))
    return frozenset(days)


def load_leaves(records: Iterable[Mapping[str, Any]]) -> dict[str, str]:
    """``employee|date -> leave category``.

    Rows with no employee, no parseable date or an empty category are
    skipped; a later row for the same key overrides an earlier one.
    """
    leaves: dict[str, str] = {}
    for record in records:
        employee = normalize_employee_id(record.get("employee_id"))
        day = parse_safe_date(record.get("leave_date"))
        category = coerce_text(record.get("leave_type"))
        if not employee or day is None or not category:
            continue
        leaves[composite_key(employee, format_date(day))] = category
    return leaves


def load_status_assignments(records: Iterable[Mapping[str, Any]]) -> list[StatusAssignment]:
    """Operator-set final statuses from the central ledger tab.

    Statuses are upper-cased.  Rows with no employee, no parseable
    entitlement date or a blank status are skipped; a later row for the
    same key replaces an earlier one.
    """
    assignments: dict[str, StatusAssignment] = {}
    for record in records:
        employee = coerce_text(record.get("employee_id"))
        day = parse_safe_date(record.get("entitlement_date"))
        status = coerce_text(record.get("final_status")).upper()
        if not employee or day is None or not status:
            continue
        assignment = StatusAssignment(employee, day, status)
        assignments[assignment.key] = assignment
    return list(assignments.values())


def load_ledger_assignments(
    tables: Mapping[str, TableSnapshot],
    config: EngineConfig,
) -> list[StatusAssignment]:
    """Status assignments of the optional ledger tab; [] when it is absent."""
    return load_status_assignments(records_for(tables, config.table(LEDGER)))


def build_engine_context(
    tables: Mapping[str, TableSnapshot],
    config: EngineConfig,
    ledger_status: Mapping[str, str],
) -> EngineContext:
    """
    Index every central input once for the run.

    Args:
        tables: Output of ``validate_central_tables``.
        config: The run's configuration.
        ledger_status: Active ledger entries, ``key -> FINAL_STATUS``.
    """
    context = EngineContext(
        decision_index=build_decision_index(records_for(tables, config.table(DECISION))),
        rules=build_rule_index(records_for(tables, config.table(RULES))),
        holidays=load_holidays(records_for(tables, config.table(HOLIDAYS))),
        leaves=load_leaves(records_for(tables, config.table(LEAVES))),
        ledger=ledger_status,
        shift_status=load_shift_mapping(records_for(tables, config.table(MAPPING))),
        settings=config.resolution_settings(),
    )
    logger.info(
        "engine_context_loaded",
        extra={
            "decision_keys": len(context.decision_index),
            "rule_employees": len(context.rules),
            "holidays": len(context.holidays),
            "leaves": len(context.leaves),
            "active_entitlements": len(context.ledger),
            "shift_mappings": len(context.shift_status),
        },
    )
    return context


def load_active_workspaces(
    tables: Mapping[str, TableSnapshot],
    config: EngineConfig,
) -> list[str]:
    """Workspace ids whose status is ACTIVE, in table order, without repeats."""
    workspaces: list[str] = []
    for record in records_for(tables, config.table(WORKSPACES)):
        status = coerce_text(record.get("status")).upper()
        workspace_id = coerce_text(record.get("workspace_id"))
        if status == ACTIVE_WORKSPACE_STATUS and workspace_id and workspace_id not in workspaces:
            workspaces.append(workspace_id)
    return workspaces
