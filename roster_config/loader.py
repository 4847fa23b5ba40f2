"""
Configuration loader (``roster_config.loader``).

Responsibility
--------------
Load YAML files, merge them, and parse the result into the frozen
``roster_config.schema`` dataclasses.  Callers use
``roster_config.get_active_config()``; this module is its machinery.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Every table the engine reads has a name and a header for every logical
  key the loaders look up.
* ``compute_checksum`` is a deterministic SHA-256 over canonical JSON.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or invalid values  -> ``ConfigurationError``.
"""

from __future__ import annotations

import copy
import hashlib
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from roster_config.schema import (
    DECISION,
    HOLIDAYS,
    LEAVES,
    LEDGER,
    MAPPING,
    RULES,
    WORKSPACES,
    EngineConfig,
    RosterLayout,
    TableSchema,
)
from roster_kernel.exceptions import ConfigurationError

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

# Logical header keys each table must define
REQUIRED_HEADER_KEYS: dict[str, tuple[str, ...]] = {
    WORKSPACES: ("workspace_id", "status"),
    RULES: (
        "id",
        "employee_id",
        "kind",
        "start_date",
        "end_date",
        "shift_value",
        "primary_off_day",
        "secondary_off_day",
        "frequency",
        "approval_state",
        "priority",
    ),
    DECISION: (
        "base",
        "rule_impact",
        "holiday_flag",
        "request_type",
        "final_status",
        "entitlement_action",
        "reason",
    ),
    LEAVES: ("employee_id", "leave_date", "leave_type"),
    HOLIDAYS: ("date",),
    MAPPING: ("shift_code", "work_status"),
    LEDGER: ("employee_id", "entitlement_date", "final_status"),
}

ROSTER_COLUMN_KEYS: tuple[str, ...] = (
    "employee_id",
    "default_shift",
    "primary_off_day",
    "secondary_off_day",
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), "top level must be a mapping")
    return data


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursive dict merge; ``override`` wins, lists are replaced whole."""
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _positive_int(data: Mapping[str, Any], key: str, setting: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(setting, f"expected a positive integer, got {value!r}")
    return value


def _non_empty_str(value: Any, setting: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(setting, f"expected a non-empty string, got {value!r}")
    return value.strip()


def parse_roster_layout(data: Mapping[str, Any]) -> RosterLayout:
    """Parse the ``roster`` section."""
    tabs = data.get("tabs")
    if isinstance(tabs, str):
        tabs = [tabs]
    if not tabs:
        raise ConfigurationError("roster.tabs", "at least one roster tab is required")

    header_row = _positive_int(data, "header_row", "roster.header_row")
    data_row = _positive_int(data, "data_row", "roster.data_row")
    if data_row <= header_row:
        raise ConfigurationError(
            "roster.data_row", f"must come after header_row ({header_row}), got {data_row}"
        )

    columns = data.get("columns") or {}
    missing = [k for k in ROSTER_COLUMN_KEYS if not columns.get(k)]
    if missing:
        raise ConfigurationError("roster.columns", f"missing {', '.join(missing)}")

    return RosterLayout(
        tabs=tuple(_non_empty_str(t, "roster.tabs") for t in tabs),
        header_row=header_row,
        data_row=data_row,
        columns=tuple(
            (k, _non_empty_str(columns[k], f"roster.columns.{k}")) for k in ROSTER_COLUMN_KEYS
        ),
    )


def parse_table(key: str, data: Mapping[str, Any]) -> TableSchema:
    """Parse one entry of the ``tables`` section."""
    setting = f"tables.{key}"
    name = _non_empty_str(data.get("name"), f"{setting}.name")
    headers = data.get("headers") or {}
    missing = [k for k in REQUIRED_HEADER_KEYS.get(key, ()) if not headers.get(k)]
    if missing:
        raise ConfigurationError(f"{setting}.headers", f"missing {', '.join(missing)}")
    return TableSchema(
        key=key,
        name=name,
        headers=tuple(
            (k, _non_empty_str(v, f"{setting}.headers.{k}")) for k, v in headers.items()
        ),
        required=bool(data.get("required", True)),
    )


def parse_engine_config(data: Mapping[str, Any], checksum: str = "") -> EngineConfig:
    """
    Parse a fully merged configuration dict.

    Raises:
        ConfigurationError: on any missing or invalid value.
    """
    tables_data = data.get("tables") or {}
    missing_tables = [k for k in REQUIRED_HEADER_KEYS if k not in tables_data]
    if missing_tables:
        raise ConfigurationError("tables", f"missing {', '.join(missing_tables)}")

    runtime = data.get("max_runtime_seconds")
    if isinstance(runtime, bool) or not isinstance(runtime, (int, float)) or runtime <= 0:
        raise ConfigurationError(
            "max_runtime_seconds", f"expected a positive number, got {runtime!r}"
        )

    half_days = data.get("half_day_shifts") or []
    if isinstance(half_days, str):
        half_days = [half_days]

    return EngineConfig(
        dry_run=bool(data.get("dry_run", False)),
        database_url=_non_empty_str(data.get("database_url"), "database_url"),
        default_shift=_non_empty_str(data.get("default_shift"), "default_shift"),
        half_day_shifts=frozenset(str(s).strip() for s in half_days if str(s).strip()),
        max_runtime_seconds=float(runtime),
        max_workers=_positive_int(data, "max_workers", "max_workers"),
        roster=parse_roster_layout(data.get("roster") or {}),
        tables=tuple(parse_table(k, v or {}) for k, v in tables_data.items()),
        checksum=checksum,
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
