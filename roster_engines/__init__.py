"""
Module: roster_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    roster calculation engines.  This is the import surface for
    roster_services and the CLI.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import roster_kernel.domain and roster_kernel.logging_config.
    MUST NOT import roster_services, roster_ingestion or the db layer.

Invariants enforced:
    - Purity: engines never read the wall clock directly; the ledger
      manager takes an injected ``Clock``.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from roster_engines import build_rule_index, build_decision_index
    from roster_engines import resolve_employee_day, LedgerManager
"""

from roster_engines.decision_table import (
    build_decision_index,
    expand_keys,
    index_decision_rows,
    lookup_decision,
    parse_decision_row,
)
from roster_engines.ledger import LedgerManager, revocation_note
from roster_engines.resolver import (
    active_rules_for,
    resolve_employee_day,
    verify_shift_override,
)
from roster_engines.rule_index import (
    build_rule_index,
    parse_rule,
    passes_sanitation,
    select_winning_rule,
)
from roster_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "LedgerManager",
    "active_rules_for",
    "build_decision_index",
    "build_rule_index",
    "compute_input_fingerprint",
    "expand_keys",
    "index_decision_rows",
    "lookup_decision",
    "parse_decision_row",
    "parse_rule",
    "passes_sanitation",
    "resolve_employee_day",
    "revocation_note",
    "select_winning_rule",
    "traced_engine",
    "verify_shift_override",
]
