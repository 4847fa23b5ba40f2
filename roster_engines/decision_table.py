"""
roster_engines.decision_table -- Wildcard-aware decision table index.

Responsibility:
    Expand the declarative outcome table into buckets keyed by the exact
    four-flag string ``base|rule|holiday|request`` and look cells up in it.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - A wildcard (ANY / IGNORED) criterion expands to every concrete value
      of its dimension; buckets keep source row order.
    - Lookup re-checks each candidate against its original criteria, so
      the first matching row in source order always wins.

Failure modes:
    - No candidate matches -> ``lookup_decision`` returns None.  The resolver
      turns that into an ERROR result; nothing is raised here.

Record keys:
    base, rule_impact, holiday_flag, request_type, final_status,
    entitlement_action, reason
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from itertools import product
from typing import Any

from roster_kernel.domain.calendar import coerce_text
from roster_kernel.domain.decision import (
    BASE_VALUES,
    HOLIDAY_VALUES,
    REQUEST_VALUES,
    RULE_VALUES,
    DecisionRow,
    EntitlementAction,
    LookupFlags,
    RequestType,
    parse_criterion,
)
from roster_kernel.logging_config import get_logger

from roster_engines.tracer import traced_engine

logger = get_logger("engines.decision_table")


def parse_decision_row(record: Mapping[str, Any], source_index: int = 0) -> DecisionRow | None:
    """Parse one raw decision record; rows with an empty base cell are skipped."""
    if not coerce_text(record.get("base")):
        return None
    return DecisionRow(
        base=parse_criterion(record.get("base")),
        rule=parse_criterion(record.get("rule_impact")),
        holiday=parse_criterion(record.get("holiday_flag")),
        request=parse_criterion(record.get("request_type"), default=RequestType.NONE.value),
        final_status=coerce_text(record.get("final_status")).upper(),
        action=EntitlementAction.parse(record.get("entitlement_action")),
        reason=coerce_text(record.get("reason")),
        source_index=source_index,
    )


def expand_keys(row: DecisionRow) -> list[str]:
    """Every exact lookup key a row is reachable under."""
    return [
        "|".join(combo)
        for combo in product(
            row.base.expand(BASE_VALUES),
            row.rule.expand(RULE_VALUES),
            row.holiday.expand(HOLIDAY_VALUES),
            row.request.expand(REQUEST_VALUES),
        )
    ]


def index_decision_rows(rows: Iterable[DecisionRow]) -> dict[str, tuple[DecisionRow, ...]]:
    """Bucket already-parsed rows by every key they expand to."""
    buckets: dict[str, list[DecisionRow]] = defaultdict(list)
    for row in rows:
        for key in expand_keys(row):
            buckets[key].append(row)
    return {key: tuple(bucket) for key, bucket in buckets.items()}


@traced_engine("decision_table", "1.0", fingerprint_fields=("records",))
def build_decision_index(records: Iterable[Mapping[str, Any]]) -> dict[str, tuple[DecisionRow, ...]]:
    """Parse raw decision records and build the lookup index."""
    rows = []
    for i, record in enumerate(records):
        row = parse_decision_row(record, source_index=i)
        if row is not None:
            rows.append(row)
    index = index_decision_rows(rows)
    logger.info(
        "decision_index_built",
        extra={"rows_loaded": len(rows), "keys_indexed": len(index)},
    )
    return index


def lookup_decision(
    index: Mapping[str, tuple[DecisionRow, ...]],
    flags: LookupFlags,
) -> DecisionRow | None:
    """First row in the flags' bucket whose original criteria match."""
    for row in index.get(flags.key, ()):
        if row.matches(flags):
            return row
    return None
