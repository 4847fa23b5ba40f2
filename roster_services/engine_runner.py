"""
EngineRunner -- one full run across every active workspace.

Responsibility:
    Validate the central tables, build the shared ``EngineContext`` once,
    then process each active workspace in turn within a run-time budget.

Architecture position:
    Services -- top of the imperative shell; the CLI's only collaborator.

Invariants enforced:
    - Every log record emitted during the run carries the run id.
    - The context (decision index, rules, holidays, leaves, active ledger)
      is built exactly once per run and shared read-only.
    - Operator-set entitlement statuses from the central ledger tab are
      copied into the ledger before the context is built, so an entry
      marked COMP_DAY is consumed in the same run.  A dry run applies them
      to the in-memory status map only.
    - A failing workspace is logged with its traceback and counted; the
      run continues with the next one.
    - The time budget is checked before each workspace; once exceeded the
      remaining workspaces are reported as skipped.

Failure modes (raised before any workspace is touched):
    - MissingTableError / MissingColumnsError: central schema drift.
    - EmptyDecisionTableError: no decision rows were indexed.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any
from uuid import uuid4

from roster_config.schema import DECISION, EngineConfig
from roster_ingestion.adapters import open_workbook
from roster_ingestion.adapters.base import WorkbookSource
from roster_ingestion.context_loader import (
    build_engine_context,
    load_active_workspaces,
    load_ledger_assignments,
)
from roster_ingestion.schema_validator import validate_central_tables
from roster_kernel.db.engine import session_scope
from roster_kernel.domain.clock import Clock, SystemClock
from roster_kernel.exceptions import EmptyDecisionTableError
from roster_kernel.logging_config import LogContext, get_logger
from roster_kernel.selectors.ledger_selector import LedgerSelector
from roster_kernel.services.ledger_service import LedgerService

from roster_services.workspace_processor import WorkspaceOutcome, WorkspaceProcessor

logger = get_logger("services.runner")

PRODUCER = "roster_engine"


@dataclass(frozen=True)
class WorkspaceFailure:
    workspace_id: str
    error_type: str
    message: str


@dataclass(frozen=True)
class RunSummary:
    """What a run did, in numbers."""

    run_id: str
    workspaces: int = 0
    processed: int = 0
    failed: int = 0
    skipped: int = 0
    rows: int = 0
    error_rows: int = 0
    grants: int = 0
    revocations: int = 0
    ledger_inserted: int = 0
    ledger_updated: int = 0
    ledger_statuses_synced: int = 0
    duration_seconds: float = 0.0
    stopped_early: bool = False
    dry_run: bool = False
    failures: tuple[WorkspaceFailure, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def workspace_opener(base_dir: Path) -> Callable[[str], WorkbookSource]:
    """Open workspace ids as paths relative to ``base_dir``."""

    def _open(workspace_id: str) -> WorkbookSource:
        path = Path(workspace_id)
        if not path.is_absolute():
            path = base_dir / path
        return open_workbook(path)

    return _open


class EngineRunner:
    """Runs the engine over every active workspace listed in the central source."""

    def __init__(
        self,
        config: EngineConfig,
        central: WorkbookSource,
        open_workspace: Callable[[str], WorkbookSource],
        clock: Clock | None = None,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self._config = config
        self._central = central
        self._open_workspace = open_workspace
        self._clock = clock or SystemClock()
        self._monotonic = monotonic

    def run(self, run_id: str | None = None) -> RunSummary:
        """
        Execute one run.

        Raises:
            MissingTableError, MissingColumnsError: Central schema drift.
            EmptyDecisionTableError: No decision logic was loaded.
        """
        run_id = run_id or str(uuid4())
        started = self._monotonic()

        with LogContext.bind(run_id=run_id, producer=PRODUCER):
            if self._config.dry_run:
                logger.warning("dry_run_mode_enabled")
            logger.info("run_started", extra={"central_source": self._central.name})

            tables = validate_central_tables(self._central, self._config)
            ledger_status, statuses_synced = self._load_ledger_status(tables)
            context = build_engine_context(tables, self._config, ledger_status)

            if not context.has_decision_logic:
                table_name = self._config.table(DECISION).name
                logger.error("decision_logic_missing", extra={"table_name": table_name})
                raise EmptyDecisionTableError(table_name)

            workspaces = load_active_workspaces(tables, self._config)
            if not workspaces:
                logger.warning("no_active_workspaces")

            processor = WorkspaceProcessor(self._config, run_id, clock=self._clock)
            outcomes: list[WorkspaceOutcome] = []
            failures: list[WorkspaceFailure] = []
            skipped = 0
            stopped_early = False

            for position, workspace_id in enumerate(workspaces):
                elapsed = self._monotonic() - started
                if elapsed > self._config.max_runtime_seconds:
                    stopped_early = True
                    skipped = len(workspaces) - position
                    logger.warning(
                        "time_budget_exhausted",
                        extra={
                            "processed": position,
                            "total": len(workspaces),
                            "elapsed_seconds": round(elapsed, 1),
                        },
                    )
                    break

                with LogContext.bind(workspace_id=workspace_id):
                    logger.info(
                        "workspace_started",
                        extra={"position": position + 1, "total": len(workspaces)},
                    )
                    try:
                        source = self._open_workspace(workspace_id)
                        outcomes.append(
                            processor.process_workspace(workspace_id, source, context)
                        )
                    except Exception as exc:
                        logger.error("workspace_failed", exc_info=True)
                        failures.append(
                            WorkspaceFailure(
                                workspace_id=workspace_id,
                                error_type=type(exc).__name__,
                                message=str(exc),
                            )
                        )

            summary = RunSummary(
                run_id=run_id,
                workspaces=len(workspaces),
                processed=len(outcomes),
                failed=len(failures),
                skipped=skipped,
                rows=sum(o.rows for o in outcomes),
                error_rows=sum(o.error_rows for o in outcomes),
                grants=sum(o.grants for o in outcomes),
                revocations=sum(o.revocations for o in outcomes),
                ledger_inserted=sum(o.ledger_inserted for o in outcomes),
                ledger_updated=sum(o.ledger_updated for o in outcomes),
                ledger_statuses_synced=statuses_synced,
                duration_seconds=round(self._monotonic() - started, 1),
                stopped_early=stopped_early,
                dry_run=self._config.dry_run,
                failures=tuple(failures),
            )
            logger.info(
                "run_completed",
                extra={
                    "processed": summary.processed,
                    "failed": summary.failed,
                    "skipped": summary.skipped,
                    "duration_seconds": summary.duration_seconds,
                },
            )
            return summary

    def _load_ledger_status(self, tables) -> tuple[dict[str, str], int]:
        """Active ledger statuses after the central ledger tab is applied.

        Returns the ``key -> FINAL_STATUS`` map and the number of entries
        whose stored status changed.
        """
        assignments = load_ledger_assignments(tables, self._config)
        synced = 0
        with session_scope() as session:
            if assignments and not self._config.dry_run:
                synced = LedgerService(session).assign_statuses(assignments).updated
            ledger_status = LedgerSelector(session).active_status_map()

        if self._config.dry_run:
            for assignment in assignments:
                if assignment.key in ledger_status:
                    ledger_status[assignment.key] = assignment.final_status
        return ledger_status, synced
