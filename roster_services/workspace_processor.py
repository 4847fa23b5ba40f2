"""
WorkspaceProcessor -- resolves every roster cell of one workspace.

Responsibility:
    Parse each roster tab, resolve every (employee, day) cell against the
    shared ``EngineContext``, collect GRANT / REVOKE intents, then persist
    the workspace's daily status rows and the resulting ledger write set.

Architecture position:
    Services -- imperative shell.  Calls the pure engines, the ingestion
    parsers and the kernel persistence services.

Invariants enforced:
    - Cells are resolved concurrently (one task per employee) against the
      read-only context; output order always follows roster order.
    - The ledger write set is computed against a snapshot read inside the
      same transaction that applies it, together with the daily status
      replacement: a workspace's writes commit together or not at all.
    - Dry run: everything is computed, nothing is written.

Failure modes:
    - MissingTableError: a roster tab is missing from the workspace.
    - RosterLayoutError: a roster tab lacks required columns or dates.
    - LedgerWriteConflictError / SQLAlchemy errors: the transaction is
      rolled back and the error propagates to the run loop.
"""

from __future__ import annotations

import contextvars
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace

from roster_config.schema import EngineConfig
from roster_engines.ledger import LedgerManager
from roster_engines.resolver import resolve_employee_day
from roster_ingestion.adapters.base import WorkbookSource
from roster_ingestion.domain.types import Grid
from roster_ingestion.roster_parser import parse_roster_grid
from roster_ingestion.schema_validator import validate_workspace
from roster_kernel.db.engine import session_scope
from roster_kernel.domain.clock import Clock, SystemClock
from roster_kernel.domain.decision import EntitlementAction
from roster_kernel.domain.ledger import GrantIntent, RevokeIntent
from roster_kernel.domain.resolution import ERROR_STATUS, AuditRow, EngineContext, ResolutionResult
from roster_kernel.domain.roster import DayFact, Employee
from roster_kernel.logging_config import LogContext, get_logger
from roster_kernel.selectors.ledger_selector import LedgerSelector
from roster_kernel.services.daily_status_writer import DailyStatusWriter
from roster_kernel.services.ledger_service import LedgerService

logger = get_logger("services.workspace")


@dataclass(frozen=True)
class RosterBatch:
    """Everything one or more roster tabs produced."""

    rows: tuple[AuditRow, ...] = ()
    grants: tuple[GrantIntent, ...] = ()
    revocations: tuple[RevokeIntent, ...] = ()

    @property
    def error_count(self) -> int:
        return sum(1 for row in self.rows if row.final_status == ERROR_STATUS)

    def merge(self, other: RosterBatch) -> RosterBatch:
        return RosterBatch(
            rows=self.rows + other.rows,
            grants=self.grants + other.grants,
            revocations=self.revocations + other.revocations,
        )


@dataclass(frozen=True)
class WorkspaceOutcome:
    """Result of processing one workspace."""

    workspace_id: str
    rows: int
    error_rows: int
    grants: int
    revocations: int
    ledger_inserted: int = 0
    ledger_updated: int = 0
    rows_written: int = 0
    dry_run: bool = False


def _resolve_row(
    employee: Employee,
    days: Sequence[DayFact],
    context: EngineContext,
) -> list[ResolutionResult]:
    rules = context.rules_for(employee.employee_id)
    return [resolve_employee_day(employee, day, context, rules) for day in days]


class WorkspaceProcessor:
    """Processes workspaces against one run's context."""

    def __init__(
        self,
        config: EngineConfig,
        run_id: str,
        clock: Clock | None = None,
    ):
        self._config = config
        self._run_id = run_id
        self._clock = clock or SystemClock()

    def process_roster(
        self,
        grid: Grid,
        context: EngineContext,
        tab_name: str = "",
    ) -> RosterBatch:
        """Resolve every cell of one roster grid."""
        sheet = parse_roster_grid(grid, self._config.roster, tab_name)
        if not sheet.employees:
            return RosterBatch()

        workers = min(self._config.max_workers, len(sheet.employees))
        if workers <= 1:
            per_employee = [_resolve_row(e, sheet.days, context) for e in sheet.employees]
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                # Each task runs in a copy of the caller's context so log
                # records keep run_id / workspace_id.
                futures = [
                    pool.submit(
                        contextvars.copy_context().run,
                        _resolve_row,
                        employee,
                        sheet.days,
                        context,
                    )
                    for employee in sheet.employees
                ]
                per_employee = [f.result() for f in futures]

        rows: list[AuditRow] = []
        grants: list[GrantIntent] = []
        revocations: list[RevokeIntent] = []
        for employee, results in zip(sheet.employees, per_employee):
            for day, result in zip(sheet.days, results):
                rows.append(result.audit_row)
                if result.entitlement_action is EntitlementAction.GRANT:
                    grants.append(GrantIntent(employee=employee.display_name, day=day.day))
                elif result.entitlement_action is EntitlementAction.REVOKE:
                    revocations.append(
                        RevokeIntent(
                            employee=employee.display_name,
                            date_str=day.date_str,
                            reason=result.final_status,
                        )
                    )

        batch = RosterBatch(
            rows=tuple(rows), grants=tuple(grants), revocations=tuple(revocations)
        )
        logger.info(
            "roster_processed",
            extra={
                "tab_name": tab_name,
                "employees": len(sheet.employees),
                "days": len(sheet.days),
                "error_rows": batch.error_count,
            },
        )
        return batch

    def process_workspace(
        self,
        workspace_id: str,
        source: WorkbookSource,
        context: EngineContext,
    ) -> WorkspaceOutcome:
        """Validate, resolve and (unless dry run) persist one workspace."""
        with LogContext.bind(workspace_id=workspace_id):
            validate_workspace(source, self._config.roster)

            batch = RosterBatch()
            for tab in self._config.roster.tabs:
                batch = batch.merge(
                    self.process_roster(source.read_grid(tab), context, tab_name=tab)
                )

            outcome = WorkspaceOutcome(
                workspace_id=workspace_id,
                rows=len(batch.rows),
                error_rows=batch.error_count,
                grants=len(batch.grants),
                revocations=len(batch.revocations),
                dry_run=self._config.dry_run,
            )

            if self._config.dry_run:
                logger.info("dry_run_writes_skipped", extra={"rows": outcome.rows})
                return outcome

            with session_scope() as session:
                snapshot = LedgerSelector(session).snapshot()
                write_set = LedgerManager(snapshot, clock=self._clock).plan(
                    batch.grants, batch.revocations
                )
                rows_written = DailyStatusWriter(session).replace(
                    workspace_id, batch.rows, self._run_id
                )
                applied = LedgerService(session).apply(write_set)

            outcome = replace(
                outcome,
                ledger_inserted=applied.inserted,
                ledger_updated=applied.updated,
                rows_written=rows_written,
            )
            logger.info(
                "workspace_processed",
                extra={
                    "rows": outcome.rows,
                    "error_rows": outcome.error_rows,
                    "ledger_inserted": outcome.ledger_inserted,
                    "ledger_updated": outcome.ledger_updated,
                },
            )
            return outcome
