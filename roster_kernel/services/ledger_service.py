"""
LedgerService -- applies a ``LedgerWriteSet`` to the entitlement ledger.

Responsibility:
    Persist the diff computed by ``roster_engines.ledger.LedgerManager``,
    and copy operator-set final statuses from the central ledger tab.

Architecture position:
    Kernel > Services -- imperative shell.  The engine decides WHAT changes;
    this service only writes it.

Invariants enforced:
    - Column scope: write-set updates touch activation_status and
      system_note only; status assignments touch final_status only.
    - Revoke idempotency at the storage level: the UPDATE is guarded by
      ``activation_status != 'Inactive'``, so a row revoked concurrently
      is left alone.
    - Grant idempotency at the storage level: UNIQUE(employee_key,
      entitlement_date) on the table.

Failure modes:
    - LedgerWriteConflictError when an update targets a row that no longer
      exists.  The caller's transaction is expected to roll back.
    - IntegrityError when an insert collides with a row created after the
      snapshot was taken.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import select, update

from roster_kernel.domain.calendar import format_date, normalize_employee_id
from roster_kernel.domain.ledger import ActivationState, LedgerWriteSet, StatusAssignment
from roster_kernel.exceptions import LedgerWriteConflictError
from roster_kernel.logging_config import get_logger
from roster_kernel.models.ledger import EntitlementLedgerModel
from roster_kernel.services.base import BaseService

logger = get_logger("services.ledger")


@dataclass(frozen=True)
class LedgerApplyResult:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0


@dataclass(frozen=True)
class LedgerStatusSyncResult:
    updated: int = 0
    unchanged: int = 0
    unmatched: int = 0


class LedgerService(BaseService[EntitlementLedgerModel]):
    """Write side of the entitlement ledger."""

    def apply(self, write_set: LedgerWriteSet) -> LedgerApplyResult:
        """
        Append staged inserts and apply column-scoped updates.

        Postconditions: changes are flushed, not committed.

        Raises:
            LedgerWriteConflictError: An update's target row is missing.
        """
        if write_set.is_empty:
            return LedgerApplyResult()

        for insert in write_set.inserts:
            self.session.add(
                EntitlementLedgerModel(
                    employee_id=insert.employee_id,
                    employee_key=normalize_employee_id(insert.employee_id),
                    entitlement_date=insert.entitlement_date,
                    entitlement_type=insert.entitlement_type,
                    activation_status=insert.activation.value,
                    final_status="",
                    system_note="",
                    granted_at=insert.granted_at,
                )
            )
        self.session.flush()

        updated = 0
        skipped = 0
        for change in write_set.updates:
            stmt = (
                update(EntitlementLedgerModel)
                .where(
                    EntitlementLedgerModel.employee_key == change.employee_key,
                    EntitlementLedgerModel.entitlement_date == change.entitlement_date,
                    EntitlementLedgerModel.activation_status
                    != ActivationState.INACTIVE.value,
                )
                .values(
                    activation_status=change.activation.value,
                    system_note=change.note,
                )
                .execution_options(synchronize_session=False)
            )
            rowcount = self.session.execute(stmt).rowcount
            if rowcount:
                updated += rowcount
                continue
            if not self._exists(change.employee_key, change.entitlement_date):
                raise LedgerWriteConflictError(
                    change.employee_key, format_date(change.entitlement_date)
                )
            skipped += 1
        self.session.flush()

        result = LedgerApplyResult(
            inserted=len(write_set.inserts), updated=updated, skipped=skipped
        )
        logger.info(
            "ledger_write_set_applied",
            extra={
                "inserted": result.inserted,
                "updated": result.updated,
                "skipped": result.skipped,
            },
        )
        return result

    def assign_statuses(self, assignments: Iterable[StatusAssignment]) -> LedgerStatusSyncResult:
        """
        Copy operator-set final statuses onto existing entries.

        Only ``final_status`` is written, and only where it differs.
        Activation is left alone, so a consumed entry stays consumed.
        Assignments for keys the ledger does not hold are counted and
        logged, never inserted.

        Postconditions: changes are flushed, not committed.
        """
        updated = 0
        unchanged = 0
        unmatched: list[str] = []
        for assignment in assignments:
            stmt = (
                update(EntitlementLedgerModel)
                .where(
                    EntitlementLedgerModel.employee_key == assignment.employee_key,
                    EntitlementLedgerModel.entitlement_date == assignment.entitlement_date,
                    EntitlementLedgerModel.final_status != assignment.final_status,
                )
                .values(final_status=assignment.final_status)
                .execution_options(synchronize_session=False)
            )
            if self.session.execute(stmt).rowcount:
                updated += 1
            elif self._exists(assignment.employee_key, assignment.entitlement_date):
                unchanged += 1
            else:
                unmatched.append(assignment.key)
        self.session.flush()

        if unmatched:
            logger.warning(
                "ledger_status_unmatched",
                extra={"unmatched": len(unmatched), "keys": unmatched[:20]},
            )
        result = LedgerStatusSyncResult(
            updated=updated, unchanged=unchanged, unmatched=len(unmatched)
        )
        logger.info(
            "ledger_statuses_synced",
            extra={
                "updated": result.updated,
                "unchanged": result.unchanged,
                "unmatched": result.unmatched,
            },
        )
        return result

    def _exists(self, employee_key: str, entitlement_date) -> bool:
        stmt = select(EntitlementLedgerModel.id).where(
            EntitlementLedgerModel.employee_key == employee_key,
            EntitlementLedgerModel.entitlement_date == entitlement_date,
        )
        return self.session.scalars(stmt).first() is not None
