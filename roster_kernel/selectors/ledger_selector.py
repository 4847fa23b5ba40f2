"""
Module: roster_kernel.selectors.ledger_selector
Responsibility: Read access to the entitlement ledger, returned as
    ``LedgerEntry`` domain values.
Architecture position: Kernel > Selectors.

Two views are offered:
    - ``snapshot()``: every entry, Active or Inactive.  The ledger manager
      needs Inactive rows too, so a consumed entitlement is never re-granted.
    - ``active_status_map()``: ``employee|date -> FINAL_STATUS`` for Active
      entries only.  This is the resolver's entitlement input.

Rows are re-read on every call (``populate_existing``): the ledger service
writes with bulk UPDATEs that bypass the identity map.
"""

from sqlalchemy import select

from roster_kernel.domain.ledger import ActivationState, LedgerEntry
from roster_kernel.models.ledger import EntitlementLedgerModel
from roster_kernel.selectors.base import BaseSelector


def _to_entry(row: EntitlementLedgerModel) -> LedgerEntry:
    return LedgerEntry(
        employee_id=row.employee_id,
        entitlement_date=row.entitlement_date,
        activation=ActivationState.parse(row.activation_status),
        entitlement_type=row.entitlement_type,
        final_status=row.final_status or "",
        note=row.system_note or "",
        date_used=row.date_used,
    )


class LedgerSelector(BaseSelector[EntitlementLedgerModel]):
    """Read-only ledger queries."""

    def snapshot(self) -> list[LedgerEntry]:
        stmt = (
            select(EntitlementLedgerModel)
            .order_by(
                EntitlementLedgerModel.employee_key,
                EntitlementLedgerModel.entitlement_date,
            )
            .execution_options(populate_existing=True)
        )
        return [_to_entry(row) for row in self.session.scalars(stmt)]

    def active_status_map(self) -> dict[str, str]:
        result: dict[str, str] = {}
        for entry in self.snapshot():
            if entry.is_active:
                result[entry.key] = entry.final_status.strip().upper()
        return result

    def get(self, employee_key: str, entitlement_date) -> LedgerEntry | None:
        stmt = (
            select(EntitlementLedgerModel)
            .where(
                EntitlementLedgerModel.employee_key == employee_key,
                EntitlementLedgerModel.entitlement_date == entitlement_date,
            )
            .execution_options(populate_existing=True)
        )
        row = self.session.scalars(stmt).first()
        return _to_entry(row) if row is not None else None
