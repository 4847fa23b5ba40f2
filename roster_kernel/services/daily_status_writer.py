"""
DailyStatusWriter -- persists a workspace's audit rows.

Each run replaces the workspace's previous rows wholesale (delete then
insert inside the caller's transaction), matching how the daily status
table is regenerated on every run.
"""

from collections.abc import Iterable

from sqlalchemy import delete

from roster_kernel.domain.resolution import AuditRow
from roster_kernel.logging_config import get_logger
from roster_kernel.models.daily_status import DailyStatusModel
from roster_kernel.services.base import BaseService

logger = get_logger("services.daily_status")


class DailyStatusWriter(BaseService[DailyStatusModel]):

    def replace(self, workspace_id: str, rows: Iterable[AuditRow], run_id: str) -> int:
        """Swap the workspace's rows for ``rows``; returns the count written."""
        self.session.execute(
            delete(DailyStatusModel).where(DailyStatusModel.workspace_id == workspace_id)
        )
        # One row per employee-day; a later roster tab overrides an earlier one
        unique: dict[str, AuditRow] = {}
        for row in rows:
            unique[row.key] = row
        models = [
            DailyStatusModel(
                workspace_id=workspace_id,
                run_id=run_id,
                row_key=row.key,
                employee=row.display_name,
                status_date=row.day,
                base_status=row.base_flag,
                base_shift=row.base_shift,
                rule_input=row.derived_shift,
                leave_input=row.leave_category,
                ph_input=row.holiday_flag,
                entitlement_input=row.entitlement_input,
                final_status=row.final_status,
                final_shift=row.final_shift,
                reason=row.reason,
                note=row.trace,
                final_val=row.final_weight,
            )
            for row in unique.values()
        ]
        self.session.add_all(models)
        self.session.flush()
        logger.info(
            "daily_status_replaced",
            extra={"workspace_id": workspace_id, "rows_written": len(models)},
        )
        return len(models)
