"""
Module: roster_kernel.models.daily_status
Responsibility: ORM persistence for the per employee-day audit rows a run
    produces for each workspace.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - UNIQUE(workspace_id, row_key): a workspace holds one row per
      employee-day.  Each run replaces the workspace's rows wholesale.
"""

from datetime import date

from sqlalchemy import Date, Float, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from roster_kernel.db.base import TrackedBase


class DailyStatusModel(TrackedBase):
    """One resolved employee-day, column for column with the audit row."""

    __tablename__ = "daily_status"

    __table_args__ = (
        UniqueConstraint("workspace_id", "row_key", name="uq_daily_status_row"),
        Index("idx_daily_status_run", "run_id"),
        Index("idx_daily_status_final", "final_status"),
    )

    workspace_id: Mapped[str] = mapped_column(String(500), nullable=False)
    run_id: Mapped[str] = mapped_column(String(36), nullable=False)

    row_key: Mapped[str] = mapped_column(String(250), nullable=False)
    employee: Mapped[str] = mapped_column(String(200), nullable=False)
    status_date: Mapped[date] = mapped_column(Date, nullable=False)
    base_status: Mapped[str] = mapped_column(String(10), nullable=False)
    base_shift: Mapped[str] = mapped_column(String(50), nullable=False)
    rule_input: Mapped[str] = mapped_column(String(50), nullable=False)
    leave_input: Mapped[str] = mapped_column(String(50), nullable=False)
    ph_input: Mapped[str] = mapped_column(String(10), nullable=False)
    entitlement_input: Mapped[str] = mapped_column(String(30), nullable=False)
    final_status: Mapped[str] = mapped_column(String(50), nullable=False)
    final_shift: Mapped[str] = mapped_column(String(50), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    note: Mapped[str] = mapped_column(Text, nullable=False)
    final_val: Mapped[float] = mapped_column(Float, nullable=False)
