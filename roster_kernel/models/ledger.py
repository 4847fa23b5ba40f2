"""
Module: roster_kernel.models.ledger
Responsibility: ORM persistence for the comp-day entitlement ledger.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - UNIQUE(employee_key, entitlement_date): at most one entry per
      employee-day, so a retried grant cannot duplicate a row.
    - activation_status is persisted as ActivationState.value.
    - Rows are never deleted; revocation flips activation_status to
      Inactive and writes system_note.

Failure modes:
    - IntegrityError on a duplicate (employee_key, entitlement_date).
"""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from roster_kernel.db.base import TrackedBase


class EntitlementLedgerModel(TrackedBase):
    """
    One comp-day entitlement.

    Contract:
        ``employee_id`` keeps the id as it was granted (display form);
        ``employee_key`` is the normalized id every lookup joins on.
    """

    __tablename__ = "entitlement_ledger"

    __table_args__ = (
        UniqueConstraint(
            "employee_key",
            "entitlement_date",
            name="uq_ledger_employee_day",
        ),
        Index("idx_ledger_activation", "activation_status"),
    )

    employee_id: Mapped[str] = mapped_column(String(200), nullable=False)

    employee_key: Mapped[str] = mapped_column(String(200), nullable=False)

    entitlement_date: Mapped[date] = mapped_column(Date, nullable=False)

    entitlement_type: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default="COMP_DAY",
    )

    activation_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="Active",
    )

    # Filled in by whoever books the comp day off
    final_status: Mapped[str] = mapped_column(String(30), nullable=False, default="")

    date_used: Mapped[date | None] = mapped_column(Date, nullable=True)

    system_note: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<EntitlementLedger {self.employee_key}|{self.entitlement_date} "
            f"{self.activation_status}>"
        )
