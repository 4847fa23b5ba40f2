"""Kernel write services (flush-only; callers own the transaction)."""

from roster_kernel.services.base import BaseService
from roster_kernel.services.daily_status_writer import DailyStatusWriter
from roster_kernel.services.ledger_service import (
    LedgerApplyResult,
    LedgerService,
    LedgerStatusSyncResult,
)

__all__ = [
    "BaseService",
    "DailyStatusWriter",
    "LedgerApplyResult",
    "LedgerService",
    "LedgerStatusSyncResult",
]
