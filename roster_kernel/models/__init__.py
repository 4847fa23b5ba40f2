"""ORM models.  Importing this package registers every table on Base.metadata."""

from roster_kernel.models.daily_status import DailyStatusModel
from roster_kernel.models.ledger import EntitlementLedgerModel

__all__ = [
    "DailyStatusModel",
    "EntitlementLedgerModel",
]
