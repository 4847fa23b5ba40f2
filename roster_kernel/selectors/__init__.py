"""Read-only selectors."""

from roster_kernel.selectors.base import BaseSelector
from roster_kernel.selectors.ledger_selector import LedgerSelector

__all__ = ["BaseSelector", "LedgerSelector"]
