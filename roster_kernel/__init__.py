"""
Roster Kernel

Deterministic per-employee, per-day workforce status resolution with:
- Approved override rules applied in a strict, reproducible order
- A declarative decision table with wildcard criteria
- An idempotent entitlement ledger (grant / consume / revoke)
- Atomic, column-scoped ledger writes
"""

__version__ = "0.1.0"
