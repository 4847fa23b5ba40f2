"""
BaseService -- abstract base for kernel write services.

Invariants enforced:
    Services flush within the caller's transaction and never commit or
    roll back themselves.  The caller (usually ``session_scope()``) owns
    the transaction, so the daily status replacement and the ledger write
    set of one workspace land together or not at all.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from roster_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """Accepts the caller's session; uses ``flush()`` only."""

    def __init__(self, session: Session):
        self.session = session
