"""
roster_engines.ledger -- Entitlement ledger state machine.

Responsibility:
    Turn the GRANT / REVOKE intents of one processing unit into the minimal
    idempotent ``LedgerWriteSet`` against the current ledger snapshot.

Architecture position:
    Engines -- pure calculation layer.  Never touches storage; the persistence
    collaborator (``roster_kernel.services.ledger_service``) applies the
    write set atomically.

Invariants enforced:
    - Grant idempotency: a key that already exists (Active or Inactive) or
      was staged earlier in the same call is never granted again.
    - Revoke idempotency: only Active entries transition to Inactive; a
      repeated revoke stages nothing.
    - Column scope: updates carry only activation state and note.
    - Determinism: output order follows intent order; timestamps come from
      the injected ``Clock``.

Lifecycle:
    (absent) --grant--> Active --revoke(COMP_DAY)--> Inactive "Comp Day Consumed"
                              \\--revoke(other)----> Inactive "Revoked: Work/Rule Change"
"""

from __future__ import annotations

from collections.abc import Iterable

from roster_kernel.domain.calendar import (
    composite_key,
    format_date,
    normalize_employee_id,
)
from roster_kernel.domain.clock import Clock, SystemClock
from roster_kernel.domain.ledger import (
    COMP_DAY,
    NOTE_COMP_DAY_CONSUMED,
    NOTE_REVOKED,
    ActivationState,
    GrantIntent,
    LedgerEntry,
    LedgerInsert,
    LedgerUpdate,
    LedgerWriteSet,
    RevokeIntent,
)
from roster_kernel.logging_config import get_logger

from roster_engines.tracer import traced_engine

logger = get_logger("engines.ledger")


def revocation_note(reason: str) -> str:
    """System note for a revoked entry, derived from the triggering status."""
    return NOTE_COMP_DAY_CONSUMED if reason == COMP_DAY else NOTE_REVOKED


class LedgerManager:
    """Computes ledger write sets for one processing unit.

    Contract:
        Constructed with the ledger snapshot as it stands before the unit's
        intents are applied.  ``grant`` and ``revoke`` are independent and
        never mutate the snapshot, so calling either twice yields the same
        write set.
    """

    def __init__(self, snapshot: Iterable[LedgerEntry], clock: Clock | None = None):
        self._entries: dict[str, list[LedgerEntry]] = {}
        for entry in snapshot:
            self._entries.setdefault(entry.key, []).append(entry)
        self._clock = clock or SystemClock()

    def has_entry(self, key: str) -> bool:
        return key in self._entries

    def grant(self, intents: Iterable[GrantIntent]) -> LedgerWriteSet:
        """Stage a new Active COMP_DAY entry for every key not yet in the ledger."""
        staged: set[str] = set()
        inserts: list[LedgerInsert] = []
        now = self._clock.now()
        for intent in intents:
            key = composite_key(normalize_employee_id(intent.employee), format_date(intent.day))
            if key in self._entries or key in staged:
                continue
            staged.add(key)
            inserts.append(
                LedgerInsert(
                    employee_id=intent.employee,
                    entitlement_date=intent.day,
                    granted_at=now,
                )
            )
        return LedgerWriteSet(inserts=tuple(inserts))

    def revoke(self, intents: Iterable[RevokeIntent]) -> LedgerWriteSet:
        """Stage Active -> Inactive for every intent whose entry is still Active."""
        reasons: dict[str, str] = {}
        for intent in intents:
            key = composite_key(normalize_employee_id(intent.employee), intent.date_str)
            reasons[key] = intent.reason

        updates: list[LedgerUpdate] = []
        for key, reason in reasons.items():
            for entry in self._entries.get(key, ()):
                if not entry.is_active:
                    continue
                updates.append(
                    LedgerUpdate(
                        employee_key=normalize_employee_id(entry.employee_id),
                        entitlement_date=entry.entitlement_date,
                        activation=ActivationState.INACTIVE,
                        note=revocation_note(reason),
                    )
                )
        return LedgerWriteSet(updates=tuple(updates))

    @traced_engine("ledger", "1.0")
    def plan(
        self,
        grants: Iterable[GrantIntent],
        revocations: Iterable[RevokeIntent],
    ) -> LedgerWriteSet:
        """Grant then revoke, both against the same pre-unit snapshot."""
        write_set = self.grant(grants).merge(self.revoke(revocations))
        logger.info(
            "ledger_plan_computed",
            extra={
                "inserts": len(write_set.inserts),
                "updates": len(write_set.updates),
            },
        )
        return write_set

