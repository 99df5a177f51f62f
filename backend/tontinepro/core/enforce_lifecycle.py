"""Lifecycle Enforcement — ownership and status-transition rules for a tontine.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return a TontineError on violation, None on success
    - validate_* functions chain individual checks — first error wins
    - COMPLETED is terminal: no transition leaves it, no mutation is legal after it

Design Decisions:
    - Return errors (not raise): callers decide when to raise, checks compose with `or`
    - ALLOWED_TRANSITIONS is the single source of truth for the state machine
"""

from tontinepro.core.domain_types import Role, TontineStatus
from tontinepro.core.errors import (
    ErrorContext,
    ForbiddenError,
    InvalidStateError,
    TontineError,
)
from tontinepro.core.records import TontineRecord


ALLOWED_TRANSITIONS: dict[TontineStatus, frozenset[TontineStatus]] = {
    TontineStatus.PENDING: frozenset({TontineStatus.ACTIVE, TontineStatus.COMPLETED}),
    TontineStatus.ACTIVE: frozenset({TontineStatus.SUSPENDED, TontineStatus.COMPLETED}),
    TontineStatus.SUSPENDED: frozenset({TontineStatus.ACTIVE, TontineStatus.COMPLETED}),
    TontineStatus.COMPLETED: frozenset(),
}


def _context(tontine: TontineRecord, actor_id: str | None = None) -> ErrorContext:
    return ErrorContext(tontine_id=str(tontine.id), actor_id=actor_id)


def check_can_create(role: Role) -> TontineError | None:
    """Only an `initiatrice` may create a tontine."""
    if role != Role.INITIATRICE:
        return ForbiddenError("Only an initiatrice can create a tontine")
    return None


def check_initiator(tontine: TontineRecord, actor_id: str) -> TontineError | None:
    """Status, order, amount and validation are reserved to the tontine's initiator."""
    if tontine.initiator_id != actor_id:
        return ForbiddenError(
            "Only the tontine's initiator can perform this action",
            _context(tontine, actor_id),
        )
    return None


def check_not_completed(tontine: TontineRecord) -> TontineError | None:
    if tontine.status == TontineStatus.COMPLETED:
        return InvalidStateError(
            "Tontine is completed; no further changes are allowed",
            tontine.status.value, _context(tontine),
        )
    return None


def check_transition(
    tontine: TontineRecord, target: TontineStatus,
) -> TontineError | None:
    if target not in ALLOWED_TRANSITIONS[tontine.status]:
        return InvalidStateError(
            f"Cannot move tontine from '{tontine.status.value}' to '{target.value}'",
            tontine.status.value, _context(tontine),
        )
    return None


def check_activation_roster(
    tontine: TontineRecord, roster_size: int, min_participants: int,
) -> TontineError | None:
    """Configurable policy: roster must reach `min_participants` before activation."""
    if roster_size < min_participants:
        return InvalidStateError(
            f"At least {min_participants} participant(s) required to activate "
            f"(currently {roster_size})",
            tontine.status.value, _context(tontine),
        )
    return None


def check_accepting_payments(tontine: TontineRecord) -> TontineError | None:
    if tontine.status != TontineStatus.ACTIVE:
        return InvalidStateError(
            f"Payments can only be submitted while the tontine is active "
            f"(currently '{tontine.status.value}')",
            tontine.status.value, _context(tontine),
        )
    return None


def toggle_target(tontine: TontineRecord) -> TontineStatus | None:
    """active ⇄ suspended; None when the current status cannot be toggled."""
    if tontine.status == TontineStatus.ACTIVE:
        return TontineStatus.SUSPENDED
    if tontine.status == TontineStatus.SUSPENDED:
        return TontineStatus.ACTIVE
    return None


def validate_initiator_mutation(
    tontine: TontineRecord, actor_id: str,
) -> TontineError | None:
    """Ownership first, then terminal-state guard."""
    return check_initiator(tontine, actor_id) or check_not_completed(tontine)


def validate_transition(
    tontine: TontineRecord,
    actor_id: str,
    target: TontineStatus,
    roster_size: int = 0,
    min_participants: int = 0,
) -> TontineError | None:
    """Chain all transition prerequisites. Returns first error or None."""
    error = check_initiator(tontine, actor_id) or check_transition(tontine, target)
    if error:
        return error
    if tontine.status == TontineStatus.PENDING and target == TontineStatus.ACTIVE:
        return check_activation_roster(tontine, roster_size, min_participants)
    return None
