"""Payment Ledger Enforcement — submission and validation rules.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Submission requires an ACTIVE tontine and a current roster member
    - A payment transitions exactly once, from PENDING to CONFIRMED or REJECTED
    - Only CONFIRM touches the roster (payment_status → confirmed); REJECT leaves it unchanged

Design Decisions:
    - Period label derived from submission date when the claimant omits it
    - Month names fixed in English: labels must not depend on process locale
"""

from datetime import datetime

from tontinepro.core.domain_types import (
    ParticipantPaymentStatus,
    PaymentStatus,
    ValidationDecision,
)
from tontinepro.core.enforce_lifecycle import (
    check_accepting_payments,
    check_initiator,
    check_not_completed,
)
from tontinepro.core.errors import (
    ConflictError,
    ErrorContext,
    ForbiddenError,
    InvalidStateError,
    TontineError,
)
from tontinepro.core.records import ParticipantRecord, PaymentRecord, TontineRecord


MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

DECISION_STATUS: dict[ValidationDecision, PaymentStatus] = {
    ValidationDecision.CONFIRM: PaymentStatus.CONFIRMED,
    ValidationDecision.REJECT: PaymentStatus.REJECTED,
}

# Statuses that count as an open claim for the duplicate-period policy
OPEN_CLAIM_STATUSES: frozenset[PaymentStatus] = frozenset(
    {PaymentStatus.PENDING, PaymentStatus.CONFIRMED},
)


def default_period_label(moment: datetime) -> str:
    """Human-readable cycle label, e.g. 'May 2025'."""
    return f"{MONTH_NAMES[moment.month - 1]} {moment.year}"


def check_member(
    tontine: TontineRecord, participant: ParticipantRecord | None, user_id: str,
) -> TontineError | None:
    if participant is None:
        return ForbiddenError(
            "Only roster members can submit payments",
            ErrorContext(tontine_id=str(tontine.id), actor_id=user_id),
        )
    return None


def check_duplicate_period(
    tontine: TontineRecord, period: str, existing: list[PaymentRecord],
) -> TontineError | None:
    """Used only when duplicate period claims are disabled by configuration."""
    if any(p.period == period and p.status in OPEN_CLAIM_STATUSES for p in existing):
        return ConflictError(
            f"A claim for period '{period}' is already pending or confirmed",
            ErrorContext(tontine_id=str(tontine.id)),
        )
    return None


def validate_submission(
    tontine: TontineRecord, participant: ParticipantRecord | None, user_id: str,
) -> TontineError | None:
    """Chain submission prerequisites. Returns first error or None."""
    return (
        check_accepting_payments(tontine)
        or check_member(tontine, participant, user_id)
    )


def check_payment_pending(payment: PaymentRecord) -> TontineError | None:
    if payment.status != PaymentStatus.PENDING:
        return InvalidStateError(
            f"Payment already {payment.status.value}",
            payment.status.value,
            ErrorContext(
                tontine_id=str(payment.tontine_id), payment_id=str(payment.id),
            ),
        )
    return None


def validate_decision(
    tontine: TontineRecord, payment: PaymentRecord, actor_id: str,
) -> TontineError | None:
    """Chain validation prerequisites. Returns first error or None."""
    return (
        check_initiator(tontine, actor_id)
        or check_not_completed(tontine)
        or check_payment_pending(payment)
    )


def roster_status_after(
    decision: ValidationDecision, current: ParticipantPaymentStatus,
) -> ParticipantPaymentStatus:
    """Roster side effect of a decision: confirm → confirmed, reject → unchanged."""
    if decision == ValidationDecision.CONFIRM:
        return ParticipantPaymentStatus.CONFIRMED
    return current
