"""Domain Records — plain dataclasses exchanged between core, services and repositories.

Invariants:
    - Records carry no ORM state: repositories copy rows into records and back
    - TontineRecord.rotation_order is the single source of truth for positions
    - ParticipantRecord.rotation_position is a cache; readers derive it from the order
    - TontineRecord.version increments on every stored mutation (optimistic guard)

Design Decisions:
    - Dataclasses over ORM objects in the core: pure, testable, fakeable without a DB
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from uuid import UUID

from tontinepro.core.domain_types import (
    Cadence,
    ContributionKind,
    ParticipantPaymentStatus,
    PaymentStatus,
    TontineStatus,
    Weekday,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TontineRecord:
    """A savings circle and its rotation order."""

    id: UUID
    initiator_id: str
    name: str
    contribution_kind: ContributionKind
    contribution_amount: int
    cadence: Cadence
    collection_day: Weekday
    start_date: date
    invitation_code: str
    description: str | None = None
    capacity: int | None = None  # None = unlimited
    end_date: date | None = None
    collection_window_start: date | None = None
    collection_window_end: date | None = None
    rotation_order: list[str] = field(default_factory=list)
    status: TontineStatus = TontineStatus.PENDING
    version: int = 1
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class ParticipantRecord:
    """A user's membership in one tontine."""

    tontine_id: UUID
    user_id: str
    display_name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    payment_status: ParticipantPaymentStatus = ParticipantPaymentStatus.UNPAID
    last_payment_at: datetime | None = None
    rotation_position: int | None = None
    joined_at: datetime = field(default_factory=utc_now)


@dataclass
class PaymentRecord:
    """A single contribution claim."""

    id: UUID
    tontine_id: UUID
    participant_id: str
    amount: int
    period: str
    submitted_at: datetime = field(default_factory=utc_now)
    proof_ref: str | None = None
    status: PaymentStatus = PaymentStatus.PENDING
    validator_id: str | None = None
    validated_at: datetime | None = None


@dataclass(frozen=True)
class TontineDraft:
    """Creation attributes supplied by the initiator (already boundary-validated)."""

    name: str
    contribution_kind: ContributionKind
    contribution_amount: int
    cadence: Cadence
    collection_day: Weekday
    start_date: date
    description: str | None = None
    capacity: int | None = None
    end_date: date | None = None
    collection_window_start: date | None = None
    collection_window_end: date | None = None


@dataclass(frozen=True)
class ParticipantProfile:
    """Contact details copied onto the roster entry at join time."""

    display_name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
