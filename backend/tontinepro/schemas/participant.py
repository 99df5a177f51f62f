"""Participant Schemas — join requests, roster entries, order and schedule payloads.

Invariants:
    - JoinRequest.display_name: 1-120 chars, stripped, non-empty
    - ReorderRequest.order: any list; permutation rules (including emptiness) live in
      core/collection_order.py
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from tontinepro.core.collection_schedule import CollectionSlot
from tontinepro.core.domain_types import ParticipantPaymentStatus
from tontinepro.core.records import ParticipantProfile, ParticipantRecord


class JoinRequest(BaseModel):
    """Contact details copied onto the roster entry."""
    display_name: str = Field(min_length=1, max_length=120)
    email: str | None = Field(None, max_length=254)
    phone: str | None = Field(None, max_length=32)
    address: str | None = Field(None, max_length=500)

    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("display_name cannot be empty or whitespace")
        return v

    def to_profile(self) -> ParticipantProfile:
        return ParticipantProfile(**self.model_dump())


class ParticipantResponse(BaseModel):
    tontine_id: UUID
    user_id: str
    display_name: str
    email: str | None
    phone: str | None
    address: str | None
    payment_status: ParticipantPaymentStatus
    last_payment_at: datetime | None
    rotation_position: int | None
    joined_at: datetime

    @classmethod
    def from_record(cls, participant: ParticipantRecord) -> "ParticipantResponse":
        return cls(
            tontine_id=participant.tontine_id,
            user_id=participant.user_id,
            display_name=participant.display_name,
            email=participant.email,
            phone=participant.phone,
            address=participant.address,
            payment_status=participant.payment_status,
            last_payment_at=participant.last_payment_at,
            rotation_position=participant.rotation_position,
            joined_at=participant.joined_at,
        )


class JoinResponse(BaseModel):
    """Join result — `created` is False when the user was already a member."""
    created: bool
    participant: ParticipantResponse


class ReorderRequest(BaseModel):
    """Whole-array replacement. An empty or partial list fails as INVALID_ORDER."""
    order: list[str]


class OrderEntry(BaseModel):
    position: int
    user_id: str
    display_name: str | None


class ScheduleEntry(BaseModel):
    cycle: int
    collection_date: date
    beneficiary_id: str

    @classmethod
    def from_slot(cls, slot: CollectionSlot) -> "ScheduleEntry":
        return cls(
            cycle=slot.cycle,
            collection_date=slot.collection_date,
            beneficiary_id=slot.beneficiary_id,
        )
