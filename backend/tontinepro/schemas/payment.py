"""Payment Schemas — claim submission, validation decision and ledger responses.

Invariants:
    - PaymentSubmit.amount > 0; period optional (derived from submission date when absent)
    - PaymentValidate.decision is confirm | reject
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from tontinepro.core.domain_types import PaymentStatus, ValidationDecision
from tontinepro.core.records import PaymentRecord


class PaymentSubmit(BaseModel):
    """Contribution claim — the proof is an opaque reference (e.g. uploaded file key)."""
    amount: int = Field(gt=0)
    period: str | None = Field(None, max_length=50)
    proof_ref: str | None = Field(None, max_length=500)

    @field_validator("period")
    @classmethod
    def strip_period(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class PaymentValidate(BaseModel):
    decision: ValidationDecision


class PaymentResponse(BaseModel):
    id: UUID
    tontine_id: UUID
    participant_id: str
    amount: int
    period: str
    submitted_at: datetime
    proof_ref: str | None
    status: PaymentStatus
    validator_id: str | None
    validated_at: datetime | None

    @classmethod
    def from_record(cls, payment: PaymentRecord) -> "PaymentResponse":
        return cls(
            id=payment.id,
            tontine_id=payment.tontine_id,
            participant_id=payment.participant_id,
            amount=payment.amount,
            period=payment.period,
            submitted_at=payment.submitted_at,
            proof_ref=payment.proof_ref,
            status=payment.status,
            validator_id=payment.validator_id,
            validated_at=payment.validated_at,
        )


class PaymentSummaryResponse(BaseModel):
    total: int
    counts: dict[str, int]
    confirmed_amount: int
