"""Payment Routes — claim submission, validation, ledger listings and summary.

Invariants:
    - Submission answers 201 with the PENDING payment
    - Listings are newest first; participants only ever see their own claims
    - Validation is a POST on the payment itself: the tontine is derived from it
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from tontinepro.api.dependencies import get_ledger_service, get_principal
from tontinepro.core.domain_types import PaymentStatus, Principal, TontineEventType
from tontinepro.infrastructure.event_bus import event_bus
from tontinepro.schemas.payment import (
    PaymentResponse,
    PaymentSubmit,
    PaymentSummaryResponse,
    PaymentValidate,
)
from tontinepro.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["payments"])


@router.post(
    "/tontines/{tontine_id}/payments",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_payment(
    tontine_id: UUID,
    body: PaymentSubmit,
    principal: Principal = Depends(get_principal),
    service: LedgerService = Depends(get_ledger_service),
):
    payment = await service.submit(
        tontine_id, principal, body.amount, body.period, body.proof_ref,
    )
    event_bus.publish(
        tontine_id, TontineEventType.PAYMENT_SUBMITTED,
        {
            "payment_id": str(payment.id),
            "participant_id": payment.participant_id,
            "amount": payment.amount,
            "period": payment.period,
        },
    )
    return PaymentResponse.from_record(payment)


@router.get(
    "/tontines/{tontine_id}/payments", response_model=list[PaymentResponse],
)
async def list_payments(
    tontine_id: UUID,
    status_filter: PaymentStatus | None = Query(None, alias="status"),
    principal: Principal = Depends(get_principal),
    service: LedgerService = Depends(get_ledger_service),
):
    payments = await service.list_for_tontine(tontine_id, principal, status_filter)
    return [PaymentResponse.from_record(p) for p in payments]


@router.get(
    "/tontines/{tontine_id}/payments/summary", response_model=PaymentSummaryResponse,
)
async def payment_summary(
    tontine_id: UUID,
    principal: Principal = Depends(get_principal),
    service: LedgerService = Depends(get_ledger_service),
):
    """Counts per status and total confirmed amount."""
    return await service.summary(tontine_id, principal)


@router.get(
    "/tontines/{tontine_id}/participants/{participant_id}/payments",
    response_model=list[PaymentResponse],
)
async def list_participant_payments(
    tontine_id: UUID,
    participant_id: str,
    principal: Principal = Depends(get_principal),
    service: LedgerService = Depends(get_ledger_service),
):
    payments = await service.list_for_participant(tontine_id, participant_id, principal)
    return [PaymentResponse.from_record(p) for p in payments]


@router.post("/payments/{payment_id}/validate", response_model=PaymentResponse)
async def validate_payment(
    payment_id: UUID,
    body: PaymentValidate,
    principal: Principal = Depends(get_principal),
    service: LedgerService = Depends(get_ledger_service),
):
    """Confirm or reject a pending claim (initiator only)."""
    payment = await service.validate(payment_id, principal, body.decision)
    event_bus.publish(
        payment.tontine_id, TontineEventType.PAYMENT_VALIDATED,
        {
            "payment_id": str(payment.id),
            "participant_id": payment.participant_id,
            "status": payment.status.value,
        },
    )
    return PaymentResponse.from_record(payment)
