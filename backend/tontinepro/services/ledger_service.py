"""Ledger Service — contribution claims, their validation and ledger reads.

Invariants:
    - submit appends a PENDING payment only while the tontine is ACTIVE and the actor
      is on the roster; nothing is written on failure
    - validate transitions a payment exactly once (conditional update on status='pending')
    - Confirm sets the roster entry to confirmed + last_payment_at in the same commit;
      reject leaves the roster untouched
    - Listings are ordered by submission time, newest first

Design Decisions:
    - Participants listing a tontine's ledger see only their own claims; the initiator
      sees everything (summary reuses the same scoped listing)
    - Duplicate period claims are accepted unless allow_duplicate_period_claims is off
"""

import logging
import uuid
from dataclasses import replace
from uuid import UUID

from tontinepro.config import Settings
from tontinepro.core.domain_types import (
    PaymentStatus,
    Principal,
    ValidationDecision,
)
from tontinepro.core.enforce_payments import (
    DECISION_STATUS,
    check_duplicate_period,
    default_period_label,
    roster_status_after,
    validate_decision,
    validate_submission,
)
from tontinepro.core.errors import ConflictError, ErrorContext, ForbiddenError
from tontinepro.core.payment_summary import summarize_payments
from tontinepro.core.records import PaymentRecord, TontineRecord, utc_now
from tontinepro.core.repository_protocols import UnitOfWork
from tontinepro.core.roster import check_can_view
from tontinepro.services.guards import (
    TontineLocks,
    guarded_write,
    load_payment,
    load_tontine,
    tontine_locks,
)

logger = logging.getLogger(__name__)


class LedgerService:
    """Submission, validation and listing of contribution claims."""

    def __init__(
        self,
        uow: UnitOfWork,
        settings: Settings,
        locks: TontineLocks = tontine_locks,
    ):
        self.uow = uow
        self.settings = settings
        self.locks = locks

    # ─── Writes ──────────────────────────────────────────────────

    async def submit(
        self,
        tontine_id: UUID,
        principal: Principal,
        amount: int,
        period: str | None = None,
        proof_ref: str | None = None,
    ) -> PaymentRecord:
        user_id = principal.user_id
        async with guarded_write(self.uow, self.locks, tontine_id):
            tontine = await load_tontine(self.uow, tontine_id)
            participant = await self.uow.participants.get(tontine_id, user_id)
            error = validate_submission(tontine, participant, user_id)
            if error:
                raise error

            submitted_at = utc_now()
            label = period or default_period_label(submitted_at)
            if not self.settings.allow_duplicate_period_claims:
                own = await self.uow.payments.list(tontine_id, participant_id=user_id)
                error = check_duplicate_period(tontine, label, own)
                if error:
                    raise error

            payment = await self.uow.payments.insert(PaymentRecord(
                id=uuid.uuid4(),
                tontine_id=tontine_id,
                participant_id=user_id,
                amount=amount,
                period=label,
                submitted_at=submitted_at,
                proof_ref=proof_ref,
            ))
            await self.uow.commit()

        logger.info(
            "payment_submitted",
            extra={
                "tontine_id": str(tontine_id),
                "payment_id": str(payment.id),
                "actor_id": user_id,
            },
        )
        return payment

    async def validate(
        self, payment_id: UUID, principal: Principal, decision: ValidationDecision,
    ) -> PaymentRecord:
        payment = await load_payment(self.uow, payment_id)
        async with guarded_write(self.uow, self.locks, payment.tontine_id):
            tontine = await load_tontine(self.uow, payment.tontine_id)
            payment = await load_payment(self.uow, payment_id)
            error = validate_decision(tontine, payment, principal.user_id)
            if error:
                raise error

            status = DECISION_STATUS[decision]
            validated_at = utc_now()
            if not await self.uow.payments.resolve_if_pending(
                payment_id, status, principal.user_id, validated_at,
            ):
                raise ConflictError(
                    "Payment was validated concurrently",
                    ErrorContext(
                        tontine_id=str(tontine.id), payment_id=str(payment_id),
                    ),
                )

            participant = await self.uow.participants.get(
                tontine.id, payment.participant_id,
            )
            if participant is not None and decision == ValidationDecision.CONFIRM:
                await self.uow.participants.update(
                    tontine.id,
                    payment.participant_id,
                    payment_status=roster_status_after(
                        decision, participant.payment_status,
                    ),
                    last_payment_at=payment.submitted_at,
                )
            await self.uow.commit()

        logger.info(
            "payment_validated",
            extra={
                "tontine_id": str(tontine.id),
                "payment_id": str(payment_id),
                "actor_id": principal.user_id,
                "status": status.value,
            },
        )
        return replace(
            payment,
            status=status,
            validator_id=principal.user_id,
            validated_at=validated_at,
        )

    # ─── Reads ───────────────────────────────────────────────────

    async def _scope(
        self, tontine_id: UUID, principal: Principal,
    ) -> tuple[TontineRecord, str | None]:
        """Visible tontine plus the participant filter the actor is bound to."""
        tontine = await load_tontine(self.uow, tontine_id)
        if tontine.initiator_id == principal.user_id:
            return tontine, None
        member = await self.uow.participants.get(tontine_id, principal.user_id)
        error = check_can_view(tontine, principal.user_id, member is not None)
        if error:
            raise error
        return tontine, principal.user_id

    async def list_for_tontine(
        self,
        tontine_id: UUID,
        principal: Principal,
        status: PaymentStatus | None = None,
    ) -> list[PaymentRecord]:
        _, participant_filter = await self._scope(tontine_id, principal)
        return await self.uow.payments.list(
            tontine_id, status=status, participant_id=participant_filter,
        )

    async def list_for_participant(
        self, tontine_id: UUID, participant_id: str, principal: Principal,
    ) -> list[PaymentRecord]:
        """One member's claims. Members may only read their own."""
        tontine, participant_filter = await self._scope(tontine_id, principal)
        if participant_filter is not None and participant_filter != participant_id:
            raise ForbiddenError(
                "Participants can only list their own payments",
                ErrorContext(tontine_id=str(tontine.id), actor_id=principal.user_id),
            )
        return await self.uow.payments.list(tontine_id, participant_id=participant_id)

    async def summary(self, tontine_id: UUID, principal: Principal) -> dict:
        return summarize_payments(await self.list_for_tontine(tontine_id, principal))
