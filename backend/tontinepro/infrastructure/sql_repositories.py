"""SQL Repositories — SQLAlchemy implementations of the core boundary Protocols.

Invariants:
    - Rows never leave this module: every read returns a core record (records.py)
    - Reads use populate_existing so bulk UPDATEs are never masked by the identity map
    - Conditional writes (version / pending guards) report success via rowcount
    - IntegrityError on insert → rollback + DuplicateKeyError (caller decides what it means)

Design Decisions:
    - All repositories share the request's AsyncSession; SqlUnitOfWork owns commit/rollback
    - Enum values converted to plain strings at this edge, and back on read
    - SQLite drops tzinfo on DateTime(timezone=True): reads re-attach UTC
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tontinepro.core.domain_types import (
    Cadence,
    ContributionKind,
    ParticipantPaymentStatus,
    PaymentStatus,
    TontineStatus,
    Weekday,
)
from tontinepro.core.errors import DuplicateKeyError
from tontinepro.core.records import ParticipantRecord, PaymentRecord, TontineRecord
from tontinepro.models.participant import Participant
from tontinepro.models.payment import Payment
from tontinepro.models.tontine import Tontine

logger = logging.getLogger(__name__)


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _plain(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in fields.items()}


# ─── Row ↔ record mapping ────────────────────────────────────────

def tontine_to_record(row: Tontine) -> TontineRecord:
    return TontineRecord(
        id=row.id,
        initiator_id=row.initiator_id,
        name=row.name,
        description=row.description,
        contribution_kind=ContributionKind(row.contribution_kind),
        contribution_amount=row.contribution_amount,
        cadence=Cadence(row.cadence),
        capacity=row.capacity,
        collection_day=Weekday(row.collection_day),
        start_date=row.start_date,
        end_date=row.end_date,
        collection_window_start=row.collection_window_start,
        collection_window_end=row.collection_window_end,
        rotation_order=list(row.rotation_order or []),
        status=TontineStatus(row.status),
        invitation_code=row.invitation_code,
        version=row.version,
        created_at=_aware(row.created_at),
    )


def participant_to_record(row: Participant) -> ParticipantRecord:
    return ParticipantRecord(
        tontine_id=row.tontine_id,
        user_id=row.user_id,
        display_name=row.display_name,
        email=row.email,
        phone=row.phone,
        address=row.address,
        payment_status=ParticipantPaymentStatus(row.payment_status),
        last_payment_at=_aware(row.last_payment_at),
        rotation_position=row.rotation_position,
        joined_at=_aware(row.joined_at),
    )


def payment_to_record(row: Payment) -> PaymentRecord:
    return PaymentRecord(
        id=row.id,
        tontine_id=row.tontine_id,
        participant_id=row.participant_id,
        amount=row.amount,
        period=row.period,
        submitted_at=_aware(row.submitted_at),
        proof_ref=row.proof_ref,
        status=PaymentStatus(row.status),
        validator_id=row.validator_id,
        validated_at=_aware(row.validated_at),
    )


# ─── Repositories ────────────────────────────────────────────────

class SqlTontineRepository:
    """Tontine persistence over a shared AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, tontine: TontineRecord) -> TontineRecord:
        row = Tontine(**_plain({
            "id": tontine.id,
            "initiator_id": tontine.initiator_id,
            "name": tontine.name,
            "description": tontine.description,
            "contribution_kind": tontine.contribution_kind,
            "contribution_amount": tontine.contribution_amount,
            "cadence": tontine.cadence,
            "capacity": tontine.capacity,
            "collection_day": tontine.collection_day,
            "start_date": tontine.start_date,
            "end_date": tontine.end_date,
            "collection_window_start": tontine.collection_window_start,
            "collection_window_end": tontine.collection_window_end,
            "rotation_order": list(tontine.rotation_order),
            "status": tontine.status,
            "invitation_code": tontine.invitation_code,
            "version": tontine.version,
            "created_at": tontine.created_at,
        }))
        self.session.add(row)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateKeyError("invitation_code")
        return tontine_to_record(row)

    async def _one(self, stmt) -> TontineRecord | None:
        result = await self.session.execute(
            stmt.execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return tontine_to_record(row) if row else None

    async def get(self, tontine_id: UUID) -> TontineRecord | None:
        return await self._one(select(Tontine).where(Tontine.id == tontine_id))

    async def get_by_code(self, code: str) -> TontineRecord | None:
        return await self._one(
            select(Tontine).where(Tontine.invitation_code == code),
        )

    async def update(
        self, tontine_id: UUID, expected_version: int, **fields: Any,
    ) -> bool:
        """Write fields only if nobody else wrote since expected_version."""
        result = await self.session.execute(
            update(Tontine)
            .where(Tontine.id == tontine_id)
            .where(Tontine.version == expected_version)
            .values(**_plain(fields), version=expected_version + 1)
            .execution_options(synchronize_session=False),
        )
        return result.rowcount == 1

    async def _many(self, stmt) -> list[TontineRecord]:
        result = await self.session.execute(
            stmt.order_by(Tontine.created_at.desc())
            .execution_options(populate_existing=True),
        )
        return [tontine_to_record(r) for r in result.scalars().all()]

    async def list_by_initiator(self, initiator_id: str) -> list[TontineRecord]:
        return await self._many(
            select(Tontine).where(Tontine.initiator_id == initiator_id),
        )

    async def list_by_ids(self, tontine_ids: list[UUID]) -> list[TontineRecord]:
        if not tontine_ids:
            return []
        return await self._many(select(Tontine).where(Tontine.id.in_(tontine_ids)))


class SqlParticipantRepository:
    """Roster persistence over a shared AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, participant: ParticipantRecord) -> ParticipantRecord:
        row = Participant(**_plain({
            "tontine_id": participant.tontine_id,
            "user_id": participant.user_id,
            "display_name": participant.display_name,
            "email": participant.email,
            "phone": participant.phone,
            "address": participant.address,
            "payment_status": participant.payment_status,
            "last_payment_at": participant.last_payment_at,
            "rotation_position": participant.rotation_position,
            "joined_at": participant.joined_at,
        }))
        self.session.add(row)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateKeyError("tontine_id, user_id")
        return participant_to_record(row)

    async def get(self, tontine_id: UUID, user_id: str) -> ParticipantRecord | None:
        result = await self.session.execute(
            select(Participant)
            .where(Participant.tontine_id == tontine_id)
            .where(Participant.user_id == user_id)
            .execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return participant_to_record(row) if row else None

    async def list_by_tontine(self, tontine_id: UUID) -> list[ParticipantRecord]:
        result = await self.session.execute(
            select(Participant)
            .where(Participant.tontine_id == tontine_id)
            .order_by(Participant.joined_at, Participant.user_id)
            .execution_options(populate_existing=True),
        )
        return [participant_to_record(r) for r in result.scalars().all()]

    async def count(self, tontine_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(Participant)
            .where(Participant.tontine_id == tontine_id),
        )
        return result.scalar_one()

    async def update(self, tontine_id: UUID, user_id: str, **fields: Any) -> None:
        await self.session.execute(
            update(Participant)
            .where(Participant.tontine_id == tontine_id)
            .where(Participant.user_id == user_id)
            .values(**_plain(fields))
            .execution_options(synchronize_session=False),
        )

    async def tontine_ids_for_user(self, user_id: str) -> list[UUID]:
        result = await self.session.execute(
            select(Participant.tontine_id).where(Participant.user_id == user_id),
        )
        return list(result.scalars().all())


class SqlPaymentRepository:
    """Append-only ledger persistence over a shared AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, payment: PaymentRecord) -> PaymentRecord:
        row = Payment(**_plain({
            "id": payment.id,
            "tontine_id": payment.tontine_id,
            "participant_id": payment.participant_id,
            "amount": payment.amount,
            "period": payment.period,
            "proof_ref": payment.proof_ref,
            "status": payment.status,
            "validator_id": payment.validator_id,
            "submitted_at": payment.submitted_at,
            "validated_at": payment.validated_at,
        }))
        self.session.add(row)
        await self.session.flush()
        return payment_to_record(row)

    async def get(self, payment_id: UUID) -> PaymentRecord | None:
        result = await self.session.execute(
            select(Payment)
            .where(Payment.id == payment_id)
            .execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return payment_to_record(row) if row else None

    async def resolve_if_pending(
        self,
        payment_id: UUID,
        status: PaymentStatus,
        validator_id: str,
        validated_at: datetime,
    ) -> bool:
        """Terminal transition guarded by status = 'pending' (optimistic guard)."""
        result = await self.session.execute(
            update(Payment)
            .where(Payment.id == payment_id)
            .where(Payment.status == PaymentStatus.PENDING.value)
            .values(
                status=status.value,
                validator_id=validator_id,
                validated_at=validated_at,
            )
            .execution_options(synchronize_session=False),
        )
        return result.rowcount == 1

    async def list(
        self,
        tontine_id: UUID,
        status: PaymentStatus | None = None,
        participant_id: str | None = None,
    ) -> list[PaymentRecord]:
        stmt = select(Payment).where(Payment.tontine_id == tontine_id)
        if status is not None:
            stmt = stmt.where(Payment.status == status.value)
        if participant_id is not None:
            stmt = stmt.where(Payment.participant_id == participant_id)
        result = await self.session.execute(
            stmt.order_by(Payment.submitted_at.desc(), Payment.id)
            .execution_options(populate_existing=True),
        )
        return [payment_to_record(r) for r in result.scalars().all()]


class SqlUnitOfWork:
    """Groups the repositories behind the request's transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.tontines = SqlTontineRepository(session)
        self.participants = SqlParticipantRepository(session)
        self.payments = SqlPaymentRepository(session)

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
