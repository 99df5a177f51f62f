"""In-memory repository fakes — structural implementations of core/repository_protocols.py.

Invariants:
    - Reads return deep copies: callers can never mutate stored records
    - rollback() restores the state of the last commit (or creation)
    - Unique keys enforced like the SQL store: invitation_code, (tontine_id, user_id)
    - Every call yields to the event loop once so asyncio.gather actually interleaves

Design Decisions:
    - One InMemoryUnitOfWork owns all three tables: mirrors a single DB transaction
"""

import asyncio
import copy
from typing import Any
from uuid import UUID

from tontinepro.core.domain_types import PaymentStatus
from tontinepro.core.errors import DuplicateKeyError
from tontinepro.core.records import ParticipantRecord, PaymentRecord, TontineRecord


class _Tables:
    def __init__(self) -> None:
        self.tontines: dict[UUID, TontineRecord] = {}
        self.participants: dict[tuple[UUID, str], ParticipantRecord] = {}
        self.payments: dict[UUID, PaymentRecord] = {}


class InMemoryTontineRepository:
    def __init__(self, uow: "InMemoryUnitOfWork"):
        self._uow = uow

    @property
    def _rows(self) -> dict[UUID, TontineRecord]:
        return self._uow.tables.tontines

    async def insert(self, tontine: TontineRecord) -> TontineRecord:
        await asyncio.sleep(0)
        if any(t.invitation_code == tontine.invitation_code for t in self._rows.values()):
            await self._uow.rollback()
            raise DuplicateKeyError("invitation_code")
        self._rows[tontine.id] = copy.deepcopy(tontine)
        return copy.deepcopy(tontine)

    async def get(self, tontine_id: UUID) -> TontineRecord | None:
        await asyncio.sleep(0)
        return copy.deepcopy(self._rows.get(tontine_id))

    async def get_by_code(self, code: str) -> TontineRecord | None:
        await asyncio.sleep(0)
        for tontine in self._rows.values():
            if tontine.invitation_code == code:
                return copy.deepcopy(tontine)
        return None

    async def update(self, tontine_id: UUID, expected_version: int, **fields: Any) -> bool:
        await asyncio.sleep(0)
        row = self._rows.get(tontine_id)
        if row is None or row.version != expected_version:
            return False
        for name, value in fields.items():
            setattr(row, name, copy.deepcopy(value))
        row.version = expected_version + 1
        return True

    def _sorted(self, rows) -> list[TontineRecord]:
        return [
            copy.deepcopy(t)
            for t in sorted(rows, key=lambda t: t.created_at, reverse=True)
        ]

    async def list_by_initiator(self, initiator_id: str) -> list[TontineRecord]:
        await asyncio.sleep(0)
        return self._sorted(t for t in self._rows.values() if t.initiator_id == initiator_id)

    async def list_by_ids(self, tontine_ids: list[UUID]) -> list[TontineRecord]:
        await asyncio.sleep(0)
        wanted = set(tontine_ids)
        return self._sorted(t for t in self._rows.values() if t.id in wanted)


class InMemoryParticipantRepository:
    def __init__(self, uow: "InMemoryUnitOfWork"):
        self._uow = uow

    @property
    def _rows(self) -> dict[tuple[UUID, str], ParticipantRecord]:
        return self._uow.tables.participants

    async def insert(self, participant: ParticipantRecord) -> ParticipantRecord:
        await asyncio.sleep(0)
        key = (participant.tontine_id, participant.user_id)
        if key in self._rows:
            await self._uow.rollback()
            raise DuplicateKeyError("tontine_id, user_id")
        self._rows[key] = copy.deepcopy(participant)
        return copy.deepcopy(participant)

    async def get(self, tontine_id: UUID, user_id: str) -> ParticipantRecord | None:
        await asyncio.sleep(0)
        return copy.deepcopy(self._rows.get((tontine_id, user_id)))

    async def list_by_tontine(self, tontine_id: UUID) -> list[ParticipantRecord]:
        await asyncio.sleep(0)
        rows = [p for (tid, _), p in self._rows.items() if tid == tontine_id]
        return [copy.deepcopy(p) for p in sorted(rows, key=lambda p: (p.joined_at, p.user_id))]

    async def count(self, tontine_id: UUID) -> int:
        await asyncio.sleep(0)
        return sum(1 for tid, _ in self._rows if tid == tontine_id)

    async def update(self, tontine_id: UUID, user_id: str, **fields: Any) -> None:
        await asyncio.sleep(0)
        row = self._rows.get((tontine_id, user_id))
        if row is None:
            return
        for name, value in fields.items():
            setattr(row, name, value)

    async def tontine_ids_for_user(self, user_id: str) -> list[UUID]:
        await asyncio.sleep(0)
        return [tid for tid, uid in self._rows if uid == user_id]


class InMemoryPaymentRepository:
    def __init__(self, uow: "InMemoryUnitOfWork"):
        self._uow = uow

    @property
    def _rows(self) -> dict[UUID, PaymentRecord]:
        return self._uow.tables.payments

    async def insert(self, payment: PaymentRecord) -> PaymentRecord:
        await asyncio.sleep(0)
        self._rows[payment.id] = copy.deepcopy(payment)
        return copy.deepcopy(payment)

    async def get(self, payment_id: UUID) -> PaymentRecord | None:
        await asyncio.sleep(0)
        return copy.deepcopy(self._rows.get(payment_id))

    async def resolve_if_pending(
        self, payment_id: UUID, status: PaymentStatus, validator_id: str, validated_at,
    ) -> bool:
        await asyncio.sleep(0)
        row = self._rows.get(payment_id)
        if row is None or row.status != PaymentStatus.PENDING:
            return False
        row.status = status
        row.validator_id = validator_id
        row.validated_at = validated_at
        return True

    async def list(
        self,
        tontine_id: UUID,
        status: PaymentStatus | None = None,
        participant_id: str | None = None,
    ) -> list[PaymentRecord]:
        await asyncio.sleep(0)
        rows = [
            p for p in self._rows.values()
            if p.tontine_id == tontine_id
            and (status is None or p.status == status)
            and (participant_id is None or p.participant_id == participant_id)
        ]
        rows.sort(key=lambda p: str(p.id))
        rows.sort(key=lambda p: p.submitted_at, reverse=True)
        return [copy.deepcopy(p) for p in rows]


class InMemoryUnitOfWork:
    """Three tables behind one commit/rollback boundary."""

    def __init__(self) -> None:
        self.tables = _Tables()
        self._committed = copy.deepcopy(self.tables)
        self.commits = 0
        self.rollbacks = 0
        self.tontines = InMemoryTontineRepository(self)
        self.participants = InMemoryParticipantRepository(self)
        self.payments = InMemoryPaymentRepository(self)

    async def commit(self) -> None:
        self._committed = copy.deepcopy(self.tables)
        self.commits += 1

    async def rollback(self) -> None:
        self.tables = copy.deepcopy(self._committed)
        self.rollbacks += 1


class ScriptedRandom:
    """random.Random stand-in whose choice() replays the characters of given codes."""

    def __init__(self, *codes: str):
        self._chars = iter("".join(codes))

    def choice(self, alphabet: str) -> str:
        return next(self._chars)
