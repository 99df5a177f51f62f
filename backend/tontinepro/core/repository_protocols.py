"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Every mutation is a single write keyed by id; conditional writes return bool
    - insert() raises DuplicateKeyError when a unique key is already taken

Design Decisions:
    - Protocol over ABC: structural subtyping, in-memory fakes need no inheritance
    - Async in Protocol: implementations do IO; the core rules that USE these records
      are pure and synchronous — services orchestrate the async calls around them
    - UnitOfWork groups the three repositories behind one commit/rollback boundary,
      which is what makes join (insert participant + append order) atomic
"""

from typing import Any, Protocol
from uuid import UUID

from tontinepro.core.domain_types import PaymentStatus
from tontinepro.core.records import ParticipantRecord, PaymentRecord, TontineRecord


class TontineRepository(Protocol):
    """Contract for tontine persistence — implemented by shell."""
    async def insert(self, tontine: TontineRecord) -> TontineRecord: ...
    async def get(self, tontine_id: UUID) -> TontineRecord | None: ...
    async def get_by_code(self, code: str) -> TontineRecord | None: ...
    async def update(
        self, tontine_id: UUID, expected_version: int, **fields: Any,
    ) -> bool: ...
    async def list_by_initiator(self, initiator_id: str) -> list[TontineRecord]: ...
    async def list_by_ids(self, tontine_ids: list[UUID]) -> list[TontineRecord]: ...


class ParticipantRepository(Protocol):
    """Contract for roster persistence — implemented by shell."""
    async def insert(self, participant: ParticipantRecord) -> ParticipantRecord: ...
    async def get(self, tontine_id: UUID, user_id: str) -> ParticipantRecord | None: ...
    async def list_by_tontine(self, tontine_id: UUID) -> list[ParticipantRecord]: ...
    async def count(self, tontine_id: UUID) -> int: ...
    async def update(self, tontine_id: UUID, user_id: str, **fields: Any) -> None: ...
    async def tontine_ids_for_user(self, user_id: str) -> list[UUID]: ...


class PaymentRepository(Protocol):
    """Contract for ledger persistence — implemented by shell. Append-only."""
    async def insert(self, payment: PaymentRecord) -> PaymentRecord: ...
    async def get(self, payment_id: UUID) -> PaymentRecord | None: ...
    async def resolve_if_pending(
        self,
        payment_id: UUID,
        status: PaymentStatus,
        validator_id: str,
        validated_at: Any,
    ) -> bool: ...
    async def list(
        self,
        tontine_id: UUID,
        status: PaymentStatus | None = None,
        participant_id: str | None = None,
    ) -> list[PaymentRecord]: ...


class UnitOfWork(Protocol):
    """One logical read-modify-write: repositories sharing a transaction."""
    tontines: TontineRepository
    participants: ParticipantRepository
    payments: PaymentRepository

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
