"""Tontine Service — creation, queries, detail edits and status transitions.

Invariants:
    - Every mutation is initiator-only and illegal once the tontine is completed
    - Status changes go through validate_transition (core/enforce_lifecycle.py)
    - Stored writes are version-guarded: a lost race raises ConflictError, never retries
    - Invitation code collisions regenerate up to invitation_code_max_attempts times

Design Decisions:
    - Service receives a UnitOfWork (Protocol), not an AsyncSession: in-memory fakes in tests
    - Returned records reflect the write (version + 1) without a second read
"""

import logging
import random
import uuid
from dataclasses import replace
from uuid import UUID

from tontinepro.config import Settings
from tontinepro.core.domain_types import Principal, TontineStatus
from tontinepro.core.enforce_lifecycle import (
    check_can_create,
    toggle_target,
    validate_initiator_mutation,
    validate_transition,
)
from tontinepro.core.errors import (
    ConflictError,
    DuplicateKeyError,
    ErrorContext,
    InvalidStateError,
)
from tontinepro.core.invitation_code import generate_code
from tontinepro.core.records import TontineDraft, TontineRecord
from tontinepro.core.repository_protocols import UnitOfWork
from tontinepro.core.roster import check_can_view
from tontinepro.services.guards import (
    TontineLocks,
    guarded_write,
    load_tontine,
    stale_write,
    tontine_locks,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "description", "contribution_amount"})


class TontineService:
    """Lifecycle state machine and tontine-level queries."""

    def __init__(
        self,
        uow: UnitOfWork,
        settings: Settings,
        locks: TontineLocks = tontine_locks,
        rng: random.Random | None = None,
    ):
        self.uow = uow
        self.settings = settings
        self.locks = locks
        self.rng = rng

    # ─── Creation ────────────────────────────────────────────────

    async def create(self, principal: Principal, draft: TontineDraft) -> TontineRecord:
        error = check_can_create(principal.role)
        if error:
            raise error

        for attempt in range(1, self.settings.invitation_code_max_attempts + 1):
            candidate = TontineRecord(
                id=uuid.uuid4(),
                initiator_id=principal.user_id,
                name=draft.name,
                description=draft.description,
                contribution_kind=draft.contribution_kind,
                contribution_amount=draft.contribution_amount,
                cadence=draft.cadence,
                capacity=draft.capacity,
                collection_day=draft.collection_day,
                start_date=draft.start_date,
                end_date=draft.end_date,
                collection_window_start=draft.collection_window_start,
                collection_window_end=draft.collection_window_end,
                invitation_code=generate_code(self.rng),
            )
            try:
                tontine = await self.uow.tontines.insert(candidate)
            except DuplicateKeyError:
                logger.warning(
                    f"Invitation code collision (attempt {attempt})",
                    extra={"actor_id": principal.user_id},
                )
                continue
            await self.uow.commit()
            logger.info(
                "tontine_created",
                extra={"tontine_id": str(tontine.id), "actor_id": principal.user_id},
            )
            return tontine

        raise ConflictError(
            "Could not allocate a unique invitation code; try again",
            ErrorContext(actor_id=principal.user_id),
        )

    # ─── Queries ─────────────────────────────────────────────────

    async def get(self, tontine_id: UUID, principal: Principal) -> TontineRecord:
        """Tontine details, visible to the initiator and roster members."""
        tontine = await load_tontine(self.uow, tontine_id)
        member = await self.uow.participants.get(tontine_id, principal.user_id)
        error = check_can_view(tontine, principal.user_id, member is not None)
        if error:
            raise error
        return tontine

    async def list_owned(self, principal: Principal) -> list[TontineRecord]:
        return await self.uow.tontines.list_by_initiator(principal.user_id)

    async def list_joined(self, principal: Principal) -> list[TontineRecord]:
        ids = await self.uow.participants.tontine_ids_for_user(principal.user_id)
        return await self.uow.tontines.list_by_ids(ids)

    # ─── Mutations ───────────────────────────────────────────────

    async def update_details(
        self, tontine_id: UUID, principal: Principal, **changes,
    ) -> TontineRecord:
        """Edit name / description / contribution_amount. None values are ignored."""
        fields = {
            k: v for k, v in changes.items() if k in EDITABLE_FIELDS and v is not None
        }
        async with guarded_write(self.uow, self.locks, tontine_id):
            tontine = await load_tontine(self.uow, tontine_id)
            error = validate_initiator_mutation(tontine, principal.user_id)
            if error:
                raise error
            if not fields:
                return tontine
            if not await self.uow.tontines.update(tontine_id, tontine.version, **fields):
                raise stale_write(tontine_id)
            await self.uow.commit()

        logger.info(
            "tontine_updated",
            extra={"tontine_id": str(tontine_id), "actor_id": principal.user_id},
        )
        return replace(tontine, **fields, version=tontine.version + 1)

    async def activate(self, tontine_id: UUID, principal: Principal) -> TontineRecord:
        return await self._transition(
            tontine_id, principal, TontineStatus.ACTIVE, require=TontineStatus.PENDING,
        )

    async def suspend(self, tontine_id: UUID, principal: Principal) -> TontineRecord:
        return await self._transition(tontine_id, principal, TontineStatus.SUSPENDED)

    async def resume(self, tontine_id: UUID, principal: Principal) -> TontineRecord:
        return await self._transition(
            tontine_id, principal, TontineStatus.ACTIVE, require=TontineStatus.SUSPENDED,
        )

    async def complete(self, tontine_id: UUID, principal: Principal) -> TontineRecord:
        return await self._transition(tontine_id, principal, TontineStatus.COMPLETED)

    async def toggle(self, tontine_id: UUID, principal: Principal) -> TontineRecord:
        """active ⇄ suspended."""
        return await self._transition(tontine_id, principal, None)

    async def _transition(
        self,
        tontine_id: UUID,
        principal: Principal,
        target: TontineStatus | None,
        require: TontineStatus | None = None,
    ) -> TontineRecord:
        async with guarded_write(self.uow, self.locks, tontine_id):
            tontine = await load_tontine(self.uow, tontine_id)
            if target is None:
                target = toggle_target(tontine)
            error = self._precheck(tontine, principal, target, require)
            if error is None:
                roster_size = await self.uow.participants.count(tontine_id)
                error = validate_transition(
                    tontine, principal.user_id, target, roster_size,
                    self.settings.min_participants_to_activate,
                )
            if error:
                raise error
            if not await self.uow.tontines.update(
                tontine_id, tontine.version, status=target,
            ):
                raise stale_write(tontine_id)
            await self.uow.commit()

        logger.info(
            "tontine_status_changed",
            extra={
                "tontine_id": str(tontine_id),
                "actor_id": principal.user_id,
                "status": target.value,
            },
        )
        return replace(tontine, status=target, version=tontine.version + 1)

    @staticmethod
    def _precheck(
        tontine: TontineRecord,
        principal: Principal,
        target: TontineStatus | None,
        require: TontineStatus | None,
    ):
        """Ownership before state: a stranger learns nothing about the status."""
        if tontine.initiator_id != principal.user_id:
            return validate_initiator_mutation(tontine, principal.user_id)
        if target is None or (require is not None and tontine.status != require):
            attempted = target.value if target else "toggled"
            return InvalidStateError(
                f"Cannot move tontine from '{tontine.status.value}' to '{attempted}'",
                tontine.status.value,
                ErrorContext(tontine_id=str(tontine.id), actor_id=principal.user_id),
            )
        return None
