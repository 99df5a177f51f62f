"""Roster Service — invitation-code resolution and the join flow.

Invariants:
    - join is idempotent per (tontine, user): an existing member gets their entry back
    - A new member is inserted AND appended to the rotation order in one commit
    - Roster size never exceeds a fixed capacity (checked under the tontine lock)
    - Positions reported to callers are derived from rotation_order, never the stored cache

Design Decisions:
    - Unique (tontine_id, user_id) is the last line of defense: a DuplicateKeyError from
      a concurrent process is reported as the idempotent result, not an error
    - join returns (participant, created) so the HTTP layer can pick 201 vs 200
"""

import logging
from dataclasses import replace
from uuid import UUID

from tontinepro.core.collection_order import append_to_order, position_of
from tontinepro.core.domain_types import Principal
from tontinepro.core.errors import DuplicateKeyError, ResourceNotFoundError
from tontinepro.core.invitation_code import normalize_code
from tontinepro.core.records import ParticipantProfile, ParticipantRecord, TontineRecord
from tontinepro.core.repository_protocols import UnitOfWork
from tontinepro.core.roster import (
    check_can_view,
    new_participant,
    validate_join,
    with_derived_positions,
)
from tontinepro.services.guards import (
    TontineLocks,
    guarded_write,
    load_tontine,
    stale_write,
    tontine_locks,
)

logger = logging.getLogger(__name__)


class RosterService:
    """Join flow and roster reads."""

    def __init__(
        self,
        uow: UnitOfWork,
        locks: TontineLocks = tontine_locks,
    ):
        self.uow = uow
        self.locks = locks

    async def resolve_code(self, raw_code: str) -> TontineRecord:
        """Case-insensitive lookup. Malformed codes are simply not found."""
        code = normalize_code(raw_code)
        tontine = await self.uow.tontines.get_by_code(code) if code else None
        if tontine is None:
            raise ResourceNotFoundError("Invitation", raw_code.strip())
        return tontine

    async def join(
        self, tontine_id: UUID, principal: Principal, profile: ParticipantProfile,
    ) -> tuple[ParticipantRecord, bool]:
        user_id = principal.user_id
        async with guarded_write(self.uow, self.locks, tontine_id):
            tontine = await load_tontine(self.uow, tontine_id)
            existing = await self.uow.participants.get(tontine_id, user_id)
            if existing is not None:
                return self._positioned(existing, tontine.rotation_order), False

            roster_size = await self.uow.participants.count(tontine_id)
            error = validate_join(tontine, roster_size)
            if error:
                raise error

            try:
                participant = await self.uow.participants.insert(
                    new_participant(tontine, user_id, profile, roster_size),
                )
            except DuplicateKeyError:
                existing = await self.uow.participants.get(tontine_id, user_id)
                if existing is None:
                    raise
                logger.info(
                    "Concurrent join resolved to existing membership",
                    extra={"tontine_id": str(tontine_id), "actor_id": user_id},
                )
                return self._positioned(existing, tontine.rotation_order), False

            new_order = append_to_order(tontine.rotation_order, user_id)
            if not await self.uow.tontines.update(
                tontine_id, tontine.version, rotation_order=new_order,
            ):
                raise stale_write(tontine_id)
            await self.uow.commit()

        logger.info(
            "participant_joined",
            extra={"tontine_id": str(tontine_id), "actor_id": user_id},
        )
        return self._positioned(participant, new_order), True

    async def join_by_code(
        self, raw_code: str, principal: Principal, profile: ParticipantProfile,
    ) -> tuple[TontineRecord, ParticipantRecord, bool]:
        tontine = await self.resolve_code(raw_code)
        participant, created = await self.join(tontine.id, principal, profile)
        return tontine, participant, created

    async def list_roster(
        self, tontine_id: UUID, principal: Principal,
    ) -> list[ParticipantRecord]:
        """Roster sorted by rotation position."""
        tontine = await load_tontine(self.uow, tontine_id)
        participants = await self.uow.participants.list_by_tontine(tontine_id)
        is_member = any(p.user_id == principal.user_id for p in participants)
        error = check_can_view(tontine, principal.user_id, is_member)
        if error:
            raise error
        return with_derived_positions(participants, tontine.rotation_order)

    @staticmethod
    def _positioned(
        participant: ParticipantRecord, order: list[str],
    ) -> ParticipantRecord:
        return replace(
            participant, rotation_position=position_of(order, participant.user_id),
        )
