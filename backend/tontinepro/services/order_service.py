"""Order Service — rotation order reads, whole-array reorder and the collection schedule.

Invariants:
    - reorder accepts only a permutation of the current order; otherwise nothing is written
    - Reorder is initiator-only and illegal once the tontine is completed
    - Positions are array indexes; the stored participant cache is never consulted

Design Decisions:
    - Last writer wins between sequential reorders; the version guard only catches
      writes that interleave with our own read-modify-write
"""

import logging
from dataclasses import replace
from uuid import UUID

from tontinepro.core.collection_order import check_reorder, position_index
from tontinepro.core.collection_schedule import CollectionSlot, build_schedule
from tontinepro.core.domain_types import Principal
from tontinepro.core.enforce_lifecycle import validate_initiator_mutation
from tontinepro.core.errors import ErrorContext
from tontinepro.core.records import TontineRecord
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


class OrderService:
    """Rotation order management."""

    def __init__(self, uow: UnitOfWork, locks: TontineLocks = tontine_locks):
        self.uow = uow
        self.locks = locks

    async def _visible_tontine(
        self, tontine_id: UUID, principal: Principal,
    ) -> TontineRecord:
        tontine = await load_tontine(self.uow, tontine_id)
        member = await self.uow.participants.get(tontine_id, principal.user_id)
        error = check_can_view(tontine, principal.user_id, member is not None)
        if error:
            raise error
        return tontine

    async def get_order(self, tontine_id: UUID, principal: Principal) -> list[dict]:
        """Order entries with display names, position ascending."""
        tontine = await self._visible_tontine(tontine_id, principal)
        names = {
            p.user_id: p.display_name
            for p in await self.uow.participants.list_by_tontine(tontine_id)
        }
        return [
            {"position": position, "user_id": user_id, "display_name": names.get(user_id)}
            for user_id, position in position_index(tontine.rotation_order).items()
        ]

    async def reorder(
        self, tontine_id: UUID, principal: Principal, new_order: list[str],
    ) -> TontineRecord:
        async with guarded_write(self.uow, self.locks, tontine_id):
            tontine = await load_tontine(self.uow, tontine_id)
            error = validate_initiator_mutation(
                tontine, principal.user_id,
            ) or check_reorder(
                tontine.rotation_order,
                new_order,
                ErrorContext(tontine_id=str(tontine_id), actor_id=principal.user_id),
            )
            if error:
                raise error
            if not await self.uow.tontines.update(
                tontine_id, tontine.version, rotation_order=list(new_order),
            ):
                raise stale_write(tontine_id)
            await self.uow.commit()

        logger.info(
            "order_updated",
            extra={"tontine_id": str(tontine_id), "actor_id": principal.user_id},
        )
        return replace(
            tontine, rotation_order=list(new_order), version=tontine.version + 1,
        )

    async def schedule(
        self, tontine_id: UUID, principal: Principal,
    ) -> list[CollectionSlot]:
        tontine = await self._visible_tontine(tontine_id, principal)
        return build_schedule(tontine)
