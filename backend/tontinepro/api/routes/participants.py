"""Roster & Order Routes — direct join, roster listing, rotation order and schedule.

Invariants:
    - Join answers 201 for a new member, 200 when the user already belonged
    - Roster positions in responses are derived from the rotation order
    - PUT /order is a whole-array replacement; partial moves do not exist
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from tontinepro.api.dependencies import (
    get_order_service,
    get_principal,
    get_roster_service,
)
from tontinepro.core.domain_types import Principal, TontineEventType
from tontinepro.infrastructure.event_bus import event_bus
from tontinepro.schemas.participant import (
    JoinRequest,
    JoinResponse,
    OrderEntry,
    ParticipantResponse,
    ReorderRequest,
    ScheduleEntry,
)
from tontinepro.services.order_service import OrderService
from tontinepro.services.roster_service import RosterService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tontines", tags=["participants"])


@router.post(
    "/{tontine_id}/participants",
    response_model=JoinResponse,
    status_code=status.HTTP_201_CREATED,
)
async def join_tontine(
    tontine_id: UUID,
    body: JoinRequest,
    response: Response,
    principal: Principal = Depends(get_principal),
    service: RosterService = Depends(get_roster_service),
):
    participant, created = await service.join(tontine_id, principal, body.to_profile())
    if created:
        event_bus.publish(
            tontine_id, TontineEventType.PARTICIPANT_JOINED,
            {
                "user_id": participant.user_id,
                "rotation_position": participant.rotation_position,
            },
        )
    else:
        response.status_code = status.HTTP_200_OK
    return JoinResponse(
        created=created, participant=ParticipantResponse.from_record(participant),
    )


@router.get(
    "/{tontine_id}/participants", response_model=list[ParticipantResponse],
)
async def list_participants(
    tontine_id: UUID,
    principal: Principal = Depends(get_principal),
    service: RosterService = Depends(get_roster_service),
):
    """Roster sorted by rotation position."""
    roster = await service.list_roster(tontine_id, principal)
    return [ParticipantResponse.from_record(p) for p in roster]


# ─── Rotation order ──────────────────────────────────────────────

@router.get("/{tontine_id}/order", response_model=list[OrderEntry])
async def get_order(
    tontine_id: UUID,
    principal: Principal = Depends(get_principal),
    service: OrderService = Depends(get_order_service),
):
    return await service.get_order(tontine_id, principal)


@router.put("/{tontine_id}/order", response_model=list[OrderEntry])
async def reorder(
    tontine_id: UUID,
    body: ReorderRequest,
    principal: Principal = Depends(get_principal),
    service: OrderService = Depends(get_order_service),
):
    """Replace the rotation order with a permutation of itself (initiator only)."""
    tontine = await service.reorder(tontine_id, principal, body.order)
    event_bus.publish(
        tontine_id, TontineEventType.ORDER_UPDATED, {"order": tontine.rotation_order},
    )
    return await service.get_order(tontine_id, principal)


@router.get("/{tontine_id}/schedule", response_model=list[ScheduleEntry])
async def get_schedule(
    tontine_id: UUID,
    principal: Principal = Depends(get_principal),
    service: OrderService = Depends(get_order_service),
):
    """Collection date and beneficiary for each slot of one rotation."""
    slots = await service.schedule(tontine_id, principal)
    return [ScheduleEntry.from_slot(s) for s in slots]
