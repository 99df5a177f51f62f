"""Invitation Routes — resolve an invitation code and join through it.

Invariants:
    - Resolution is open to any authenticated user; it reveals no roster data
    - Join through a code answers 201 for a new member, 200 for an existing one
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from tontinepro.api.dependencies import get_principal, get_roster_service
from tontinepro.core.domain_types import Principal, TontineEventType
from tontinepro.infrastructure.event_bus import event_bus
from tontinepro.schemas.participant import JoinRequest, JoinResponse, ParticipantResponse
from tontinepro.schemas.tontine import InvitationResponse
from tontinepro.services.roster_service import RosterService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/invitations", tags=["invitations"])


@router.get("/{code}", response_model=InvitationResponse)
async def resolve_invitation(
    code: str,
    principal: Principal = Depends(get_principal),
    service: RosterService = Depends(get_roster_service),
):
    """Case-insensitive lookup of a tontine by invitation code."""
    return InvitationResponse.from_record(await service.resolve_code(code))


@router.post(
    "/{code}/join", response_model=JoinResponse, status_code=status.HTTP_201_CREATED,
)
async def join_by_code(
    code: str,
    body: JoinRequest,
    response: Response,
    principal: Principal = Depends(get_principal),
    service: RosterService = Depends(get_roster_service),
):
    tontine, participant, created = await service.join_by_code(
        code, principal, body.to_profile(),
    )
    if created:
        event_bus.publish(
            tontine.id, TontineEventType.PARTICIPANT_JOINED,
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
