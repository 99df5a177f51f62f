"""Tontine Routes — creation, listing, details and lifecycle transitions.

Invariants:
    - Routes never contain business rules: TontineService decides, routes translate
    - A change event is published only after the service committed
    - Every response carries the shareable invitation link

Design Decisions:
    - Lifecycle verbs as POST sub-resources (/activate, /suspend, ...) rather than a
      PATCH on status: each verb has its own preconditions
"""

import logging
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from tontinepro.api.dependencies import get_principal, get_tontine_service
from tontinepro.config import Settings, get_settings
from tontinepro.core.domain_types import Principal, TontineEventType
from tontinepro.core.records import TontineRecord
from tontinepro.infrastructure.event_bus import event_bus
from tontinepro.schemas.tontine import TontineCreate, TontineResponse, TontineUpdate
from tontinepro.services.tontine_service import TontineService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tontines", tags=["tontines"])


def _respond(tontine: TontineRecord, settings: Settings) -> TontineResponse:
    return TontineResponse.from_record(tontine, settings.invitation_base_url)


@router.post(
    "", response_model=TontineResponse, status_code=status.HTTP_201_CREATED,
)
async def create_tontine(
    body: TontineCreate,
    principal: Principal = Depends(get_principal),
    service: TontineService = Depends(get_tontine_service),
    settings: Settings = Depends(get_settings),
):
    """Create a tontine in `pending` status with a fresh invitation code."""
    tontine = await service.create(principal, body.to_draft())
    return _respond(tontine, settings)


@router.get("", response_model=list[TontineResponse])
async def list_tontines(
    scope: Literal["owned", "joined"] = Query("owned"),
    principal: Principal = Depends(get_principal),
    service: TontineService = Depends(get_tontine_service),
    settings: Settings = Depends(get_settings),
):
    """Tontines the caller initiated (owned) or belongs to (joined), newest first."""
    if scope == "joined":
        tontines = await service.list_joined(principal)
    else:
        tontines = await service.list_owned(principal)
    return [_respond(t, settings) for t in tontines]


@router.get("/{tontine_id}", response_model=TontineResponse)
async def get_tontine(
    tontine_id: UUID,
    principal: Principal = Depends(get_principal),
    service: TontineService = Depends(get_tontine_service),
    settings: Settings = Depends(get_settings),
):
    return _respond(await service.get(tontine_id, principal), settings)


@router.patch("/{tontine_id}", response_model=TontineResponse)
async def update_tontine(
    tontine_id: UUID,
    body: TontineUpdate,
    principal: Principal = Depends(get_principal),
    service: TontineService = Depends(get_tontine_service),
    settings: Settings = Depends(get_settings),
):
    """Edit name, description or contribution amount (initiator only)."""
    changes = body.model_dump(exclude_unset=True)
    tontine = await service.update_details(tontine_id, principal, **changes)
    changed = sorted(k for k, v in changes.items() if v is not None)
    if changed:
        event_bus.publish(
            tontine_id, TontineEventType.TONTINE_UPDATED, {"fields": changed},
        )
    return _respond(tontine, settings)


# ─── Lifecycle ───────────────────────────────────────────────────

def _after_transition(
    tontine: TontineRecord, settings: Settings,
) -> TontineResponse:
    event_bus.publish(
        tontine.id, TontineEventType.STATUS_CHANGED, {"status": tontine.status.value},
    )
    return _respond(tontine, settings)


@router.post("/{tontine_id}/activate", response_model=TontineResponse)
async def activate_tontine(
    tontine_id: UUID,
    principal: Principal = Depends(get_principal),
    service: TontineService = Depends(get_tontine_service),
    settings: Settings = Depends(get_settings),
):
    return _after_transition(
        await service.activate(tontine_id, principal), settings,
    )


@router.post("/{tontine_id}/suspend", response_model=TontineResponse)
async def suspend_tontine(
    tontine_id: UUID,
    principal: Principal = Depends(get_principal),
    service: TontineService = Depends(get_tontine_service),
    settings: Settings = Depends(get_settings),
):
    return _after_transition(
        await service.suspend(tontine_id, principal), settings,
    )


@router.post("/{tontine_id}/resume", response_model=TontineResponse)
async def resume_tontine(
    tontine_id: UUID,
    principal: Principal = Depends(get_principal),
    service: TontineService = Depends(get_tontine_service),
    settings: Settings = Depends(get_settings),
):
    return _after_transition(
        await service.resume(tontine_id, principal), settings,
    )


@router.post("/{tontine_id}/toggle", response_model=TontineResponse)
async def toggle_tontine(
    tontine_id: UUID,
    principal: Principal = Depends(get_principal),
    service: TontineService = Depends(get_tontine_service),
    settings: Settings = Depends(get_settings),
):
    """Flip active ⇄ suspended."""
    return _after_transition(
        await service.toggle(tontine_id, principal), settings,
    )


@router.post("/{tontine_id}/complete", response_model=TontineResponse)
async def complete_tontine(
    tontine_id: UUID,
    principal: Principal = Depends(get_principal),
    service: TontineService = Depends(get_tontine_service),
    settings: Settings = Depends(get_settings),
):
    """Close the tontine for good. Terminal."""
    return _after_transition(
        await service.complete(tontine_id, principal), settings,
    )
