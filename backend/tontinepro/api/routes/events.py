"""Tontine Event Stream — Server-Sent Events for a tontine's change notifications.

Invariants:
    - Only the initiator and roster members may subscribe (same rule as tontine details)
    - The subscriber queue is always removed when the client disconnects
    - The request's DB transaction is released before streaming starts

Design Decisions:
    - StreamingResponse + text/event-stream, same SSE framing as the rest of the API
    - Periodic comment lines keep idle proxies from closing the connection
"""

import asyncio
import json
import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from tontinepro.api.dependencies import get_principal, get_uow
from tontinepro.config import Settings, get_settings
from tontinepro.core.domain_types import Principal
from tontinepro.infrastructure.event_bus import event_bus
from tontinepro.infrastructure.sql_repositories import SqlUnitOfWork
from tontinepro.services.tontine_service import TontineService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tontines", tags=["events"])

# SSE headers prevent proxy/browser buffering of streamed events.
_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}
KEEPALIVE_SECONDS = 15.0


def sse_line(event: dict) -> str:
    """Format event as SSE data line."""
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


@router.get("/{tontine_id}/events")
async def stream_events(
    tontine_id: UUID,
    principal: Principal = Depends(get_principal),
    uow: SqlUnitOfWork = Depends(get_uow),
    settings: Settings = Depends(get_settings),
):
    """Stream tontine.*, participant.*, order.* and payment.* events."""
    await TontineService(uow, settings).get(tontine_id, principal)
    await uow.rollback()
    queue = event_bus.subscribe(tontine_id)

    async def event_generator():
        try:
            while True:
                try:
                    event = await asyncio.wait_for(queue.get(), KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield sse_line(event)
        except asyncio.CancelledError:
            logger.info(
                "Client disconnected from event stream",
                extra={"tontine_id": str(tontine_id), "actor_id": principal.user_id},
            )
        finally:
            event_bus.unsubscribe(tontine_id, queue)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
    )
