"""Event Bus — in-process publish/subscribe for tontine change notifications.

Invariants:
    - Subscribers are scoped by tontine id; a publish reaches only that tontine's subscribers
    - publish() never blocks: a full subscriber queue drops the event for that subscriber
    - Unsubscribing is idempotent

Design Decisions:
    - asyncio.Queue per subscriber: the SSE route drains it at its own pace
    - Module-level singleton like db_manager: single-process uvicorn, subscribers are
      connection-bound so losing them on restart is harmless
    - The core never sees this module: routes publish after a successful commit
"""

import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timezone
from uuid import UUID

from tontinepro.core.domain_types import TontineEventType

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100


class TontineEventBus:
    """Fan-out of change events to per-tontine subscriber queues."""

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE):
        self._queue_size = queue_size
        self._subscribers: dict[UUID, set[asyncio.Queue]] = defaultdict(set)

    def subscribe(self, tontine_id: UUID) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers[tontine_id].add(queue)
        return queue

    def unsubscribe(self, tontine_id: UUID, queue: asyncio.Queue) -> None:
        queues = self._subscribers.get(tontine_id)
        if not queues:
            return
        queues.discard(queue)
        if not queues:
            self._subscribers.pop(tontine_id, None)

    def subscriber_count(self, tontine_id: UUID) -> int:
        return len(self._subscribers.get(tontine_id, ()))

    def publish(
        self, tontine_id: UUID, event_type: TontineEventType, data: dict,
    ) -> int:
        """Deliver to every subscriber of tontine_id. Returns deliveries made."""
        event = {
            "type": event_type.value,
            "data": {
                "tontine_id": str(tontine_id),
                "occurred_at": datetime.now(timezone.utc).isoformat(),
                **data,
            },
        }
        delivered = 0
        for queue in list(self._subscribers.get(tontine_id, ())):
            try:
                queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(
                    "Dropping event for slow subscriber",
                    extra={"tontine_id": str(tontine_id), "status": event_type.value},
                )
        return delivered


event_bus = TontineEventBus()
