"""Service Guards — per-tontine serialization and shared loaders for the service layer.

Invariants:
    - At most one mutating operation per tontine runs at a time in this process
    - guarded_write rolls the unit of work back on ANY exception, then re-raises
    - load_* raise ResourceNotFoundError; they never return None

Design Decisions:
    - asyncio.Lock registry keyed by tontine id: join, reorder, validate and status
      transitions are read-modify-write on the same aggregate; the store's guards
      (unique key, version, pending status) cover multi-process deployments
    - Module-level tontine_locks: single-process uvicorn; services accept an
      injected registry so tests get a fresh one per event loop
"""

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID

from tontinepro.core.errors import ConflictError, ErrorContext, ResourceNotFoundError
from tontinepro.core.records import PaymentRecord, TontineRecord
from tontinepro.core.repository_protocols import UnitOfWork


class TontineLocks:
    """Lazily created asyncio.Lock per tontine id.

    Entries are weak: a lock lives only while a holder or waiter references it,
    so the registry never outgrows the set of tontines being written right now.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[UUID, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def for_tontine(self, tontine_id: UUID) -> asyncio.Lock:
        lock = self._locks.get(tontine_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[tontine_id] = lock
        return lock


tontine_locks = TontineLocks()


@asynccontextmanager
async def guarded_write(
    uow: UnitOfWork, locks: TontineLocks, tontine_id: UUID,
) -> AsyncIterator[None]:
    """Serialize on the tontine and undo partial writes if the block fails."""
    lock = locks.for_tontine(tontine_id)
    async with lock:
        try:
            yield
        except BaseException:
            await uow.rollback()
            raise


def stale_write(tontine_id: UUID) -> ConflictError:
    """Version guard lost: someone else wrote the tontine since we read it."""
    return ConflictError(
        "Tontine was modified concurrently; reload and retry",
        ErrorContext(tontine_id=str(tontine_id)),
    )


async def load_tontine(uow: UnitOfWork, tontine_id: UUID) -> TontineRecord:
    tontine = await uow.tontines.get(tontine_id)
    if tontine is None:
        raise ResourceNotFoundError("Tontine", str(tontine_id))
    return tontine


async def load_payment(uow: UnitOfWork, payment_id: UUID) -> PaymentRecord:
    payment = await uow.payments.get(payment_id)
    if payment is None:
        raise ResourceNotFoundError("Payment", str(payment_id))
    return payment
