"""API Dependencies — principal extraction, unit of work and service wiring.

Invariants:
    - Every tontine route resolves a Principal or fails with 401 (UnauthenticatedError)
    - One SqlUnitOfWork per request, bound to the request's AsyncSession
    - Services receive the process-wide lock registry (services/guards.py)

Design Decisions:
    - Identity arrives from the gateway as X-User-Id / X-User-Role headers: the API never
      verifies credentials itself
    - Factories as FastAPI dependencies: tests override get_db only
"""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from tontinepro.config import Settings, get_settings
from tontinepro.core.domain_types import Principal, Role, UserId
from tontinepro.core.errors import UnauthenticatedError
from tontinepro.infrastructure.database import get_db
from tontinepro.infrastructure.sql_repositories import SqlUnitOfWork
from tontinepro.services.ledger_service import LedgerService
from tontinepro.services.order_service import OrderService
from tontinepro.services.roster_service import RosterService
from tontinepro.services.tontine_service import TontineService


async def get_principal(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Principal:
    """Verified identity asserted by the upstream identity provider."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise UnauthenticatedError()
    try:
        role = Role((x_user_role or Role.PARTICIPANT.value).strip().lower())
    except ValueError:
        raise UnauthenticatedError(f"Unknown role claim '{x_user_role}'")
    return Principal(user_id=UserId(user_id), role=role)


def get_uow(db: AsyncSession = Depends(get_db)) -> SqlUnitOfWork:
    return SqlUnitOfWork(db)


def get_tontine_service(
    uow: SqlUnitOfWork = Depends(get_uow),
    settings: Settings = Depends(get_settings),
) -> TontineService:
    return TontineService(uow, settings)


def get_roster_service(uow: SqlUnitOfWork = Depends(get_uow)) -> RosterService:
    return RosterService(uow)


def get_order_service(uow: SqlUnitOfWork = Depends(get_uow)) -> OrderService:
    return OrderService(uow)


def get_ledger_service(
    uow: SqlUnitOfWork = Depends(get_uow),
    settings: Settings = Depends(get_settings),
) -> LedgerService:
    return LedgerService(uow, settings)
