"""Service test fixtures — in-memory unit of work, services, async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh InMemoryUnitOfWork and a fresh TontineLocks registry
    - Every route test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - db_manager patched so the readiness check sees the test engine

Design Decisions:
    - Services tested against fakes (fast, no IO); routes tested end to end on SQLite
      (PostgreSQL-specific features not exercised here)
    - StaticPool: every session shares the single in-memory SQLite connection
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from tontinepro.db.base import Base
from tontinepro.infrastructure.database import get_db, DatabaseSessionManager
import tontinepro.infrastructure.database as db_module
import tontinepro.models  # noqa: F401
from tontinepro.main import app
from tontinepro.services.guards import TontineLocks
from tontinepro.services.ledger_service import LedgerService
from tontinepro.services.order_service import OrderService
from tontinepro.services.roster_service import RosterService
from tontinepro.services.tontine_service import TontineService

from tests.fakes import InMemoryUnitOfWork


# ─── In-memory services ──────────────────────────────────────────

@pytest.fixture
def uow():
    return InMemoryUnitOfWork()


@pytest.fixture
def locks():
    return TontineLocks()


@pytest.fixture
def tontine_service(uow, settings, locks):
    return TontineService(uow, settings, locks)


@pytest.fixture
def roster_service(uow, locks):
    return RosterService(uow, locks)


@pytest.fixture
def order_service(uow, locks):
    return OrderService(uow, locks)


@pytest.fixture
def ledger_service(uow, settings, locks):
    return LedgerService(uow, settings, locks)


# ─── SQLite + HTTP client ────────────────────────────────────────

@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory

    async def override_get_db():
        async with fake_manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
