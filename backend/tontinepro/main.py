"""TontinePro API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TontineError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py: domain (TontineError),
      RequestValidationError (Pydantic), Exception (catch-all), never leaking internals
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tontinepro.api.error_handlers import register_error_handlers
from tontinepro.api.routes import (
    events,
    health,
    invitations,
    participants,
    payments,
    tontines,
)
from tontinepro.config import get_settings
from tontinepro.infrastructure.database import init_db
from tontinepro.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("TontinePro API started")
    yield
    logger.info("TontinePro API shutting down")
    await manager.dispose()


app = FastAPI(
    title="TontinePro API", version="1.0.0", lifespan=lifespan,
)

# CORS origins from settings
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(health.router)
app.include_router(tontines.router)
app.include_router(invitations.router)
app.include_router(participants.router)
app.include_router(payments.router)
app.include_router(events.router)

register_error_handlers(app)
