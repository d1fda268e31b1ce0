"""Agent Market API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map MarketplaceError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Category seeding on startup is optional (seed_categories_on_startup); it needs the
      schema in place, so deployments that migrate after boot turn it off
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agent_market.api.error_handlers import register_error_handlers
from agent_market.api.routes import agents, categories, health, ledger, users
from agent_market.config import get_settings
from agent_market.infrastructure.database import init_db
from agent_market.infrastructure.observability import setup_logging
from agent_market.services.catalog import seed_categories

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
    if settings.seed_categories_on_startup:
        async with manager.session() as db:
            await seed_categories(db)
    logger.info("Agent Market API started")
    yield
    logger.info("Agent Market API shutting down")
    await manager.dispose()


app = FastAPI(
    title="Agent Market API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(users.router)
app.include_router(categories.router)
app.include_router(agents.router)
app.include_router(ledger.router)

register_error_handlers(app)
