"""Helpdesk intake routing — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from intake.adapters.persistence.database import engine
from intake.config import settings
from intake.infrastructure.api.routes_health import router as health_router
from intake.infrastructure.api.routes_routing import router as routing_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except Exception as e:
        logger.warning("Database not available on startup: %s", e)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Helpdesk Intake Routing",
        description="Crisis detection, priority scoring and counselor auto-assignment",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.include_router(health_router, prefix="/api")
    app.include_router(routing_router, prefix="/api")

    return app


app = create_app()
