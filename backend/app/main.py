"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import build_api_router
from app.config import AppSettings, get_settings
from app.core.logging import setup_logging
from app.core.telemetry import setup_telemetry
from app.db.init import init_database
from app.db.session import Database
from app.schemas import HealthResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI, db: Database):
    await init_database(db)
    yield
    await db.dispose()


def create_app(db: Database | None = None, settings: AppSettings | None = None) -> FastAPI:
    """Build the application around ``db`` (the configured database by default)."""

    settings = settings or get_settings()
    database_instance = db or Database(settings.database_url)

    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lambda app: _lifespan(app, database_instance),
    )
    setup_telemetry(app, settings, engine=database_instance.engine)
    logger.info("Invest Ledger configuration: %s", settings.dict_for_logging())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(build_api_router(database_instance))

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        """Return service readiness metadata."""

        return HealthResponse(
            status="ok",
            service=settings.app_name,
            timestamp=datetime.now().isoformat(),
            timezone=settings.timezone,
        )

    return app


__all__ = ["create_app"]
