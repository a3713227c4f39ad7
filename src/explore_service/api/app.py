"""
explore_service.api.app

FastAPI app factory for the Explore service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Own the DB engine/session factory for the lifetime of the app.
- Bring the schema up to date before the first request.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from explore_service import __version__
from explore_service.api.routers.explore import router as explore_router
from explore_service.api.routers.health import router as health_router
from explore_service.db.init_db import init_db
from explore_service.db.migrate import upgrade_to_head
from explore_service.db.session import create_engine, create_sessionmaker
from explore_service.observability.logging import configure_logging, get_logger
from explore_service.observability.middleware import RequestContextMiddleware
from explore_service.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(
        service_name=settings.service_name, level=settings.log_level, fmt=settings.log_format
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        # One engine per process; routers obtain sessions via `api.deps.db_session`.
        engine = create_engine(settings)
        app.state.settings = settings
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        try:
            if settings.env in ("dev", "test"):
                await init_db(engine)
            else:
                # Schema is owned by Alembic revisions; brought to head before serving.
                await upgrade_to_head(settings.database_url)
                log.info("migrations_applied")
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Explore Service",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(explore_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; request handling lives in routers and services.
