"""
explore_service.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the explore service.
- Encapsulate app.state access patterns (settings/sessionmaker).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from explore_service.services.explore import ExploreService
from explore_service.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The app factory stores the settings it was built with.
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # Created in the app lifespan (`explore_service.api.app.create_app`).
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Writes are committed by the decision ledger.
    async with session_factory() as session:
        yield session


def explore_service_dep(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> ExploreService:
    return ExploreService(session=session, settings=settings)
