"""
tests.conftest

Shared fixtures: a file-backed SQLite database per test, sessions, and an HTTP client.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from explore_service.api.app import create_app
from explore_service.db.init_db import init_db
from explore_service.db.models import Decision
from explore_service.db.session import create_engine, create_sessionmaker
from explore_service.settings import Settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(env="test", database_url=f"sqlite+aiosqlite:///{tmp_path / 'explore.db'}")


@pytest_asyncio.fixture
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(settings)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(settings: Settings) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app(settings=settings)
    # ASGITransport does not drive the lifespan; run it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            yield c


async def seed(session: AsyncSession, *rows: Decision) -> None:
    session.add_all(rows)
    await session.commit()


def decision(
    recipient_id: str, actor_id: str, *, id: int | None = None, liked: bool = True
) -> Decision:
    row = Decision(recipient_id=recipient_id, actor_id=actor_id, liked=liked)
    if id is not None:
        row.id = id
    return row
