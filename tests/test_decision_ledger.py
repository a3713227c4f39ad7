"""
tests.test_decision_ledger

Decision ledger behaviour against a real (SQLite) database.
"""

from __future__ import annotations

import pytest
from conftest import decision, seed
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from explore_service.db.models import Decision
from explore_service.db.repositories.decisions import DecisionRepo
from explore_service.errors import StorageError


async def _seed_user_1(session: AsyncSession) -> None:
    await seed(
        session,
        decision("user-1", "user-2", id=10),
        decision("user-1", "user-3", id=11),
        decision("user-1", "user-4", id=12),
        decision("user-1", "user-5", id=13, liked=False),
    )


@pytest.mark.asyncio
async def test_count_and_cursor_pages(session: AsyncSession) -> None:
    await _seed_user_1(session)
    repo = DecisionRepo(session)

    assert await repo.get_liked_decisions_count("user-1", True) == 3
    assert await repo.get_liked_decisions_count("user-1", False) == 1
    assert await repo.get_liked_decisions_count("nobody", True) == 0

    first = await repo.get_liked_decisions("user-1", True, limit=2)
    assert [liker.id for liker in first] == [12, 11]
    assert [liker.actor_id for liker in first] == ["user-4", "user-3"]

    second = await repo.get_liked_decisions("user-1", True, cursor=first[-1].id, limit=2)
    assert [liker.id for liker in second] == [10]

    declined = await repo.get_liked_decisions("user-1", False)
    assert [liker.actor_id for liker in declined] == ["user-5"]


@pytest.mark.asyncio
async def test_zero_limit_and_out_of_range_cursor(session: AsyncSession) -> None:
    await _seed_user_1(session)
    repo = DecisionRepo(session)

    assert await repo.get_liked_decisions("user-1", True, limit=0) == []
    everything = await repo.get_liked_decisions("user-1", True, cursor=2**64 - 1)
    assert [liker.id for liker in everything] == [12, 11, 10]


@pytest.mark.asyncio
async def test_put_decision_is_an_in_place_upsert(session: AsyncSession) -> None:
    repo = DecisionRepo(session)

    await repo.put_decision(recipient_id="r", actor_id="a", liked=True)
    row = await repo.get("r", "a")
    assert row is not None
    first_id, first_updated = row.id, row.updated_at

    await repo.put_decision(recipient_id="r", actor_id="a", liked=True)
    await repo.put_decision(recipient_id="r", actor_id="a", liked=False)

    count = (await session.execute(select(func.count()).select_from(Decision))).scalar_one()
    assert count == 1
    row = await repo.get("r", "a")
    assert row is not None
    assert row.id == first_id
    assert row.liked is False
    assert row.mutually_liked is None
    assert row.updated_at >= first_updated


@pytest.mark.asyncio
async def test_get_liked_decision_reports_found_and_not_found(session: AsyncSession) -> None:
    await _seed_user_1(session)
    repo = DecisionRepo(session)

    hit = await repo.get_liked_decision("user-1", "user-2")
    assert hit.found and hit.liked is True and hit.mutually_liked is None

    declined = await repo.get_liked_decision("user-1", "user-5")
    assert declined.found and declined.liked is False

    # Ordered pair: the reverse direction has no row.
    miss = await repo.get_liked_decision("user-2", "user-1")
    assert not miss.found


@pytest.mark.asyncio
@pytest.mark.parametrize("recipient_liked", [True, False])
async def test_mutual_decisions_mark_both_rows(
    session: AsyncSession, recipient_liked: bool
) -> None:
    repo = DecisionRepo(session)
    # "r" decided about "a" earlier; now "a" decides about "r".
    await repo.put_decision(recipient_id="a", actor_id="r", liked=recipient_liked)
    mirror_id = (await repo.get("a", "r")).id

    await repo.put_mutual_decisions(
        recipient_id="r", actor_id="a", actor_liked=True, recipient_liked=recipient_liked
    )

    primary = await repo.get("r", "a")
    mirror = await repo.get("a", "r")
    assert primary is not None and mirror is not None
    assert primary.liked is True
    assert primary.mutually_liked is recipient_liked
    assert mirror.mutually_liked is recipient_liked
    # The mirror keeps its own decision and id.
    assert mirror.liked is recipient_liked
    assert mirror.id == mirror_id


@pytest.mark.asyncio
async def test_resolved_likes_leave_the_new_view_only(session: AsyncSession) -> None:
    await seed(
        session,
        decision("user-1", "user-2"),
        decision("user-1", "user-3"),
        decision("user-1", "user-5"),
    )
    repo = DecisionRepo(session)

    new = await repo.get_new_liked_decisions("user-1", True)
    assert [liker.actor_id for liker in new] == ["user-5", "user-3", "user-2"]

    # user-1 answers user-5's like.
    await repo.put_mutual_decisions(
        recipient_id="user-5", actor_id="user-1", actor_liked=True, recipient_liked=True
    )

    new = await repo.get_new_liked_decisions("user-1", True)
    assert [liker.actor_id for liker in new] == ["user-3", "user-2"]
    assert len(await repo.get_liked_decisions("user-1", True)) == 3

    page = await repo.get_new_liked_decisions("user-1", True, limit=1)
    assert [liker.actor_id for liker in page] == ["user-3"]
    rest = await repo.get_new_liked_decisions("user-1", True, cursor=page[-1].id)
    assert [liker.actor_id for liker in rest] == ["user-2"]


@pytest.mark.asyncio
async def test_paging_to_exhaustion_matches_unbounded_read(session: AsyncSession) -> None:
    repo = DecisionRepo(session)
    for n in range(11):
        await repo.put_decision(recipient_id="star", actor_id=f"fan-{n}", liked=n % 4 != 0)
    # Re-deciding must not move a row within the ordering.
    await repo.put_decision(recipient_id="star", actor_id="fan-1", liked=True)

    unbounded = await repo.get_liked_decisions("star", True)

    paged: list[int] = []
    cursor = None
    while True:
        page = await repo.get_liked_decisions("star", True, cursor=cursor, limit=3)
        if not page:
            break
        paged.extend(liker.id for liker in page)
        cursor = page[-1].id

    assert paged == [liker.id for liker in unbounded]
    assert len(paged) == 8
    assert paged == sorted(paged, reverse=True)


@pytest.mark.asyncio
async def test_failed_mutual_write_rolls_back_both_statements(
    session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    repo = DecisionRepo(session)
    await repo.put_decision(recipient_id="a", actor_id="r", liked=True)

    real_execute = session.execute
    calls = 0

    async def execute(statement, *args, **kwargs):
        nonlocal calls
        calls += 1
        if calls == 2:
            raise OperationalError("UPDATE decisions", {}, Exception("connection lost"))
        return await real_execute(statement, *args, **kwargs)

    monkeypatch.setattr(session, "execute", execute)
    with pytest.raises(StorageError):
        await repo.put_mutual_decisions(
            recipient_id="r", actor_id="a", actor_liked=True, recipient_liked=True
        )
    monkeypatch.undo()

    async with session_factory() as fresh:
        check = DecisionRepo(fresh)
        assert await check.get("r", "a") is None
        mirror = await check.get("a", "r")
        assert mirror is not None and mirror.mutually_liked is None


@pytest.mark.asyncio
async def test_read_failures_surface_as_storage_errors(
    session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def execute(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "execute", execute)
    repo = DecisionRepo(session)

    with pytest.raises(StorageError, match="database is locked"):
        await repo.get_liked_decisions("user-1", True)
    with pytest.raises(StorageError):
        await repo.get_liked_decisions_count("user-1", True)
    with pytest.raises(StorageError):
        await repo.get_liked_decision("user-1", "user-2")


@pytest.mark.asyncio
async def test_storage_errors_carry_only_the_driver_message(
    session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def execute(*args, **kwargs):
        raise OperationalError(
            "SELECT decisions.liked, decisions.mutually_liked FROM decisions "
            "WHERE decisions.recipient_id = ? AND decisions.actor_id = ?",
            ("user-1", "user-2"),
            Exception("database is locked"),
        )

    monkeypatch.setattr(session, "execute", execute)

    with pytest.raises(StorageError) as excinfo:
        await DecisionRepo(session).get_liked_decision("user-1", "user-2")

    assert str(excinfo.value) == "database is locked"
    # The full statement stays reachable for logging through the cause.
    assert isinstance(excinfo.value.__cause__, OperationalError)
    assert "[SQL:" in str(excinfo.value.__cause__)
