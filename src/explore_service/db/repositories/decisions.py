"""
explore_service.db.repositories.decisions

Decision ledger: repository for `Decision` rows.

Responsibilities:
- Upsert one-sided decisions and apply mutual decisions atomically.
- Serve cursor-paginated "who liked me" listings and counts.
- Answer point lookups with an explicit found/not-found result.

Every SQLAlchemy failure is re-raised as `StorageError` carrying only the
driver message.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Select, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from explore_service.db.models import Decision, utcnow
from explore_service.errors import StorageError

# Dialect-native INSERT constructs that support ON CONFLICT ... DO UPDATE.
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# Largest id a BIGINT / SQLite INTEGER column can hold.
_MAX_ID = 2**63 - 1


def _storage_error(e: SQLAlchemyError) -> StorageError:
    # Driver message only; the statement and bound parameters stay on the chained cause.
    orig = getattr(e, "orig", None)
    if orig is not None:
        return StorageError(str(orig))
    return StorageError(str(e.args[0]) if e.args else type(e).__name__)


@dataclass(frozen=True, slots=True)
class Liker:
    # Read-side projection of a liked decision.
    id: int
    actor_id: str
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class DecisionLookup:
    """
    Result of a point lookup on an ordered (recipient, actor) pair.
    `liked`/`mutually_liked` are only meaningful when `found` is true.
    """

    found: bool
    liked: bool = False
    mutually_liked: bool | None = None

    @classmethod
    def not_found(cls) -> DecisionLookup:
        return cls(found=False)


class DecisionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def put_decision(self, *, recipient_id: str, actor_id: str, liked: bool) -> None:
        stmt = self._upsert(recipient_id=recipient_id, actor_id=actor_id, liked=liked)
        async with self._atomic():
            await self._session.execute(stmt)

    async def put_mutual_decisions(
        self,
        *,
        recipient_id: str,
        actor_id: str,
        actor_liked: bool,
        recipient_liked: bool,
    ) -> None:
        """
        Record the actor's decision about the recipient and mark both directions of
        the pair with the recipient's earlier decision, in one transaction.
        """

        upsert = self._upsert(
            recipient_id=recipient_id,
            actor_id=actor_id,
            liked=actor_liked,
            mutually_liked=recipient_liked,
        )
        # Mirror row keeps its own `liked`; only the mutuality signal changes.
        mirror = (
            update(Decision)
            .where(Decision.recipient_id == actor_id, Decision.actor_id == recipient_id)
            .values(mutually_liked=recipient_liked, updated_at=utcnow())
        )
        async with self._atomic():
            await self._session.execute(upsert)
            await self._session.execute(mirror)

    async def get_liked_decisions(
        self,
        recipient_id: str,
        liked: bool,
        *,
        cursor: int | None = None,
        limit: int | None = None,
    ) -> list[Liker]:
        stmt = self._likers(recipient_id, liked, cursor=cursor, limit=limit)
        return await self._fetch_likers(stmt)

    async def get_new_liked_decisions(
        self,
        recipient_id: str,
        liked: bool,
        *,
        cursor: int | None = None,
        limit: int | None = None,
    ) -> list[Liker]:
        # "New" likes are the ones whose reciprocal decision is still unknown.
        stmt = self._likers(recipient_id, liked, cursor=cursor, limit=limit).where(
            Decision.mutually_liked.is_(None)
        )
        return await self._fetch_likers(stmt)

    async def get_liked_decisions_count(self, recipient_id: str, liked: bool) -> int:
        stmt = (
            select(func.count())
            .select_from(Decision)
            .where(Decision.recipient_id == recipient_id, Decision.liked == liked)
        )
        try:
            return int((await self._session.execute(stmt)).scalar_one())
        except SQLAlchemyError as e:
            raise _storage_error(e) from e

    async def get_liked_decision(
        self, recipient_id: str, actor_id: str, *, for_update: bool = False
    ) -> DecisionLookup:
        stmt = select(Decision.liked, Decision.mutually_liked).where(
            Decision.recipient_id == recipient_id, Decision.actor_id == actor_id
        )
        if for_update:
            # Rendered as FOR UPDATE on PostgreSQL; SQLite ignores row locks.
            stmt = stmt.with_for_update()
        try:
            row = (await self._session.execute(stmt)).one_or_none()
        except SQLAlchemyError as e:
            raise _storage_error(e) from e
        if row is None:
            return DecisionLookup.not_found()
        return DecisionLookup(found=True, liked=row.liked, mutually_liked=row.mutually_liked)

    async def get(self, recipient_id: str, actor_id: str) -> Decision | None:
        # Core UPDATEs bypass the identity map; reload attributes of already-loaded rows.
        stmt = (
            select(Decision)
            .where(Decision.recipient_id == recipient_id, Decision.actor_id == actor_id)
            .execution_options(populate_existing=True)
        )
        try:
            return (await self._session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise _storage_error(e) from e

    def _upsert(
        self,
        *,
        recipient_id: str,
        actor_id: str,
        liked: bool,
        mutually_liked: bool | None = None,
    ):
        dialect = self._session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise StorageError(f"upsert not supported for dialect {dialect!r}")

        values = {
            "recipient_id": recipient_id,
            "actor_id": actor_id,
            "liked": liked,
            "updated_at": utcnow(),
        }
        if mutually_liked is not None:
            values["mutually_liked"] = mutually_liked

        stmt = insert(Decision).values(**values)
        overwrite = [key for key in values if key not in ("recipient_id", "actor_id")]
        # On conflict the row is overwritten in place, so its `id` (the cursor) is kept.
        return stmt.on_conflict_do_update(
            index_elements=["recipient_id", "actor_id"],
            set_={key: stmt.excluded[key] for key in overwrite},
        )

    def _likers(
        self,
        recipient_id: str,
        liked: bool,
        *,
        cursor: int | None,
        limit: int | None,
    ) -> Select:
        stmt = (
            select(Decision.id, Decision.actor_id, Decision.updated_at)
            .where(Decision.recipient_id == recipient_id, Decision.liked == liked)
            .order_by(Decision.id.desc())
        )
        # Exclusive bound: the boundary row was the last one of the previous page.
        # A cursor beyond the column range bounds nothing and cannot be bound as a parameter.
        if cursor is not None and cursor <= _MAX_ID:
            stmt = stmt.where(Decision.id < cursor)
        if limit is not None:
            stmt = stmt.limit(limit)
        return stmt

    async def _fetch_likers(self, stmt: Select) -> list[Liker]:
        try:
            rows = (await self._session.execute(stmt)).all()
        except SQLAlchemyError as e:
            raise _storage_error(e) from e
        return [Liker(id=r.id, actor_id=r.actor_id, updated_at=r.updated_at) for r in rows]

    @asynccontextmanager
    async def _atomic(self) -> AsyncIterator[None]:
        # Commit everything executed in the block, or roll all of it back.
        try:
            yield
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise _storage_error(e) from e


# --- Module Notes -----------------------------------------------------------
# Writes commit inside the ledger so the two statements of a mutual decision can
# never be split across transactions by a caller. Reads run in whatever
# transaction the request session already holds.
