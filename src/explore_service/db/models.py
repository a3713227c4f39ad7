"""
explore_service.db.models

Persistence schema for the decision ledger.

Responsibilities:
- Define the `Decision` ORM model: one row per ordered (recipient, actor) pair.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import BigInteger, Boolean, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from explore_service.db.base import Base


def utcnow() -> datetime:
    # Persist naive UTC timestamps; `updated_at` is converted to unix seconds on read.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class Decision(Base):
    __tablename__ = "decisions"

    # BIGINT on PostgreSQL; SQLite only autoincrements an INTEGER PRIMARY KEY.
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    recipient_id: Mapped[str] = mapped_column(String(256), nullable=False)
    actor_id: Mapped[str] = mapped_column(String(256), nullable=False)

    liked: Mapped[bool] = mapped_column(Boolean, nullable=False)
    # NULL until the reciprocal decision is known.
    mutually_liked: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("recipient_id", "actor_id", name="uq_decisions_recipient_actor"),
        Index("ix_decisions_recipient_liked_id", "recipient_id", "liked", "id"),
        # AUTOINCREMENT keeps SQLite from recycling ids of the highest rows.
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Decision {self.id} {self.actor_id}->{self.recipient_id} liked={self.liked}>"


# --- Module Notes -----------------------------------------------------------
# `id` doubles as the pagination cursor: it must only ever grow. Rows are updated
# in place and never deleted.
