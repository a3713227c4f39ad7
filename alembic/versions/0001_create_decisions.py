"""create decisions table

Revision ID: 0001_create_decisions
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_create_decisions"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "decisions",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("recipient_id", sa.String(256), nullable=False),
        sa.Column("actor_id", sa.String(256), nullable=False),
        sa.Column("liked", sa.Boolean(), nullable=False),
        sa.Column("mutually_liked", sa.Boolean(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("recipient_id", "actor_id", name="uq_decisions_recipient_actor"),
        sqlite_autoincrement=True,
    )
    op.create_index(
        "ix_decisions_recipient_liked_id",
        "decisions",
        ["recipient_id", "liked", "id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_decisions_recipient_liked_id", table_name="decisions")
    op.drop_table("decisions")
