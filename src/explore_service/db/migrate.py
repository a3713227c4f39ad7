"""
explore_service.db.migrate

Programmatic Alembic runner used at process start outside dev/test.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from alembic import command
from alembic.config import Config

# `<repo>/alembic`, next to `alembic.ini`.
SCRIPT_LOCATION = Path(__file__).resolve().parents[3] / "alembic"


def alembic_config(database_url: str) -> Config:
    # No ini file: logging stays as configured by `observability.logging`.
    cfg = Config()
    cfg.set_main_option("script_location", str(SCRIPT_LOCATION))
    # ConfigParser interpolation would eat URL-encoded characters in passwords.
    cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return cfg


async def upgrade_to_head(database_url: str) -> None:
    # Alembic's env runs its own event loop, so it gets a worker thread.
    await asyncio.to_thread(command.upgrade, alembic_config(database_url), "head")


# --- Module Notes -----------------------------------------------------------
# `alembic upgrade head` from the repo root reaches the same revisions through
# `alembic.ini`; both paths are idempotent once the schema is current.
