"""
explore_service.db.base

SQLAlchemy declarative base.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# --- Module Notes -----------------------------------------------------------
# `Decision` is the only mapped class. `alembic/env.py` and `init_db` both import
# `db.models` first, so `Base.metadata` is complete when either of them reads it.
