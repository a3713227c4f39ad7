"""
explore_service.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration (prefix `EXPLORE_`).
    Defaults are safe for local dev against a SQLite file.
    """

    model_config = SettingsConfigDict(env_prefix="EXPLORE_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "explore-service"
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./explore.db"

    # Listing
    # Applied when a list request carries no pagination limit; None keeps listings unbounded.
    default_page_limit: int | None = Field(default=None, ge=1, le=2**32 - 1)

    # Decisions
    # Lock the counterpart row while probing for a reciprocal decision (PostgreSQL only).
    lock_probe_row: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()
