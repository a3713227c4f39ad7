"""
explore_service.api.__main__

Entrypoint for running the service via `python -m explore_service.api`
(or the `explore-service` console script).
"""

from __future__ import annotations

import uvicorn

from explore_service.api.app import create_app
from explore_service.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# Schema setup happens in the app lifespan (create_all in dev/test, Alembic in
# prod), so this entrypoint only needs settings and a port.
