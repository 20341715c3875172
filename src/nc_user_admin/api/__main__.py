"""
nc_user_admin.api.__main__

Entrypoint for running the presentation API via `python -m nc_user_admin.api`.

Responsibilities:
- Load settings.
- Create the app.
- Start uvicorn with structlog-compatible logging config.
"""

from __future__ import annotations

import uvicorn

from nc_user_admin.api.app import create_app
from nc_user_admin.settings import get_settings


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
# Binds to loopback by default; the API fronts a single operator's session.
