"""
nc_user_admin.db.session

SQLAlchemy engine + session factory helpers.

Responsibilities:
- Create the engine from settings (creating the sqlite parent directory if needed).
- Create the sessionmaker with safe defaults.
"""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import Engine, create_engine as sa_create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from nc_user_admin.settings import Settings


def create_engine(settings: Settings) -> Engine:
    url = make_url(str(settings.preferences_url))
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return sa_create_engine(url, pool_pre_ping=True)


def create_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    # expire_on_commit=False avoids surprising lazy loads after commits.
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
    )


# --- Module Notes -----------------------------------------------------------
# Preference reads/writes are tiny and local, so a synchronous engine is used; the only
# suspension points in this client are network exchanges and the unlock challenge.
