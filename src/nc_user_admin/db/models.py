"""
nc_user_admin.db.models

Schema for persisted non-secret settings.

Responsibilities:
- Provide the declarative `Base` used by `init_db`.
- Define the key/value `Preference` table (server URL, username, lock flag,
  cache freshness clocks, passcode hash).
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    # Naive UTC; the sqlite DateTime type does not keep offsets.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class Preference(Base):
    __tablename__ = "preferences"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    # JSON keeps bools/floats/strings typed without per-key columns.
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


# --- Module Notes -----------------------------------------------------------
# Keys are owned by their consumers: `services.profile_service` (profile + lock) and
# `cache.store` (freshness clocks).
