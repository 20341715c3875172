"""
nc_user_admin.db.repositories.preferences

Plain key/value store for non-secret settings.

Responsibilities:
- Typed-enough get/set/delete over the `preferences` table.
- Readiness ping for the presentation health probe.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select, text
from sqlalchemy.orm import Session, sessionmaker

from nc_user_admin.db.models import Preference

SERVER_URL = "nextcloud_server_url"
USERNAME = "nextcloud_username"
LOCK_ENABLED = "biometric_auth_enabled"
LOCK_PASSCODE_HASH = "lock_passcode_hash"


class PreferencesStore:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, key: str, default: Any = None) -> Any:
        with self._session_factory() as session:
            row = session.get(Preference, key)
            if row is None or row.value is None:
                return default
            return row.value

    def set(self, key: str, value: Any) -> None:
        with self._session_factory() as session:
            row = session.get(Preference, key)
            if row is None:
                session.add(Preference(key=key, value=value))
            else:
                row.value = value
            session.commit()

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        with self._session_factory() as session:
            session.execute(delete(Preference).where(Preference.key.in_(keys)))
            session.commit()

    def keys(self) -> list[str]:
        with self._session_factory() as session:
            return list(session.scalars(select(Preference.key).order_by(Preference.key)))

    def ping(self) -> None:
        with self._session_factory() as session:
            session.execute(text("SELECT 1"))


# --- Module Notes -----------------------------------------------------------
# Cache freshness clock keys are owned by `cache.store`.
