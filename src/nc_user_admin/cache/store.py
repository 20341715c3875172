"""
nc_user_admin.cache.store

File-backed cache of directory collections with independent freshness clocks.

Responsibilities:
- Atomically persist one JSON snapshot per collection under the cache directory.
- Stamp a per-collection freshness clock in the preferences store.
- Serve a snapshot only while its clock is younger than the freshness window.
- Purge one or all collections idempotently.
"""

from __future__ import annotations

import enum
import os
import tempfile
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError

from nc_user_admin.db.repositories.preferences import PreferencesStore
from nc_user_admin.domain.models import GroupList, UserList
from nc_user_admin.observability.logging import get_logger

log = get_logger(__name__)

DEFAULT_FRESHNESS_SECONDS = 3600.0


class CacheCollection(enum.StrEnum):
    users = "users"
    groups = "groups"

    @property
    def file_name(self) -> str:
        return f"cached_{self.value}.json"

    @property
    def clock_key(self) -> str:
        return f"cached_{self.value}_timestamp"


_ADAPTERS: dict[CacheCollection, TypeAdapter[Any]] = {
    CacheCollection.users: UserList,
    CacheCollection.groups: GroupList,
}


class CacheStore:
    def __init__(
        self,
        *,
        directory: Path,
        preferences: PreferencesStore,
        freshness_seconds: float = DEFAULT_FRESHNESS_SECONDS,
        now: Callable[[], float] = time.time,
    ) -> None:
        self._directory = Path(directory)
        self._preferences = preferences
        self._freshness_seconds = freshness_seconds
        self._now = now

    def path_for(self, collection: CacheCollection) -> Path:
        return self._directory / collection.file_name

    def write(self, collection: CacheCollection, snapshot: Sequence[BaseModel]) -> None:
        try:
            payload = _ADAPTERS[collection].dump_json(list(snapshot))
            _atomic_write_bytes(self.path_for(collection), payload)
            self._preferences.set(collection.clock_key, float(self._now()))
        except (OSError, SQLAlchemyError, ValueError) as e:
            log.warning("cache_write_failed", collection=collection.value, error=str(e))
            return
        log.info("cache_written", collection=collection.value, count=len(snapshot))

    def read(self, collection: CacheCollection) -> list[Any] | None:
        age = self.age(collection)
        if age is None:
            return None
        if age >= self._freshness_seconds:
            log.info("cache_expired", collection=collection.value, age_seconds=round(age, 1))
            return None

        try:
            raw = self.path_for(collection).read_bytes()
            snapshot = _ADAPTERS[collection].validate_json(raw)
        except (OSError, ValidationError) as e:
            log.info("cache_read_failed", collection=collection.value, error=str(e))
            return None
        log.info("cache_loaded", collection=collection.value, count=len(snapshot))
        return snapshot

    def age(self, collection: CacheCollection) -> float | None:
        """Seconds since the collection was last written, or None without a clock."""

        try:
            stamped = self._preferences.get(collection.clock_key)
        except SQLAlchemyError as e:
            log.warning("cache_clock_unreadable", collection=collection.value, error=str(e))
            return None
        if not isinstance(stamped, (int, float)) or isinstance(stamped, bool):
            return None
        return float(self._now()) - float(stamped)

    def purge(self, collection: CacheCollection | None = None) -> None:
        targets = [collection] if collection is not None else list(CacheCollection)
        for target in targets:
            try:
                self.path_for(target).unlink(missing_ok=True)
                self._preferences.delete(target.clock_key)
            except (OSError, SQLAlchemyError) as e:
                log.warning("cache_purge_failed", collection=target.value, error=str(e))
        log.info("cache_purged", collections=[t.value for t in targets])


def _atomic_write_bytes(path: Path, data: bytes) -> None:
    # Readers see either the previous file or the complete new one, never a partial write.
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp_cache_", suffix=".json", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)


# --- Module Notes -----------------------------------------------------------
# Staleness is decided by the clock alone: an intact file with an old clock is ignored.
