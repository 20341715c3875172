"""
tests.conftest

Shared fixtures: temp-dir settings, a preferences store on a temp sqlite file, an in-memory
credential store, and a fake OCS server (see `tests.fakes`).
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from nc_user_admin.cache.store import CacheStore
from nc_user_admin.db.init_db import init_db
from nc_user_admin.db.repositories.preferences import PreferencesStore
from nc_user_admin.db.session import create_engine, create_sessionmaker
from nc_user_admin.ocs.client import OcsClient
from nc_user_admin.ocs.session import PASSWORD_KEY, SessionContext
from nc_user_admin.settings import Settings

from tests.fakes import SERVER_URL, FakeOcsServer, MemoryCredentialStore


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(env="test", data_dir=tmp_path / "data", success_message_seconds=3.0)


@pytest.fixture()
def preferences(settings: Settings) -> Iterator[PreferencesStore]:
    engine = create_engine(settings)
    init_db(engine)
    yield PreferencesStore(create_sessionmaker(engine))
    engine.dispose()


@pytest.fixture()
def credentials() -> MemoryCredentialStore:
    store = MemoryCredentialStore()
    store.save(PASSWORD_KEY, "s3cret")
    return store


@pytest.fixture()
def cache(settings: Settings, preferences: PreferencesStore) -> CacheStore:
    return CacheStore(directory=settings.cache_dir, preferences=preferences)


@pytest.fixture()
def server() -> FakeOcsServer:
    return FakeOcsServer()


@pytest.fixture()
def session_context() -> SessionContext:
    return SessionContext(server_url=SERVER_URL, username="admin")


@pytest.fixture()
def client(
    session_context: SessionContext,
    credentials: MemoryCredentialStore,
    settings: Settings,
    server: FakeOcsServer,
) -> OcsClient:
    return OcsClient(
        session=session_context,
        credentials=credentials,
        settings=settings,
        transport=server.transport(),
    )
