"""
tests.test_api

Presentation API: profile setup, directory endpoints, error mapping and the lock gate.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from nc_user_admin.api.app import create_app
from nc_user_admin.ocs.session import PASSWORD_KEY
from nc_user_admin.settings import Settings
from tests.fakes import SERVER_URL, FakeOcsServer, MemoryCredentialStore

PROFILE = {"server_url": SERVER_URL, "username": "admin", "password": "s3cret"}


@pytest.fixture()
def store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest_asyncio.fixture()
async def api(
    tmp_path: Path, server: FakeOcsServer, store: MemoryCredentialStore
) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app(
        settings=Settings(env="test", data_dir=tmp_path),
        credentials=store,
        transport=server.transport(),
    )
    await app.router.startup()
    try:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        await app.router.shutdown()


def _seed(server: FakeOcsServer) -> None:
    server.add_user("alice", enabled=True, displayname="Alice", groups=["staff"])
    server.add_user("bob", enabled=False, groups=["staff"])
    server.groups = ["admins", "staff"]


@pytest.mark.asyncio
async def test_directory_requires_profile(api: httpx.AsyncClient) -> None:
    r = await api.get("/v1/directory/status")
    assert r.status_code == 409

    r = await api.get("/v1/profile")
    assert r.json() == {
        "configured": False,
        "server_url": None,
        "username": None,
        "allow_self_signed": False,
    }


@pytest.mark.asyncio
async def test_profile_load_and_views(
    api: httpx.AsyncClient, server: FakeOcsServer, store: MemoryCredentialStore
) -> None:
    _seed(server)

    r = await api.put("/v1/profile", json=PROFILE)
    assert r.status_code == 200
    assert r.json()["configured"] is True
    assert store.load(PASSWORD_KEY) == "s3cret"

    r = await api.post("/v1/directory/load")
    assert r.status_code == 200
    assert r.json()["outcome"] == "SUCCESS"
    assert r.json()["user_count"] == 2

    r = await api.get("/v1/directory/users", params={"filter": "enabled"})
    assert [u["user_id"] for u in r.json()] == ["alice"]

    r = await api.get("/v1/directory/users", params={"search": "ALI", "sort": "display_name"})
    assert [u["label"] for u in r.json()] == ["Alice"]

    r = await api.get("/v1/directory/users/alice")
    assert r.json()["assignable_groups"] == ["admins"]

    r = await api.get("/v1/directory/groups")
    assert r.json() == [
        {"name": "admins", "member_count": 0},
        {"name": "staff", "member_count": 2},
    ]

    r = await api.get("/v1/directory/groups/staff/members")
    assert [u["user_id"] for u in r.json()] == ["alice", "bob"]


@pytest.mark.asyncio
async def test_mutations_through_api(api: httpx.AsyncClient, server: FakeOcsServer) -> None:
    _seed(server)
    await api.put("/v1/profile", json=PROFILE)
    await api.post("/v1/directory/load")

    r = await api.post("/v1/directory/users/bob/toggle")
    assert r.status_code == 200
    assert r.json()["enabled"] is True

    r = await api.post("/v1/directory/users/alice/groups", json={"group": "admins"})
    assert r.json()["groups"] == ["admins", "staff"]

    r = await api.delete("/v1/directory/users/alice/groups/staff")
    assert r.json()["groups"] == ["admins"]

    r = await api.get("/v1/directory/status")
    assert r.json()["success_message"] == "User 'Alice' removed from 'staff'"


@pytest.mark.asyncio
async def test_error_mapping(api: httpx.AsyncClient, server: FakeOcsServer) -> None:
    _seed(server)
    await api.put("/v1/profile", json=PROFILE)
    await api.post("/v1/directory/load")

    r = await api.post("/v1/directory/users/ghost/toggle")
    assert r.status_code == 404

    server.fail("PUT", "/users/bob/enable", 403, "forbidden")
    r = await api.post("/v1/directory/users/bob/toggle")
    assert r.status_code == 502
    assert r.json()["detail"] == "forbidden"
    assert r.json()["error"] == "ServerRejected"

    server.fail("PUT", "/users/bob/enable", 401, "")
    r = await api.post("/v1/directory/users/bob/toggle")
    assert r.status_code == 401
    assert r.json()["detail"] == "Unauthorized. Please check your credentials."

    r = await api.get("/v1/directory/status")
    assert r.json()["error_message"] == "Unauthorized. Please check your credentials."


@pytest.mark.asyncio
async def test_clearing_profile_drops_session(
    api: httpx.AsyncClient, server: FakeOcsServer, store: MemoryCredentialStore
) -> None:
    _seed(server)
    await api.put("/v1/profile", json=PROFILE)
    await api.post("/v1/directory/load")

    r = await api.delete("/v1/profile")
    assert r.json()["configured"] is False
    assert store.load(PASSWORD_KEY) is None

    r = await api.get("/v1/directory/users")
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_lock_gate(api: httpx.AsyncClient, server: FakeOcsServer) -> None:
    _seed(server)
    await api.put("/v1/profile", json=PROFILE)

    r = await api.put("/v1/session/lock", json={"enabled": True})
    assert r.status_code == 422

    r = await api.put("/v1/session/lock", json={"enabled": True, "passcode": "2468"})
    assert r.json()["lock_enabled"] is True
    assert r.json()["state"] == "UNLOCKED"
    assert r.json()["modality"] == "passcode"

    r = await api.post("/v1/session/lifecycle", json={"phase": "background"})
    assert r.json()["state"] == "LOCKED"

    for method, path in (
        ("GET", "/v1/directory/status"),
        ("GET", "/v1/profile"),
        ("DELETE", "/v1/cache"),
    ):
        r = await api.request(method, path)
        assert r.status_code == 423

    r = await api.post("/v1/session/unlock", json={})
    assert r.json()["state"] == "LOCKED"
    assert r.json()["message"] is None

    r = await api.post("/v1/session/unlock", json={"passcode": "0000"})
    assert r.json()["state"] == "LOCKED"
    assert r.json()["message"] == "Authentication failed. Please try again."

    r = await api.post("/v1/session/unlock", json={"passcode": "2468"})
    assert r.json()["state"] == "UNLOCKED"

    r = await api.get("/v1/directory/status")
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_background_load(api: httpx.AsyncClient, server: FakeOcsServer) -> None:
    _seed(server)
    await api.put("/v1/profile", json=PROFILE)

    r = await api.post("/v1/directory/load", params={"wait": "false", "force_refresh": "true"})
    assert r.status_code == 202

    for _ in range(100):
        r = await api.get("/v1/directory/status")
        if r.json()["outcome"] == "SUCCESS":
            break
        await asyncio.sleep(0.01)
    assert r.json()["outcome"] == "SUCCESS"
    assert r.json()["user_count"] == 2


@pytest.mark.asyncio
async def test_reset_returns_to_first_run(
    api: httpx.AsyncClient, store: MemoryCredentialStore
) -> None:
    await api.put("/v1/profile", json=PROFILE)
    await api.put("/v1/session/lock", json={"enabled": True, "passcode": "2468"})

    r = await api.post("/v1/reset")
    assert r.json()["configured"] is False
    assert store.secrets == {}

    r = await api.get("/v1/session")
    assert r.json() == {
        "state": "UNLOCKED",
        "lock_enabled": False,
        "modality": "none",
        "message": None,
    }
