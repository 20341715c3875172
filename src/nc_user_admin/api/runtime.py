"""
nc_user_admin.api.runtime

Process-wide composition of stores, lock and the active orchestrator.

Responsibilities:
- Hold the shared preferences/cache/credential stores and the session lock.
- Build (and rebuild on credential change) the client + orchestrator pair.
- Keep references to background sync tasks until they finish.
"""

from __future__ import annotations

import asyncio

import httpx

from nc_user_admin.cache.store import CacheStore
from nc_user_admin.credentials.store import CredentialStore
from nc_user_admin.db.repositories.preferences import PreferencesStore
from nc_user_admin.lock.state_machine import SessionLock
from nc_user_admin.observability.logging import get_logger
from nc_user_admin.ocs.client import OcsClient
from nc_user_admin.services.profile_service import ProfileService
from nc_user_admin.settings import Settings
from nc_user_admin.sync.orchestrator import DirectorySyncOrchestrator

log = get_logger(__name__)


class DirectoryRuntime:
    def __init__(
        self,
        *,
        settings: Settings,
        preferences: PreferencesStore,
        cache: CacheStore,
        credentials: CredentialStore,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.preferences = preferences
        self.cache = cache
        self.credentials = credentials
        self.profile = ProfileService(preferences=preferences, credentials=credentials, cache=cache)
        self.lock = SessionLock(enabled=self.profile.lock_enabled)
        self._transport = transport
        self._allow_self_signed = False
        self._orchestrator: DirectorySyncOrchestrator | None = None
        self._tasks: set[asyncio.Task[object]] = set()

    @property
    def allow_self_signed(self) -> bool:
        return self._allow_self_signed

    def orchestrator(self) -> DirectorySyncOrchestrator | None:
        if self._orchestrator is None:
            session = self.profile.session_context(allow_self_signed=self._allow_self_signed)
            if session is None:
                return None
            client = OcsClient(
                session=session,
                credentials=self.credentials,
                settings=self.settings,
                transport=self._transport,
            )
            self._orchestrator = DirectorySyncOrchestrator(
                client=client, cache=self.cache, settings=self.settings
            )
        return self._orchestrator

    def reset_session(self, *, allow_self_signed: bool = False) -> None:
        # New credentials -> new client; the trust decision is re-made, never carried over.
        self._allow_self_signed = allow_self_signed
        self._orchestrator = None
        log.info("session_reset", allow_self_signed=allow_self_signed)

    def drop_session(self) -> None:
        self._allow_self_signed = False
        self._orchestrator = None

    def spawn(self, coro) -> asyncio.Task[object]:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


# --- Module Notes -----------------------------------------------------------
# Created on app startup and stashed on `app.state.runtime` (see `api.app.create_app`).
