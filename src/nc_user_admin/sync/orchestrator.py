"""
nc_user_admin.sync.orchestrator

Synchronization orchestrator (sole owner of in-memory directory state).

Responsibilities:
- Seed state from the local cache, then refresh users and groups concurrently.
- Fetch user details sequentially, skipping (and logging) individual failures.
- Apply mutations remotely, then re-fetch and replace only the affected user.
- Publish loading / error / success status and derived views for presentation.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from nc_user_admin.cache.store import CacheCollection, CacheStore
from nc_user_admin.domain.models import DirectoryGroup, DirectoryUser
from nc_user_admin.observability.logging import get_logger
from nc_user_admin.ocs.client import OcsClient
from nc_user_admin.ocs.errors import ApiFailure
from nc_user_admin.settings import Settings
from nc_user_admin.sync import views
from nc_user_admin.sync.state import SyncOutcome, SyncStatus, UnknownUserError

log = get_logger(__name__)


class DirectorySyncOrchestrator:
    def __init__(
        self,
        *,
        client: OcsClient,
        cache: CacheStore,
        settings: Settings,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._cache = cache
        self._settings = settings
        self._clock = clock

        self._users: list[DirectoryUser] = []
        self._groups: list[DirectoryGroup] = []

        self._error: str | None = None
        self._success: tuple[str, float] | None = None
        self._outcome = SyncOutcome.idle
        self._skipped: tuple[str, ...] = ()

        # Each load takes a generation; older results never overwrite newer ones.
        self._generation = 0
        self._applied: dict[CacheCollection, int] = {c: 0 for c in CacheCollection}
        self._in_flight = 0
        self._mutations = asyncio.Lock()

    # ── State accessors ──────────────────────────────────────────

    @property
    def users(self) -> tuple[DirectoryUser, ...]:
        return tuple(self._users)

    @property
    def groups(self) -> tuple[DirectoryGroup, ...]:
        return tuple(self._groups)

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    @property
    def error_message(self) -> str | None:
        return self._error

    @property
    def success_message(self) -> str | None:
        if self._success is None:
            return None
        text, expires_at = self._success
        if self._clock() >= expires_at:
            self._success = None
            return None
        return text

    @property
    def outcome(self) -> SyncOutcome:
        return self._outcome

    def user(self, user_id: str) -> DirectoryUser | None:
        for u in self._users:
            if u.user_id == user_id:
                return u
        return None

    def status(self) -> SyncStatus:
        return SyncStatus(
            is_loading=self.is_loading,
            outcome=self._outcome,
            error_message=self._error,
            success_message=self.success_message,
            skipped_user_ids=self._skipped,
            generation=self._generation,
            user_count=len(self._users),
            group_count=len(self._groups),
        )

    # ── Derived views ────────────────────────────────────────────

    def filtered_users(
        self,
        *,
        status: views.UserFilter = views.UserFilter.all,
        search: str = "",
        order: views.UserSortOrder = views.UserSortOrder.identifier,
    ) -> list[DirectoryUser]:
        return views.filter_users(self.users, status=status, search=search, order=order)

    def filtered_groups(self, search: str = "") -> list[DirectoryGroup]:
        return views.filter_groups(self.groups, search)

    def group_members(self, group_name: str) -> list[DirectoryUser]:
        return views.group_members(self.users, group_name)

    def group_member_counts(self) -> dict[str, int]:
        return views.group_member_counts(self.users, self.groups)

    # ── Loading ──────────────────────────────────────────────────

    def load_from_cache(self) -> None:
        cached_users = self._cache.read(CacheCollection.users)
        if cached_users is not None:
            self._users = sorted(cached_users, key=lambda u: u.user_id)
        cached_groups = self._cache.read(CacheCollection.groups)
        if cached_groups is not None:
            self._groups = sorted(cached_groups, key=lambda g: g.name)

    async def load_all(self, *, force_refresh: bool = False) -> SyncOutcome:
        if not force_refresh:
            self.load_from_cache()

        self._generation += 1
        generation = self._generation
        self._error = None
        self._outcome = SyncOutcome.loading
        self._in_flight += 1
        log.info("sync_started", generation=generation, force_refresh=force_refresh)

        try:
            (users_ok, skipped), groups_ok = await asyncio.gather(
                self._sync_users(generation),
                self._sync_groups(generation),
            )
        finally:
            self._in_flight -= 1

        if users_ok and groups_ok and not skipped:
            outcome = SyncOutcome.success
        elif users_ok or groups_ok:
            outcome = SyncOutcome.partial_success
        else:
            outcome = SyncOutcome.failed

        if generation == self._generation:
            self._outcome = outcome
        log.info("sync_finished", generation=generation, outcome=outcome.value)
        return outcome

    async def _sync_users(self, generation: int) -> tuple[bool, int]:
        try:
            user_ids = await self._client.list_user_ids()
        except ApiFailure as e:
            log.warning("user_sync_failed", generation=generation, error=str(e))
            if generation == self._generation:
                self._skipped = ()
            self._surface_error(generation, e)
            return False, 0

        loaded: list[DirectoryUser] = []
        skipped: list[str] = []
        # One at a time, in list order; a failing user is skipped, not fatal.
        for user_id in user_ids:
            try:
                loaded.append(await self._client.fetch_user(user_id))
            except ApiFailure as e:
                log.warning("user_detail_skipped", user_id=user_id, error=str(e))
                skipped.append(user_id)

        loaded.sort(key=lambda u: u.user_id)
        if not self._claim(CacheCollection.users, generation):
            return True, len(skipped)

        self._users = loaded
        self._skipped = tuple(skipped)
        if skipped and generation == self._generation and self._error is None:
            self._error = f"Failed to load details for {len(skipped)} user(s)"
        self._cache.write(CacheCollection.users, loaded)
        log.info(
            "user_sync_completed",
            generation=generation,
            loaded=len(loaded),
            skipped=len(skipped),
        )
        return True, len(skipped)

    async def _sync_groups(self, generation: int) -> bool:
        try:
            names = await self._client.list_group_names()
        except ApiFailure as e:
            log.warning("group_sync_failed", generation=generation, error=str(e))
            self._surface_error(generation, e)
            return False

        groups = sorted((DirectoryGroup(name=n) for n in names if n), key=lambda g: g.name)
        if not self._claim(CacheCollection.groups, generation):
            return True

        self._groups = groups
        self._cache.write(CacheCollection.groups, groups)
        log.info("group_sync_completed", generation=generation, loaded=len(groups))
        return True

    def _claim(self, collection: CacheCollection, generation: int) -> bool:
        if generation < self._applied[collection]:
            log.info(
                "sync_result_discarded",
                collection=collection.value,
                generation=generation,
                applied=self._applied[collection],
            )
            return False
        self._applied[collection] = generation
        return True

    def _surface_error(self, generation: int, exc: ApiFailure) -> None:
        # A superseded cycle never writes into the message area of a newer one.
        if generation != self._generation:
            log.info("sync_error_discarded", generation=generation, error=str(exc))
            return
        # First error wins for the message area.
        if self._error is None:
            self._error = str(exc)

    # ── Mutations ────────────────────────────────────────────────

    async def toggle_enabled(self, user_id: str) -> DirectoryUser:
        async with self._mutations:
            self._begin_mutation()
            current = self._require_user(user_id)
            try:
                if current.enabled:
                    await self._client.disable_user(current.user_id)
                    verb = "disabled"
                else:
                    await self._client.enable_user(current.user_id)
                    verb = "enabled"
                updated = await self._refetch(current.user_id)
            except ApiFailure as e:
                self._fail_mutation("toggle_enabled", user_id, e)
                raise
            self._succeed(f"User '{current.label}' {verb} successfully")
            return updated

    async def add_to_group(self, user_id: str, group: str) -> DirectoryUser:
        async with self._mutations:
            self._begin_mutation()
            current = self._require_user(user_id)
            try:
                await self._client.add_to_group(current.user_id, group)
                updated = await self._refetch(current.user_id)
            except ApiFailure as e:
                self._fail_mutation("add_to_group", user_id, e, group=group)
                raise
            self._succeed(f"User '{current.label}' added to '{group}'")
            return updated

    async def remove_from_group(self, user_id: str, group: str) -> DirectoryUser:
        async with self._mutations:
            self._begin_mutation()
            current = self._require_user(user_id)
            try:
                await self._client.remove_from_group(current.user_id, group)
                updated = await self._refetch(current.user_id)
            except ApiFailure as e:
                self._fail_mutation("remove_from_group", user_id, e, group=group)
                raise
            self._succeed(f"User '{current.label}' removed from '{group}'")
            return updated

    def _begin_mutation(self) -> None:
        self._error = None
        self._success = None

    def _require_user(self, user_id: str) -> DirectoryUser:
        current = self.user(user_id)
        if current is None:
            raise UnknownUserError(user_id)
        return current

    async def _refetch(self, user_id: str) -> DirectoryUser:
        # The server's view after the mutation is the only source of truth.
        updated = await self._client.fetch_user(user_id)
        for index, existing in enumerate(self._users):
            if existing.user_id == user_id:
                self._users[index] = updated
                break
        return updated

    def _fail_mutation(self, op: str, user_id: str, exc: ApiFailure, **extra: str) -> None:
        log.warning("mutation_failed", op=op, user_id=user_id, error=str(exc), **extra)
        self._error = str(exc)

    def _succeed(self, message: str) -> None:
        log.info("mutation_succeeded", message=message)
        self._success = (message, self._clock() + self._settings.success_message_seconds)


# --- Module Notes -----------------------------------------------------------
# Presentation never reaches this object while the session is locked; the gate lives in
# `lock.state_machine.SessionLock.guard` and the API dependencies.
