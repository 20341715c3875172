"""
nc_user_admin.services.profile_service

Single-profile settings + credential owner.

Responsibilities:
- Persist server URL / username (preferences) and password (credential store).
- Build the explicit `SessionContext` handed to the client and orchestrator.
- Clear credentials together with every cached collection.
- Manage the lock-enabled flag and its passcode hash.
"""

from __future__ import annotations

from nc_user_admin.cache.store import CacheStore
from nc_user_admin.credentials.store import CredentialStore
from nc_user_admin.db.repositories import preferences as keys
from nc_user_admin.db.repositories.preferences import PreferencesStore
from nc_user_admin.lock.authenticator import PasscodeAuthenticator, hash_passcode
from nc_user_admin.observability.logging import get_logger
from nc_user_admin.ocs.session import PASSWORD_KEY, SessionContext

log = get_logger(__name__)


class ProfileService:
    def __init__(
        self,
        *,
        preferences: PreferencesStore,
        credentials: CredentialStore,
        cache: CacheStore,
    ) -> None:
        self._preferences = preferences
        self._credentials = credentials
        self._cache = cache

    def save(self, *, server_url: str, username: str, password: str) -> None:
        server_url = server_url.strip()
        username = username.strip()
        if not server_url or not username or not password:
            raise ValueError("server_url, username and password are all required")

        self._preferences.set(keys.SERVER_URL, server_url)
        self._preferences.set(keys.USERNAME, username)
        self._credentials.save(PASSWORD_KEY, password)
        if self._credentials.load(PASSWORD_KEY) is None:
            log.warning("profile_password_not_persisted", server_url=server_url)
        log.info("profile_saved", server_url=server_url, username=username)

    def session_context(self, *, allow_self_signed: bool = False) -> SessionContext | None:
        server_url = self._preferences.get(keys.SERVER_URL)
        username = self._preferences.get(keys.USERNAME)
        if not server_url or not username:
            return None
        return SessionContext(
            server_url=str(server_url),
            username=str(username),
            allow_self_signed=allow_self_signed,
            password_key=PASSWORD_KEY,
        )

    def clear_credentials(self) -> None:
        self._preferences.delete(keys.SERVER_URL, keys.USERNAME)
        self._credentials.delete(PASSWORD_KEY)
        self._cache.purge()
        log.info("profile_cleared")

    def reset(self) -> None:
        """Return to a first-run state, lock settings included."""

        self._preferences.delete(*self._preferences.keys())
        self._credentials.clear_all()
        self._cache.purge()
        log.info("profile_reset")

    # ── Lock settings ────────────────────────────────────────────

    @property
    def lock_enabled(self) -> bool:
        return bool(self._preferences.get(keys.LOCK_ENABLED, False))

    def set_lock_enabled(self, enabled: bool, *, passcode: str | None = None) -> None:
        if passcode:
            self._preferences.set(keys.LOCK_PASSCODE_HASH, hash_passcode(passcode))
        if enabled and not self._preferences.get(keys.LOCK_PASSCODE_HASH):
            raise ValueError("A passcode is required before the lock can be enabled")
        self._preferences.set(keys.LOCK_ENABLED, enabled)

    def authenticator(self, *, offered: str | None) -> PasscodeAuthenticator:
        return PasscodeAuthenticator(
            passcode_hash=self._preferences.get(keys.LOCK_PASSCODE_HASH),
            offered=offered,
        )


# --- Module Notes -----------------------------------------------------------
# `allow_self_signed` is a parameter, never a stored preference, so a restart always
# returns to full certificate validation.
