"""
nc_user_admin.credentials.store

Secret persistence for the single active profile.

Responsibilities:
- `CredentialStore` protocol: save/load/delete/clear_all.
- `KeyringCredentialStore`: platform keychain via `keyring`; failures are logged, not raised.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from nc_user_admin.observability.logging import get_logger

log = get_logger(__name__)


class CredentialStore(Protocol):
    def save(self, key: str, secret: str) -> None: ...

    def load(self, key: str) -> str | None: ...

    def delete(self, key: str) -> None: ...

    def clear_all(self) -> None: ...


class KeyringCredentialStore:
    """
    Hardware/OS-backed secret storage scoped to one keyring service name.
    """

    def __init__(self, *, service: str, known_keys: Iterable[str] = ()) -> None:
        self._service = service
        # keyring has no "list keys" API; clear_all covers the declared keys plus
        # whatever this process wrote.
        self._known: set[str] = set(known_keys)

    def save(self, key: str, secret: str) -> None:
        try:
            keyring.set_password(self._service, key, secret)
            self._known.add(key)
        except KeyringError as e:
            log.warning("credential_save_failed", key=key, error=str(e))

    def load(self, key: str) -> str | None:
        try:
            return keyring.get_password(self._service, key)
        except KeyringError as e:
            log.warning("credential_load_failed", key=key, error=str(e))
            return None

    def delete(self, key: str) -> None:
        try:
            keyring.delete_password(self._service, key)
        except PasswordDeleteError:
            # Already absent.
            pass
        except KeyringError as e:
            log.warning("credential_delete_failed", key=key, error=str(e))
        self._known.discard(key)

    def clear_all(self) -> None:
        for key in list(self._known):
            self.delete(key)


# --- Module Notes -----------------------------------------------------------
# Tests substitute an in-memory implementation of `CredentialStore` (see tests/conftest.py).
