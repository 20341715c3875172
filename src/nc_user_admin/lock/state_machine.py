"""
nc_user_admin.lock.state_machine

Session lock state machine.

Responsibilities:
- Start Locked when the lock feature is enabled, Unlocked otherwise.
- Lock on background transitions (only while the feature is enabled).
- Unlock on a successful local authentication challenge.
- Gate presentation access via `guard()`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from nc_user_admin.lock.authenticator import Authenticator, ChallengeStatus
from nc_user_admin.observability.logging import get_logger

log = get_logger(__name__)

UNLOCK_REASON = "Unlock NC User Admin"


class SessionLockState(enum.StrEnum):
    locked = "LOCKED"
    unlocked = "UNLOCKED"


class AppPhase(enum.StrEnum):
    active = "active"
    inactive = "inactive"
    background = "background"


class SessionLocked(Exception):
    """Raised when orchestrator/credential access is attempted while locked."""


@dataclass(frozen=True, slots=True)
class UnlockResult:
    state: SessionLockState
    # None for success and for a user cancellation (silent no-op).
    message: str | None = None


class SessionLock:
    def __init__(self, *, enabled: bool) -> None:
        self._enabled = enabled
        self._state = SessionLockState.locked if enabled else SessionLockState.unlocked

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def state(self) -> SessionLockState:
        return self._state

    @property
    def is_locked(self) -> bool:
        return self._state is SessionLockState.locked

    def guard(self) -> None:
        if self.is_locked:
            raise SessionLocked("Session is locked")

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        if not enabled and self.is_locked:
            self._transition(SessionLockState.unlocked, cause="feature_disabled")
        log.info("session_lock_configured", enabled=enabled, state=self._state.value)

    def on_lifecycle(self, phase: AppPhase) -> SessionLockState:
        if phase is AppPhase.background and self._enabled:
            self._transition(SessionLockState.locked, cause="background")
        return self._state

    async def unlock(
        self, authenticator: Authenticator, *, reason: str = UNLOCK_REASON
    ) -> UnlockResult:
        if not self.is_locked:
            return UnlockResult(self._state)

        outcome = await authenticator.challenge(reason)
        if outcome.status is ChallengeStatus.success:
            self._transition(SessionLockState.unlocked, cause="challenge_passed")
            return UnlockResult(self._state)
        if outcome.status is ChallengeStatus.cancelled:
            log.info("session_unlock_cancelled")
            return UnlockResult(self._state)

        log.warning("session_unlock_failed", reason=outcome.reason)
        return UnlockResult(self._state, outcome.reason or "Authentication failed")

    def _transition(self, target: SessionLockState, *, cause: str) -> None:
        if target is self._state:
            return
        log.info("session_lock_transition", frm=self._state.value, to=target.value, cause=cause)
        self._state = target


# --- Module Notes -----------------------------------------------------------
# The orchestrator itself never checks the lock; callers at the boundary call `guard()`.
