"""
tests.test_session_lock

Lock state machine transitions and the passcode authenticator.
"""

from __future__ import annotations

import pytest

from nc_user_admin.lock.authenticator import (
    AuthModality,
    ChallengeOutcome,
    PasscodeAuthenticator,
    hash_passcode,
)
from nc_user_admin.lock.state_machine import (
    AppPhase,
    SessionLock,
    SessionLocked,
    SessionLockState,
)


class _ScriptedAuthenticator:
    def __init__(self, outcome: ChallengeOutcome) -> None:
        self.outcome = outcome
        self.reasons: list[str] = []

    def availability(self) -> AuthModality:
        return AuthModality.biometric

    async def challenge(self, reason: str) -> ChallengeOutcome:
        self.reasons.append(reason)
        return self.outcome


def test_initial_state_follows_feature_flag() -> None:
    assert SessionLock(enabled=True).state is SessionLockState.locked
    assert SessionLock(enabled=False).state is SessionLockState.unlocked


def test_guard_blocks_while_locked() -> None:
    lock = SessionLock(enabled=True)
    with pytest.raises(SessionLocked):
        lock.guard()
    SessionLock(enabled=False).guard()


@pytest.mark.asyncio
async def test_successful_challenge_unlocks() -> None:
    lock = SessionLock(enabled=True)
    auth = _ScriptedAuthenticator(ChallengeOutcome.succeeded())

    result = await lock.unlock(auth)

    assert result.state is SessionLockState.unlocked
    assert result.message is None
    assert auth.reasons == ["Unlock NC User Admin"]


@pytest.mark.asyncio
async def test_cancelled_challenge_is_silent() -> None:
    lock = SessionLock(enabled=True)

    result = await lock.unlock(_ScriptedAuthenticator(ChallengeOutcome.cancelled()))

    assert result.state is SessionLockState.locked
    assert result.message is None


@pytest.mark.asyncio
async def test_failed_challenge_reports_reason() -> None:
    lock = SessionLock(enabled=True)

    result = await lock.unlock(_ScriptedAuthenticator(ChallengeOutcome.failed("nope")))

    assert result.state is SessionLockState.locked
    assert result.message == "nope"


@pytest.mark.asyncio
async def test_unlock_when_already_unlocked_skips_challenge() -> None:
    lock = SessionLock(enabled=False)
    auth = _ScriptedAuthenticator(ChallengeOutcome.failed("should not run"))

    result = await lock.unlock(auth)

    assert result.state is SessionLockState.unlocked
    assert auth.reasons == []


@pytest.mark.asyncio
async def test_background_relocks_only_when_enabled() -> None:
    lock = SessionLock(enabled=True)
    await lock.unlock(_ScriptedAuthenticator(ChallengeOutcome.succeeded()))

    assert lock.on_lifecycle(AppPhase.inactive) is SessionLockState.unlocked
    assert lock.on_lifecycle(AppPhase.background) is SessionLockState.locked

    disabled = SessionLock(enabled=False)
    assert disabled.on_lifecycle(AppPhase.background) is SessionLockState.unlocked


def test_disabling_feature_unlocks() -> None:
    lock = SessionLock(enabled=True)
    lock.set_enabled(False)
    assert lock.state is SessionLockState.unlocked
    assert lock.on_lifecycle(AppPhase.background) is SessionLockState.unlocked


@pytest.mark.asyncio
async def test_passcode_authenticator() -> None:
    stored = hash_passcode("2468")

    unset_auth = PasscodeAuthenticator(passcode_hash=None, offered="2468")
    assert unset_auth.availability() is AuthModality.none
    stored_auth = PasscodeAuthenticator(passcode_hash=stored, offered=None)
    assert stored_auth.availability() is AuthModality.passcode

    ok = await PasscodeAuthenticator(passcode_hash=stored, offered="2468").challenge("r")
    wrong = await PasscodeAuthenticator(passcode_hash=stored, offered="1357").challenge("r")
    backed_out = await PasscodeAuthenticator(passcode_hash=stored, offered=None).challenge("r")
    unset = await PasscodeAuthenticator(passcode_hash=None, offered="2468").challenge("r")

    assert ok == ChallengeOutcome.succeeded()
    assert wrong == ChallengeOutcome.failed("Authentication failed. Please try again.")
    assert backed_out == ChallengeOutcome.cancelled()
    assert unset == ChallengeOutcome.failed("Please set up a device passcode first")
