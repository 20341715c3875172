"""
nc_user_admin.lock.authenticator

Local authentication challenge boundary.

Responsibilities:
- Describe challenge outcomes (success / cancelled / failed with reason).
- Report availability/modality separately from the challenge itself.
- Provide a device-passcode authenticator backed by a bcrypt hash.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Protocol

import bcrypt


class AuthModality(enum.StrEnum):
    none = "none"
    passcode = "passcode"
    biometric = "biometric"


class ChallengeStatus(enum.StrEnum):
    success = "success"
    cancelled = "cancelled"
    failed = "failed"


@dataclass(frozen=True, slots=True)
class ChallengeOutcome:
    status: ChallengeStatus
    reason: str | None = None

    @classmethod
    def succeeded(cls) -> ChallengeOutcome:
        return cls(ChallengeStatus.success)

    @classmethod
    def cancelled(cls) -> ChallengeOutcome:
        return cls(ChallengeStatus.cancelled)

    @classmethod
    def failed(cls, reason: str) -> ChallengeOutcome:
        return cls(ChallengeStatus.failed, reason)


class Authenticator(Protocol):
    def availability(self) -> AuthModality: ...

    async def challenge(self, reason: str) -> ChallengeOutcome: ...


def hash_passcode(passcode: str) -> str:
    return bcrypt.hashpw(passcode.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


class PasscodeAuthenticator:
    """
    Passcode fallback: compares the passcode offered for this attempt against the
    stored hash. No passcode offered means the operator backed out.
    """

    def __init__(self, *, passcode_hash: str | None, offered: str | None) -> None:
        self._passcode_hash = passcode_hash
        self._offered = offered

    def availability(self) -> AuthModality:
        return AuthModality.passcode if self._passcode_hash else AuthModality.none

    async def challenge(self, reason: str) -> ChallengeOutcome:
        if not self._passcode_hash:
            return ChallengeOutcome.failed("Please set up a device passcode first")
        if self._offered is None:
            return ChallengeOutcome.cancelled()
        matched = bcrypt.checkpw(
            self._offered.encode("utf-8"),
            self._passcode_hash.encode("utf-8"),
        )
        if not matched:
            return ChallengeOutcome.failed("Authentication failed. Please try again.")
        return ChallengeOutcome.succeeded()


# --- Module Notes -----------------------------------------------------------
# Platform biometric prompts implement the same `Authenticator` protocol; only the
# passcode variant ships here.
