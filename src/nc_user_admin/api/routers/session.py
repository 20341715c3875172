"""
nc_user_admin.api.routers.session

Session lock endpoints.

Responsibilities:
- Report lock state and challenge availability.
- Run the unlock challenge and accept lifecycle transitions.
- Enable/disable the lock feature (only while unlocked).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_422_UNPROCESSABLE_CONTENT

from nc_user_admin.api.deps import require_unlocked, runtime_dep
from nc_user_admin.api.runtime import DirectoryRuntime
from nc_user_admin.lock.state_machine import AppPhase

router = APIRouter(prefix="/v1/session", tags=["session"])


class SessionResponse(BaseModel):
    state: str
    lock_enabled: bool
    modality: str
    message: str | None = None


class UnlockRequest(BaseModel):
    # Omitted passcode == the operator dismissed the prompt.
    passcode: str | None = None


class LifecycleRequest(BaseModel):
    phase: AppPhase


class LockSettingsRequest(BaseModel):
    enabled: bool
    passcode: str | None = Field(default=None, min_length=4, max_length=128)


def _describe(runtime: DirectoryRuntime, message: str | None = None) -> SessionResponse:
    return SessionResponse(
        state=runtime.lock.state.value,
        lock_enabled=runtime.lock.enabled,
        modality=runtime.profile.authenticator(offered=None).availability().value,
        message=message,
    )


@router.get("", response_model=SessionResponse)
async def get_session(runtime: DirectoryRuntime = Depends(runtime_dep)) -> SessionResponse:
    return _describe(runtime)


@router.post("/unlock", response_model=SessionResponse)
async def unlock(
    body: UnlockRequest,
    runtime: DirectoryRuntime = Depends(runtime_dep),
) -> SessionResponse:
    result = await runtime.lock.unlock(runtime.profile.authenticator(offered=body.passcode))
    return _describe(runtime, result.message)


@router.post("/lifecycle", response_model=SessionResponse)
async def lifecycle(
    body: LifecycleRequest,
    runtime: DirectoryRuntime = Depends(runtime_dep),
) -> SessionResponse:
    runtime.lock.on_lifecycle(body.phase)
    return _describe(runtime)


@router.put("/lock", response_model=SessionResponse)
async def configure_lock(
    body: LockSettingsRequest,
    runtime: DirectoryRuntime = Depends(require_unlocked),
) -> SessionResponse:
    try:
        runtime.profile.set_lock_enabled(body.enabled, passcode=body.passcode)
    except ValueError as e:
        raise HTTPException(status_code=HTTP_422_UNPROCESSABLE_CONTENT, detail=str(e)) from e
    runtime.lock.set_enabled(body.enabled)
    return _describe(runtime)
