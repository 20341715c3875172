"""
nc_user_admin.api.routers.profile

Server profile and cache maintenance endpoints (lock-gated).

Responsibilities:
- Save the active server profile and start a fresh session for it.
- Clear credentials (which also purges the cache) or purge the cache alone.
- Reset to a first-run state.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_422_UNPROCESSABLE_CONTENT

from nc_user_admin.api.deps import require_unlocked
from nc_user_admin.api.runtime import DirectoryRuntime

router = APIRouter(prefix="/v1", tags=["profile"])


class ProfileRequest(BaseModel):
    server_url: str = Field(min_length=1, max_length=2048)
    username: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=1, repr=False)
    allow_self_signed: bool = False


class ProfileResponse(BaseModel):
    configured: bool
    server_url: str | None = None
    username: str | None = None
    allow_self_signed: bool = False


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(runtime: DirectoryRuntime = Depends(require_unlocked)) -> ProfileResponse:
    session = runtime.profile.session_context(allow_self_signed=runtime.allow_self_signed)
    if session is None:
        return ProfileResponse(configured=False)
    return ProfileResponse(
        configured=True,
        server_url=session.server_url,
        username=session.username,
        allow_self_signed=session.allow_self_signed,
    )


@router.put("/profile", response_model=ProfileResponse)
async def save_profile(
    body: ProfileRequest,
    runtime: DirectoryRuntime = Depends(require_unlocked),
) -> ProfileResponse:
    try:
        runtime.profile.save(
            server_url=body.server_url, username=body.username, password=body.password
        )
    except ValueError as e:
        raise HTTPException(status_code=HTTP_422_UNPROCESSABLE_CONTENT, detail=str(e)) from e
    runtime.reset_session(allow_self_signed=body.allow_self_signed)
    return await get_profile(runtime)


@router.delete("/profile", response_model=ProfileResponse)
async def clear_profile(runtime: DirectoryRuntime = Depends(require_unlocked)) -> ProfileResponse:
    runtime.profile.clear_credentials()
    runtime.drop_session()
    return ProfileResponse(configured=False)


@router.post("/reset", response_model=ProfileResponse)
async def reset(runtime: DirectoryRuntime = Depends(require_unlocked)) -> ProfileResponse:
    runtime.profile.reset()
    runtime.lock.set_enabled(False)
    runtime.drop_session()
    return ProfileResponse(configured=False)


@router.delete("/cache")
async def clear_cache(runtime: DirectoryRuntime = Depends(require_unlocked)) -> dict[str, str]:
    runtime.cache.purge()
    return {"status": "cleared"}
