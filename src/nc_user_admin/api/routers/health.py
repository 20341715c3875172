"""
nc_user_admin.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) with preferences-store connectivity validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from nc_user_admin.api.deps import runtime_dep
from nc_user_admin.api.runtime import DirectoryRuntime

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(runtime: DirectoryRuntime = Depends(runtime_dep)) -> dict[str, str]:
    runtime.preferences.ping()
    return {"status": "ready"}


# --- Module Notes -----------------------------------------------------------
# Neither probe touches the remote server or the lock state.
