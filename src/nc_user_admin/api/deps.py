"""
nc_user_admin.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide the runtime dependency.
- Enforce the session lock before any orchestrator/credential access.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from starlette.status import HTTP_409_CONFLICT, HTTP_423_LOCKED

from nc_user_admin.api.runtime import DirectoryRuntime
from nc_user_admin.lock.state_machine import SessionLocked
from nc_user_admin.sync.orchestrator import DirectorySyncOrchestrator


def runtime_dep(request: Request) -> DirectoryRuntime:
    # Created on app startup in `nc_user_admin.api.app.create_app`.
    return request.app.state.runtime  # type: ignore[attr-defined]


def require_unlocked(runtime: DirectoryRuntime = Depends(runtime_dep)) -> DirectoryRuntime:
    try:
        runtime.lock.guard()
    except SessionLocked as e:
        raise HTTPException(status_code=HTTP_423_LOCKED, detail=str(e)) from e
    return runtime


def orchestrator_dep(
    runtime: DirectoryRuntime = Depends(require_unlocked),
) -> DirectorySyncOrchestrator:
    orchestrator = runtime.orchestrator()
    if orchestrator is None:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="No server profile configured")
    return orchestrator


# --- Module Notes -----------------------------------------------------------
# Every directory/profile route depends on `require_unlocked`; the orchestrator has no
# lock awareness of its own.
