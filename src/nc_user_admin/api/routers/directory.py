"""
nc_user_admin.api.routers.directory

Directory endpoints (users, groups, sync status, membership mutations).

Responsibilities:
- Trigger a sync cycle (awaited or in the background) and report its status.
- Serve filtered/sorted user lists and group lists with derived member counts.
- Forward enable/disable and membership changes to the orchestrator.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field
from starlette.status import HTTP_202_ACCEPTED

from nc_user_admin.api.deps import orchestrator_dep, runtime_dep
from nc_user_admin.api.runtime import DirectoryRuntime
from nc_user_admin.domain.models import DirectoryUser, QuotaRecord
from nc_user_admin.sync import views
from nc_user_admin.sync.orchestrator import DirectorySyncOrchestrator
from nc_user_admin.sync.state import UnknownUserError

router = APIRouter(prefix="/v1/directory", tags=["directory"])


class StatusResponse(BaseModel):
    is_loading: bool
    outcome: str
    error_message: str | None
    success_message: str | None
    skipped_user_ids: list[str]
    user_count: int
    group_count: int


class UserView(BaseModel):
    user_id: str
    label: str
    display_name: str | None
    email: str | None
    enabled: bool
    groups: list[str]
    quota: QuotaRecord | None
    last_login: datetime | None
    created_at: datetime | None
    backend: str | None

    @classmethod
    def of(cls, user: DirectoryUser) -> UserView:
        return cls(
            user_id=user.user_id,
            label=user.label,
            display_name=user.display_name,
            email=user.email,
            enabled=user.enabled,
            groups=list(user.groups),
            quota=user.quota,
            last_login=user.last_login,
            created_at=user.created_at,
            backend=user.backend,
        )


class UserDetailResponse(BaseModel):
    user: UserView
    assignable_groups: list[str]


class GroupView(BaseModel):
    name: str
    member_count: int


class MembershipRequest(BaseModel):
    group: str = Field(min_length=1, max_length=256)


def _status(orchestrator: DirectorySyncOrchestrator) -> StatusResponse:
    snap = orchestrator.status()
    return StatusResponse(
        is_loading=snap.is_loading,
        outcome=snap.outcome.value,
        error_message=snap.error_message,
        success_message=snap.success_message,
        skipped_user_ids=list(snap.skipped_user_ids),
        user_count=snap.user_count,
        group_count=snap.group_count,
    )


@router.post("/load", response_model=StatusResponse)
async def load(
    response: Response,
    force_refresh: bool = False,
    wait: bool = True,
    runtime: DirectoryRuntime = Depends(runtime_dep),
    orchestrator: DirectorySyncOrchestrator = Depends(orchestrator_dep),
) -> StatusResponse:
    if wait:
        await orchestrator.load_all(force_refresh=force_refresh)
    else:
        runtime.spawn(orchestrator.load_all(force_refresh=force_refresh))
        response.status_code = HTTP_202_ACCEPTED
    return _status(orchestrator)


@router.get("/status", response_model=StatusResponse)
async def status(
    orchestrator: DirectorySyncOrchestrator = Depends(orchestrator_dep),
) -> StatusResponse:
    return _status(orchestrator)


@router.get("/users", response_model=list[UserView])
async def list_users(
    status_filter: views.UserFilter = Query(default=views.UserFilter.all, alias="filter"),
    search: str = Query(default="", max_length=256),
    sort: views.UserSortOrder = Query(default=views.UserSortOrder.identifier),
    orchestrator: DirectorySyncOrchestrator = Depends(orchestrator_dep),
) -> list[UserView]:
    users = orchestrator.filtered_users(status=status_filter, search=search, order=sort)
    return [UserView.of(u) for u in users]


@router.get("/users/{user_id}", response_model=UserDetailResponse)
async def get_user(
    user_id: str,
    orchestrator: DirectorySyncOrchestrator = Depends(orchestrator_dep),
) -> UserDetailResponse:
    user = orchestrator.user(user_id)
    if user is None:
        raise UnknownUserError(user_id)
    return UserDetailResponse(
        user=UserView.of(user),
        assignable_groups=[g.name for g in views.assignable_groups(user, orchestrator.groups)],
    )


@router.post("/users/{user_id}/toggle", response_model=UserView)
async def toggle_user(
    user_id: str,
    orchestrator: DirectorySyncOrchestrator = Depends(orchestrator_dep),
) -> UserView:
    return UserView.of(await orchestrator.toggle_enabled(user_id))


@router.post("/users/{user_id}/groups", response_model=UserView)
async def add_membership(
    user_id: str,
    body: MembershipRequest,
    orchestrator: DirectorySyncOrchestrator = Depends(orchestrator_dep),
) -> UserView:
    return UserView.of(await orchestrator.add_to_group(user_id, body.group))


@router.delete("/users/{user_id}/groups/{group}", response_model=UserView)
async def remove_membership(
    user_id: str,
    group: str,
    orchestrator: DirectorySyncOrchestrator = Depends(orchestrator_dep),
) -> UserView:
    return UserView.of(await orchestrator.remove_from_group(user_id, group))


@router.get("/groups", response_model=list[GroupView])
async def list_groups(
    search: str = Query(default="", max_length=256),
    orchestrator: DirectorySyncOrchestrator = Depends(orchestrator_dep),
) -> list[GroupView]:
    counts = orchestrator.group_member_counts()
    return [
        GroupView(name=g.name, member_count=counts.get(g.name, 0))
        for g in orchestrator.filtered_groups(search)
    ]


@router.get("/groups/{group}/members", response_model=list[UserView])
async def list_members(
    group: str,
    orchestrator: DirectorySyncOrchestrator = Depends(orchestrator_dep),
) -> list[UserView]:
    return [UserView.of(u) for u in orchestrator.group_members(group)]


# --- Module Notes -----------------------------------------------------------
# Failures raised by the orchestrator (ApiFailure, UnknownUserError) are translated to
# HTTP responses by the handlers registered in `api.app`.
