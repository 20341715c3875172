"""
nc_user_admin.domain.models

Directory domain records.

Responsibilities:
- Model users, their optional quota, and groups as immutable values.
- Serve as the JSON encoding used by the local cache files.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class QuotaRecord(BaseModel):
    """
    Storage quota snapshot. A negative `total` means unlimited.
    """

    model_config = ConfigDict(frozen=True)

    total: int
    used: int
    free: int
    relative: float

    @property
    def is_unlimited(self) -> bool:
        return self.total < 0


class DirectoryUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(min_length=1)
    display_name: str | None = None
    email: str | None = None
    enabled: bool = False
    groups: tuple[str, ...] = ()
    quota: QuotaRecord | None = None
    last_login: datetime | None = None
    created_at: datetime | None = None
    backend: str | None = None

    @field_validator("groups", mode="before")
    @classmethod
    def _normalize_groups(cls, value: Iterable[str] | None) -> tuple[str, ...]:
        # Membership is a set; keep it sorted so snapshots serialize deterministically.
        if value is None:
            return ()
        return tuple(sorted(set(value)))

    @property
    def label(self) -> str:
        return self.display_name or self.user_id

    def in_group(self, group_name: str) -> bool:
        return group_name in self.groups


class DirectoryGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)


UserList = TypeAdapter(list[DirectoryUser])
GroupList = TypeAdapter(list[DirectoryGroup])


# --- Module Notes -----------------------------------------------------------
# Group membership is never stored per group; it is derived by scanning users
# (see `sync.views.group_members`).
