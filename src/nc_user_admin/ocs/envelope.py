"""
nc_user_admin.ocs.envelope

OCS response envelope models and payload decoding.

Responsibilities:
- Unwrap `{"ocs": {"meta": ..., "data": ...}}` generically per payload type.
- Convert the user detail payload into a `DirectoryUser`, tolerating absent optional fields.
- Disambiguate second/millisecond epoch timestamps.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError, field_validator

from nc_user_admin.domain.models import DirectoryUser, QuotaRecord
from nc_user_admin.ocs.errors import DecodingFailure

# Anything above this is past year 2286 in seconds, so it must be milliseconds.
MILLISECONDS_THRESHOLD = 10_000_000_000

T = TypeVar("T")


class OcsMeta(BaseModel):
    status: str
    statuscode: int
    message: str | None = None


class OcsBody(BaseModel, Generic[T]):
    meta: OcsMeta
    data: T


class OcsEnvelope(BaseModel, Generic[T]):
    ocs: OcsBody[T]


class UserIdsData(BaseModel):
    users: list[str]


class GroupNamesData(BaseModel):
    groups: list[str]


class QuotaPayload(BaseModel):
    quota: float | None = None
    used: float | None = None
    free: float | None = None
    relative: float | None = None

    @field_validator("quota", "used", "free", "relative", mode="before")
    @classmethod
    def _numeric_or_none(cls, value: Any) -> float | None:
        # Servers occasionally send "none" or other markers; treat them as absent.
        if isinstance(value, bool) or value is None:
            return None
        if isinstance(value, (int, float)):
            return value
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return None
        return None

    def to_record(self) -> QuotaRecord | None:
        if self.quota is None or self.used is None or self.free is None or self.relative is None:
            return None
        try:
            return QuotaRecord(
                total=int(self.quota),
                used=int(self.used),
                free=int(self.free),
                relative=float(self.relative),
            )
        except OverflowError as e:
            # inf has no integer form; nan already raises ValueError.
            raise ValueError(f"quota value out of range: {self.model_dump()}") from e


class UserDetailPayload(BaseModel):
    id: str | None = None
    enabled: bool | None = None
    displayname: str | None = Field(
        default=None, validation_alias=AliasChoices("displayname", "display-name")
    )
    email: str | None = None
    groups: list[str] | None = None
    quota: QuotaPayload | None = None
    last_login: float | None = Field(default=None, validation_alias="lastLogin")
    creation_timestamp: float | None = None
    backend: str | None = None

    @field_validator("quota", mode="before")
    @classmethod
    def _quota_object_only(cls, value: Any) -> Any:
        # An empty quota comes back as [] from some server versions.
        return value if isinstance(value, dict) else None

    def to_user(self) -> DirectoryUser:
        if not self.id:
            raise ValueError("user detail payload is missing its id")
        return DirectoryUser(
            user_id=self.id,
            display_name=self.displayname,
            email=self.email,
            enabled=bool(self.enabled) if self.enabled is not None else False,
            groups=self.groups or (),
            quota=self.quota.to_record() if self.quota is not None else None,
            last_login=epoch_to_datetime(self.last_login),
            created_at=epoch_to_datetime(self.creation_timestamp),
            backend=self.backend,
        )


def epoch_to_datetime(raw: float | None) -> datetime | None:
    """
    Seconds or milliseconds since epoch -> aware UTC datetime.

    Zero or negative means "never happened", not 1970. Values past the platform's
    datetime range raise ValueError, which decoding turns into a DecodingFailure.
    """

    if raw is None or raw <= 0:
        return None
    seconds = raw / 1000.0 if raw > MILLISECONDS_THRESHOLD else float(raw)
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"timestamp out of range: {raw}") from e


_USER_IDS = TypeAdapter(OcsEnvelope[UserIdsData])
_GROUP_NAMES = TypeAdapter(OcsEnvelope[GroupNamesData])
_USER_DETAIL = TypeAdapter(OcsEnvelope[UserDetailPayload])


def decode_user_ids(raw: bytes) -> list[str]:
    try:
        return _USER_IDS.validate_json(raw).ocs.data.users
    except ValidationError as e:
        raise DecodingFailure(e) from e


def decode_group_names(raw: bytes) -> list[str]:
    try:
        return _GROUP_NAMES.validate_json(raw).ocs.data.groups
    except ValidationError as e:
        raise DecodingFailure(e) from e


def decode_user_detail(raw: bytes) -> DirectoryUser:
    try:
        return _USER_DETAIL.validate_json(raw).ocs.data.to_user()
    except (ValidationError, ValueError) as e:
        raise DecodingFailure(e) from e


# --- Module Notes -----------------------------------------------------------
# Every optional field in the detail payload may be missing independently; only a
# missing id is a decoding failure.
