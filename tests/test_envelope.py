"""
tests.test_envelope

Payload decoding: timestamp disambiguation, quota all-or-nothing, tolerant optional fields.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from nc_user_admin.ocs.envelope import (
    MILLISECONDS_THRESHOLD,
    QuotaPayload,
    decode_group_names,
    decode_user_detail,
    decode_user_ids,
    epoch_to_datetime,
)
from nc_user_admin.ocs.errors import DecodingFailure

from tests.fakes import ocs


def _raw(data: object) -> bytes:
    return json.dumps(ocs(data)).encode()


def test_epoch_seconds_and_milliseconds_resolve_to_same_instant() -> None:
    expected = datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)
    assert epoch_to_datetime(1_700_000_000) == expected
    assert epoch_to_datetime(1_700_000_000_000) == expected


@pytest.mark.parametrize(
    "raw, expected_seconds",
    [
        (MILLISECONDS_THRESHOLD, 10_000_000_000.0),
        (MILLISECONDS_THRESHOLD + 1, (MILLISECONDS_THRESHOLD + 1) / 1000.0),
        (1, 1.0),
    ],
)
def test_epoch_milliseconds_boundary(raw: int, expected_seconds: float) -> None:
    assert epoch_to_datetime(raw) == datetime.fromtimestamp(expected_seconds, tz=UTC)


@pytest.mark.parametrize("raw", [1e22, 1e30])
def test_epoch_out_of_range_is_value_error(raw: float) -> None:
    with pytest.raises(ValueError):
        epoch_to_datetime(raw)


@pytest.mark.parametrize("raw", [None, 0, -5])
def test_epoch_non_positive_means_never(raw: float | None) -> None:
    assert epoch_to_datetime(raw) is None


def test_user_ids_and_group_names() -> None:
    assert decode_user_ids(_raw({"users": ["alice", "bob"]})) == ["alice", "bob"]
    assert decode_group_names(_raw({"groups": ["admin", "staff"]})) == ["admin", "staff"]


def test_user_list_without_users_key_is_decoding_failure() -> None:
    with pytest.raises(DecodingFailure):
        decode_user_ids(_raw({"nope": []}))


def test_not_json_is_decoding_failure() -> None:
    with pytest.raises(DecodingFailure):
        decode_group_names(b"<html>maintenance</html>")


def test_minimal_detail_defaults() -> None:
    user = decode_user_detail(_raw({"id": "alice"}))
    assert user.user_id == "alice"
    assert user.enabled is False
    assert user.groups == ()
    assert user.display_name is None
    assert user.email is None
    assert user.quota is None
    assert user.last_login is None
    assert user.created_at is None
    assert user.label == "alice"


def test_full_detail() -> None:
    user = decode_user_detail(
        _raw(
            {
                "id": "alice",
                "enabled": True,
                "display-name": "Alice A.",
                "email": "alice@example.com",
                "groups": ["staff", "admin", "staff"],
                "quota": {"quota": -3, "used": 1024, "free": 2048, "relative": 0.5},
                "lastLogin": 1_700_000_000_000,
                "creation_timestamp": 1_600_000_000,
                "backend": "Database",
            }
        )
    )
    assert user.display_name == "Alice A."
    assert user.label == "Alice A."
    assert user.groups == ("admin", "staff")
    assert user.quota is not None and user.quota.is_unlimited
    assert user.quota.used == 1024
    assert user.last_login == datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)
    assert user.created_at == datetime.fromtimestamp(1_600_000_000, tz=UTC)
    assert user.backend == "Database"


def test_partial_quota_is_absent() -> None:
    user = decode_user_detail(_raw({"id": "bob", "quota": {"quota": 100, "used": 10}}))
    assert user.quota is None


def test_quota_as_empty_list_is_absent() -> None:
    user = decode_user_detail(_raw({"id": "bob", "quota": []}))
    assert user.quota is None


def test_non_numeric_quota_value_is_absent() -> None:
    user = decode_user_detail(
        _raw({"id": "bob", "quota": {"quota": "none", "used": 1, "free": 1, "relative": 0}})
    )
    assert user.quota is None


def test_detail_without_id_is_decoding_failure() -> None:
    with pytest.raises(DecodingFailure):
        decode_user_detail(_raw({"enabled": True}))


@pytest.mark.parametrize("field", ["lastLogin", "creation_timestamp"])
def test_out_of_range_timestamp_is_decoding_failure(field: str) -> None:
    with pytest.raises(DecodingFailure):
        decode_user_detail(_raw({"id": "bob", field: 1e22}))


def test_infinite_quota_value_is_rejected() -> None:
    payload = QuotaPayload(quota=float("inf"), used=1, free=1, relative=0)
    with pytest.raises(ValueError):
        payload.to_record()
