"""
tests.test_logging

Secret scrubbing in the structlog processor chain.
"""

from __future__ import annotations

from nc_user_admin.observability.logging import _redact_secrets


def test_secret_keys_are_masked() -> None:
    event = {"event": "profile_saved", "password": "pw", "Authorization": "Basic x", "user": "a"}

    scrubbed = _redact_secrets(None, "info", dict(event))

    assert scrubbed == {
        "event": "profile_saved",
        "password": "***",
        "Authorization": "***",
        "user": "a",
    }
