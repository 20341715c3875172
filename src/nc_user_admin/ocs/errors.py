"""
nc_user_admin.ocs.errors

Typed failures raised by the OCS client.

Responsibilities:
- Represent each way a remote exchange can fail as a distinct exception type.
- Provide a human-readable `message` for surfacing to the operator.
"""

from __future__ import annotations

import json

_TRUST_HINT = (
    "The server's certificate is not trusted. Enable 'Allow Self-Signed Certificates' "
    "or install the certificate in the system trust store."
)


class ApiFailure(Exception):
    """Base class for all OCS client failures. Carries no retry state."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class InvalidEndpoint(ApiFailure):
    def __init__(self, url: str = "") -> None:
        self.url = url
        super().__init__("Invalid server URL")


class InvalidCredentialsFormat(ApiFailure):
    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class TransportFailure(ApiFailure):
    """
    DNS, timeout, refused connection or TLS failure.
    `is_certificate_trust_issue` separates trust problems from plain connectivity.
    """

    def __init__(self, cause: BaseException, *, is_certificate_trust_issue: bool = False) -> None:
        self.cause = cause
        self.is_certificate_trust_issue = is_certificate_trust_issue
        if is_certificate_trust_issue:
            message = f"TLS/SSL Error: {_TRUST_HINT}"
        else:
            message = f"Network error: {cause}"
        super().__init__(message)


class DecodingFailure(ApiFailure):
    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Failed to decode response: {cause}")


class ServerRejected(ApiFailure):
    """Any non-200, non-401 status. The message is derived from the body."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(_message_from_body(status_code, body))


class Unauthorized(ApiFailure):
    def __init__(self) -> None:
        super().__init__("Unauthorized. Please check your credentials.")


def _message_from_body(status_code: int, body: str) -> str:
    # OCS error bodies usually carry a meta.message; plain-text bodies are used verbatim.
    text = body.strip()
    if not text:
        return f"HTTP {status_code}"
    try:
        parsed = json.loads(text)
    except ValueError:
        return text
    ocs = parsed.get("ocs") if isinstance(parsed, dict) else None
    meta = ocs.get("meta") if isinstance(ocs, dict) else None
    if isinstance(meta, dict) and meta.get("message"):
        return str(meta["message"])
    return text


# --- Module Notes -----------------------------------------------------------
# Status precedence lives in `ocs.client`: 401 -> Unauthorized is checked before any
# other mapping, and decoding happens only after the status checks pass.
