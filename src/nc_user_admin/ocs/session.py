"""
nc_user_admin.ocs.session

Explicit session context passed into the transport client and orchestrator.

Responsibilities:
- Carry the active server URL, username and the per-session trust decision.
- Never carry the password (read from the credential store per request).
"""

from __future__ import annotations

from dataclasses import dataclass

PASSWORD_KEY = "nextcloud_password"


@dataclass(frozen=True, slots=True)
class SessionContext:
    server_url: str
    username: str
    # Explicit trust downgrade; scoped to this session value only.
    allow_self_signed: bool = False
    password_key: str = PASSWORD_KEY


# --- Module Notes -----------------------------------------------------------
# A credential change produces a new SessionContext (and a new client), so nothing
# about the trust decision survives past it.
