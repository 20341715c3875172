"""
nc_user_admin.ocs.client

HTTP client boundary used by the sync orchestrator to call the OCS provisioning API.

Responsibilities:
- Build one authenticated request per logical operation under `<server>/<prefix>/cloud`.
- Read the password from the credential store at call time (never kept on the client).
- Apply the session's trust policy per connection.
- Map every outcome into a domain value or an `ApiFailure`.
"""

from __future__ import annotations

import asyncio
import base64
import ssl
from urllib.parse import quote, urlencode

import httpx

from nc_user_admin.credentials.store import CredentialStore
from nc_user_admin.domain.models import DirectoryUser
from nc_user_admin.observability.logging import get_logger
from nc_user_admin.ocs.envelope import decode_group_names, decode_user_detail, decode_user_ids
from nc_user_admin.ocs.errors import (
    InvalidCredentialsFormat,
    InvalidEndpoint,
    ServerRejected,
    TransportFailure,
    Unauthorized,
)
from nc_user_admin.ocs.session import SessionContext
from nc_user_admin.settings import Settings

log = get_logger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class OcsClient:
    """
    One instance per SessionContext. Each exchange opens its own connection so the
    trust decision is evaluated per connection and never outlives the session value.
    """

    def __init__(
        self,
        *,
        session: SessionContext,
        credentials: CredentialStore,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._session = session
        self._credentials = credentials
        self._settings = settings
        # Tests inject httpx.MockTransport; production uses the default pool.
        self._transport = transport

    @property
    def session(self) -> SessionContext:
        return self._session

    # ── Users ────────────────────────────────────────────────────

    async def list_user_ids(self) -> list[str]:
        r = await self._exchange("GET", "users")
        return decode_user_ids(r.content)

    async def fetch_user(self, user_id: str) -> DirectoryUser:
        r = await self._exchange("GET", f"users/{_segment(user_id)}")
        return decode_user_detail(r.content)

    async def enable_user(self, user_id: str) -> None:
        await self._exchange("PUT", f"users/{_segment(user_id)}/enable")

    async def disable_user(self, user_id: str) -> None:
        await self._exchange("PUT", f"users/{_segment(user_id)}/disable")

    async def add_to_group(self, user_id: str, group: str) -> None:
        await self._exchange("POST", f"users/{_segment(user_id)}/groups", form={"groupid": group})

    async def remove_from_group(self, user_id: str, group: str) -> None:
        await self._exchange(
            "DELETE", f"users/{_segment(user_id)}/groups", form={"groupid": group}
        )

    # ── Groups ───────────────────────────────────────────────────

    async def list_group_names(self) -> list[str]:
        r = await self._exchange("GET", "groups")
        return decode_group_names(r.content)

    # ── Internal helpers ─────────────────────────────────────────

    def _endpoint(self, path: str) -> str:
        raw = self._session.server_url.strip()
        try:
            url = httpx.URL(raw)
        except (httpx.InvalidURL, TypeError) as e:
            raise InvalidEndpoint(raw) from e
        if url.scheme != "https" or not url.host:
            raise InvalidEndpoint(raw)
        prefix = self._settings.ocs_prefix.strip("/")
        return f"{str(url).rstrip('/')}/{prefix}/cloud/{path}"

    def _headers(self, *, method: str) -> dict[str, str]:
        username = self._session.username
        password = self._credentials.load(self._session.password_key)
        if not username or ":" in username or password is None:
            raise InvalidCredentialsFormat()

        token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        headers = {
            "Authorization": f"Basic {token}",
            "Accept": "application/json",
            "OCS-APIRequest": "true",
            "User-Agent": self._settings.user_agent,
        }
        if method != "GET":
            headers["Content-Type"] = FORM_CONTENT_TYPE
        return headers

    def _ssl_context(self) -> ssl.SSLContext:
        ctx = ssl.create_default_context()
        ctx.minimum_version = ssl.TLSVersion.TLSv1_2
        ctx.maximum_version = ssl.TLSVersion.TLSv1_3
        if self._session.allow_self_signed:
            # Explicit, session-scoped trust downgrade: accept the presented certificate.
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
        return ctx

    def _open(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            verify=self._ssl_context(),
            timeout=httpx.Timeout(self._settings.request_timeout_seconds),
            transport=self._transport,
        )

    async def _exchange(
        self,
        method: str,
        path: str,
        *,
        form: dict[str, str] | None = None,
    ) -> httpx.Response:
        # Construction failures surface before any network activity.
        url = self._endpoint(path)
        headers = self._headers(method=method)
        content = urlencode(form) if form is not None else None

        try:
            async with asyncio.timeout(self._settings.resource_timeout_seconds):
                async with self._open() as http:
                    r = await http.request(method, url, headers=headers, content=content)
        except (httpx.TransportError, TimeoutError) as e:
            trust = _is_certificate_trust_issue(e)
            log.warning(
                "ocs_transport_failed",
                method=method,
                path=path,
                error=str(e),
                certificate_trust_issue=trust,
            )
            raise TransportFailure(e, is_certificate_trust_issue=trust) from e

        log.debug("ocs_exchange", method=method, path=path, status_code=r.status_code)
        # 401 wins over everything else, whatever the body looks like.
        if r.status_code == 401:
            raise Unauthorized()
        if r.status_code != 200:
            raise ServerRejected(r.status_code, r.text)
        return r


def _segment(value: str) -> str:
    if not value:
        raise InvalidEndpoint(value)
    return quote(value, safe="")


def _is_certificate_trust_issue(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ssl.SSLCertVerificationError):
            return True
        if "CERTIFICATE_VERIFY_FAILED" in str(current):
            return True
        current = current.__cause__ or current.__context__
    return False


# --- Module Notes -----------------------------------------------------------
# No retries at this layer; the orchestrator decides what a failure means.
