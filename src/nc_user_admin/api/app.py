"""
nc_user_admin.api.app

FastAPI app factory for the directory administration client.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (preferences engine, cache, credentials).
- Translate client/orchestrator failures into HTTP responses in one place.
"""

from __future__ import annotations

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_502_BAD_GATEWAY,
)

from nc_user_admin import __version__
from nc_user_admin.api.routers.directory import router as directory_router
from nc_user_admin.api.routers.health import router as health_router
from nc_user_admin.api.routers.profile import router as profile_router
from nc_user_admin.api.routers.session import router as session_router
from nc_user_admin.api.runtime import DirectoryRuntime
from nc_user_admin.cache.store import CacheStore
from nc_user_admin.credentials.store import CredentialStore, KeyringCredentialStore
from nc_user_admin.db.init_db import init_db
from nc_user_admin.db.repositories.preferences import PreferencesStore
from nc_user_admin.db.session import create_engine, create_sessionmaker
from nc_user_admin.observability.logging import configure_logging, get_logger
from nc_user_admin.observability.middleware import RequestContextMiddleware
from nc_user_admin.ocs.errors import ApiFailure, TransportFailure, Unauthorized
from nc_user_admin.ocs.session import PASSWORD_KEY
from nc_user_admin.settings import Settings
from nc_user_admin.sync.state import UnknownUserError

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    credentials: CredentialStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    app = FastAPI(
        title="Nextcloud User Administration",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(session_router)
    app.include_router(profile_router)
    app.include_router(directory_router)

    @app.exception_handler(ApiFailure)
    async def _api_failure(_: Request, exc: ApiFailure) -> JSONResponse:
        status_code = HTTP_502_BAD_GATEWAY
        if isinstance(exc, Unauthorized):
            status_code = HTTP_401_UNAUTHORIZED
        return JSONResponse(
            status_code=status_code,
            content={
                "detail": exc.message,
                "error": type(exc).__name__,
                "certificate_trust_issue": isinstance(exc, TransportFailure)
                and exc.is_certificate_trust_issue,
            },
        )

    @app.exception_handler(UnknownUserError)
    async def _unknown_user(_: Request, exc: UnknownUserError) -> JSONResponse:
        return JSONResponse(status_code=HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.on_event("startup")
    async def _startup() -> None:
        log.info("startup", env=settings.env, data_dir=str(settings.data_dir))
        engine = create_engine(settings)
        init_db(engine)
        app.state.engine = engine
        preferences = PreferencesStore(create_sessionmaker(engine))
        cache = CacheStore(
            directory=settings.cache_dir,
            preferences=preferences,
            freshness_seconds=settings.cache_freshness_seconds,
        )
        store = credentials
        if store is None:
            store = KeyringCredentialStore(
                service=settings.keyring_service, known_keys=(PASSWORD_KEY,)
            )
        app.state.runtime = DirectoryRuntime(
            settings=settings,
            preferences=preferences,
            cache=cache,
            credentials=store,
            transport=transport,
        )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        runtime = getattr(app.state, "runtime", None)
        if runtime is not None:
            await runtime.aclose()
        engine = getattr(app.state, "engine", None)
        if engine is not None:
            engine.dispose()
        log.info("shutdown")

    return app


# --- Module Notes -----------------------------------------------------------
# Composition only; sync semantics live in `sync.orchestrator`, trust and auth in
# `ocs.client`, and the lock gate in `api.deps`.
