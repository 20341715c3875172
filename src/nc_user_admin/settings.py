"""
nc_user_admin.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Keep secrets out of settings entirely (the password lives in the credential store).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single settings object injected across layers:
    - transport budgets and API prefix for the OCS client
    - on-disk locations for cache files and the preferences store
    - presentation server bind address
    """

    model_config = SettingsConfigDict(env_prefix="NCUA_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "nc-user-admin"
    log_level: str = "INFO"

    api_host: str = "127.0.0.1"
    api_port: int = 8080

    # Persistence
    data_dir: Path = Path("./.ncua")
    cache_dir: Path | None = None
    preferences_url: str | None = None

    # Remote API
    ocs_prefix: str = "ocs/v2.php"
    user_agent: str = "NCUserAdmin/1.0"
    request_timeout_seconds: float = 30.0
    resource_timeout_seconds: float = 60.0

    # Cache + presentation feedback
    cache_freshness_seconds: float = Field(default=3600.0, gt=0)
    success_message_seconds: float = Field(default=3.0, ge=0)

    # Platform credential store
    keyring_service: str = "com.nextcloud.usermanagement"

    @model_validator(mode="after")
    def _derive_paths(self) -> Settings:
        # Both locations hang off data_dir unless configured explicitly.
        if self.cache_dir is None:
            self.cache_dir = self.data_dir / "cache"
        if self.preferences_url is None:
            self.preferences_url = f"sqlite:///{self.data_dir / 'preferences.db'}"
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Trust downgrades (self-signed certificates) are deliberately not a setting: they are
# chosen per session and carried by `ocs.session.SessionContext` only.
