"""
crm_api.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration (prefix `CRM_`), defaults safe for local dev.
    """

    model_config = SettingsConfigDict(env_prefix="CRM_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables and dev tokens.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "crm-api"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "crm-api"
    jwt_audience: str = "crm-frontend"
    jwt_secret: str = Field(default="dev-secret-change-me-32-bytes-min", repr=False)
    jwt_access_minutes: int = 15

    # Authorization: role tag that bypasses ownership checks (compared case-insensitively).
    admin_role: str = "Admin"

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./crm.db"

    # Observability
    correlation_header: str = "Correlation-Id"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Every layer reads configuration through `get_settings()`; tests pass an explicit
# `Settings(...)` into `create_app` instead.
