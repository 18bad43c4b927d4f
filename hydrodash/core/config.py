from __future__ import annotations

import os

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hydrodash.clients.rapt import RAPT_API_URL, RAPT_AUTH_URL

DEFAULT_RATE_LIMIT_MESSAGE = "API limit reached, try again in 5 minutes"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="HYDRODASH_",
        case_sensitive=False,
    )

    env: str = Field(default="development")
    debug: bool = Field(default=False)
    docs_enabled: bool = Field(default=True)
    log_level: str = Field(default="INFO")

    secret_key: str = Field(min_length=32)
    session_cookie: str = Field(default="hydrodash_session", min_length=1, max_length=64)
    session_max_age_seconds: int = Field(default=60 * 60 * 8, ge=60, le=60 * 60 * 24 * 30)

    cors_origins: list[str] = Field(default_factory=list)
    trusted_hosts: list[str] = Field(default_factory=lambda: ["localhost", "127.0.0.1"])

    rapt_auth_url: AnyHttpUrl = Field(default=RAPT_AUTH_URL)
    rapt_api_url: AnyHttpUrl = Field(default=RAPT_API_URL)
    rapt_client_id: str = Field(default="rapt-user", min_length=1)
    rapt_username: str = Field(default="rapt@tuoto.xyz", min_length=1)
    rapt_portal_secret: str | None = Field(default=None)
    rapt_timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)

    rate_limit_message: str = Field(default=DEFAULT_RATE_LIMIT_MESSAGE, min_length=1)
    seed_revalidate_seconds: int = Field(default=60, ge=0, le=24 * 3600)
    max_views: int = Field(default=256, ge=1, le=10_000)

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


def load_settings() -> Settings:
    settings = Settings()
    if not settings.cors_origins:
        settings.cors_origins = ["http://localhost:3000", "http://localhost:8000"]
    if not settings.rapt_portal_secret:
        settings.rapt_portal_secret = os.getenv("RAPT_PORTAL_SECRET") or None
    return settings
