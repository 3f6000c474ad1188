"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, Field, RedisDsn, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The Shopify credentials, the public host URL and the session secret have no
    defaults: constructing ``Settings`` without them raises, so a misconfigured
    process stops at startup instead of serving with placeholder credentials.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # API
    api_prefix: str = "/api"
    project_name: str = "Privacy Popup"
    version: str = "1.0.0"

    # Shopify
    shopify_api_key: str = Field(..., min_length=1)
    shopify_api_secret: str = Field(..., min_length=1)
    scopes: str = "write_themes,read_themes"
    shopify_api_version: str = "2024-10"
    shopify_http_timeout_seconds: float = 25.0

    # Public URL the app is served from (Shopify redirects back here)
    host: AnyHttpUrl

    # Session
    session_secret: str = Field(..., min_length=16)
    session_cookie_name: str = "privacy_popup_session"
    session_cookie_max_age: int = 60 * 60 * 24

    # Storage (in-memory when unset)
    redis_url: RedisDsn | None = None

    # Requests
    request_timeout_seconds: float = 25.0

    # Observability
    sentry_dsn: str = ""

    # CORS
    cors_origins: list[str] = [
        "https://admin.shopify.com",
    ]

    @field_validator("shopify_api_key", "shopify_api_secret", "session_secret")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def app_url(self) -> str:
        """Host URL without a trailing slash."""
        return str(self.host).rstrip("/")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def scope_list(self) -> list[str]:
        """Requested OAuth scopes as a list."""
        return [s.strip() for s in self.scopes.split(",") if s.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]


settings = get_settings()
