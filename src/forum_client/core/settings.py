"""Application settings and configuration.

This module defines all configuration options for the forum client.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Forum Client", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Remote backend (table API + object storage)
    backend_url: str = Field(default="http://localhost:54321", alias="FORUM_BACKEND_URL")
    backend_key: str | None = Field(default=None, alias="FORUM_BACKEND_KEY")
    storage_bucket: str = Field(default="post-images", alias="FORUM_STORAGE_BUCKET")
    http_timeout_seconds: float = Field(default=10.0, alias="FORUM_HTTP_TIMEOUT_SECONDS")

    # Image uploads are validated client-side before any network call
    max_image_bytes: int = Field(default=5 * 1024 * 1024, alias="MAX_IMAGE_BYTES")

    # Voter identity resolution
    trust_forwarded_for: bool = Field(default=True, alias="TRUST_FORWARDED_FOR")
    voter_cookie_max_age_seconds: int = Field(
        default=60 * 60 * 24 * 365,
        alias="VOTER_COOKIE_MAX_AGE_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def rest_url(self) -> str:
        """Return the base URL of the remote table API."""
        return f"{self.backend_url.rstrip('/')}/rest/v1"

    @property
    def storage_url(self) -> str:
        """Return the base URL of the remote object storage API."""
        return f"{self.backend_url.rstrip('/')}/storage/v1"


settings = Settings()
