"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret shared with the auth provider for signing JWT tokens",
        min_length=1,
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    realtime_token_ttl_seconds: int = Field(
        default=3600,
        description="Lifetime of the scoped tokens handed to realtime clients",
        gt=0,
    )
    presence_idle_seconds: int = Field(
        default=90,
        description="Seconds without a ping before a presence member is evicted",
        gt=0,
    )
    app_timezone: str = Field(
        default="Asia/Dhaka",
        description="Timezone used when rendering timestamps in payment metadata",
    )
    site_url: str = Field(
        default="http://localhost:3000",
        description="Public storefront URL used to build payment redirects",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    bkash_base_url: str | None = Field(
        default=None, description="Base URL of the bKash tokenized checkout API"
    )
    bkash_username: str | None = Field(default=None)
    bkash_password: str | None = Field(default=None)
    bkash_app_key: str | None = Field(default=None)
    bkash_app_secret: str | None = Field(default=None)

    @model_validator(mode="after")
    def _validate_bkash_credentials(self) -> "Settings":
        values = (
            self.bkash_base_url,
            self.bkash_username,
            self.bkash_password,
            self.bkash_app_key,
            self.bkash_app_secret,
        )
        if any(values) and not all(values):
            raise ValueError(
                "BKASH_BASE_URL, BKASH_USERNAME, BKASH_PASSWORD, BKASH_APP_KEY and "
                "BKASH_APP_SECRET must all be provided to enable bKash payments"
            )
        return self

    @property
    def bkash_enabled(self) -> bool:
        return bool(self.bkash_base_url)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
