"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .services.rate_limiter import RateLimiterConfig


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="FanartPicks", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    language: str = Field(default="en", alias="LANGUAGE")

    fanart_api_url: HttpUrl = Field(
        default="http://webservice.fanart.tv", alias="FANART_API_URL"
    )
    fanart_api_version: str = Field(default="v3", alias="FANART_API_VERSION")
    fanart_api_key: str | None = Field(default=None, alias="FANART_API_KEY")
    fanart_auth_retries: int = Field(
        default=1, alias="FANART_AUTH_RETRIES", ge=0, le=5
    )
    fanart_cache_ttl_seconds: int = Field(
        default=604_800, alias="FANART_CACHE_TTL", ge=60
    )

    fanart_rate_burst: int = Field(default=50, alias="FANART_RATE_BURST", ge=1)
    fanart_rate_window_seconds: float = Field(
        default=10.0, alias="FANART_RATE_WINDOW", gt=0
    )
    fanart_concurrency: int = Field(default=25, alias="FANART_CONCURRENCY", ge=1)
    fanart_cooldown_seconds: float = Field(
        default=30.0, alias="FANART_COOLDOWN", ge=0
    )
    fanart_acquire_timeout_seconds: float | None = Field(
        default=60.0, alias="FANART_ACQUIRE_TIMEOUT", gt=0
    )

    cache_backend: Literal["database", "memory"] = Field(
        default="database", alias="CACHE_BACKEND"
    )
    database_url: str = Field(
        default="sqlite+aiosqlite:///./fanartpicks.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("language", mode="before")
    @classmethod
    def _normalise_language(cls, value: object) -> str:
        """Lower-case language codes and fall back to English when blank."""

        if value is None:
            return "en"
        cleaned = str(value).strip().lower()
        return cleaned or "en"

    @property
    def fanart_base_url(self) -> str:
        """Return the versioned API root, e.g. ``http://host/v3``."""

        return f"{str(self.fanart_api_url).rstrip('/')}/{self.fanart_api_version}"

    def rate_limiter_config(self) -> RateLimiterConfig:
        """Build the limiter configuration from the fanart.tv settings."""

        return RateLimiterConfig(
            burst=self.fanart_rate_burst,
            window_seconds=self.fanart_rate_window_seconds,
            concurrency=self.fanart_concurrency,
            cooldown_seconds=self.fanart_cooldown_seconds,
            acquire_timeout=self.fanart_acquire_timeout_seconds,
        )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
