"""Configuration settings behaviour tests."""

from __future__ import annotations

import pytest

from app.config import Settings


def test_defaults_match_catalog_limits() -> None:
    settings = Settings(_env_file=None)

    assert settings.language == "en"
    assert settings.fanart_base_url == "http://webservice.fanart.tv/v3"
    assert settings.fanart_auth_retries == 1
    config = settings.rate_limiter_config()
    assert config.burst == 50
    assert config.window_seconds == 10.0
    assert config.concurrency == 25


def test_language_is_normalised() -> None:
    """Language codes are lower-cased and blank values fall back to English."""

    assert Settings(_env_file=None, LANGUAGE=" FR ").language == "fr"
    assert Settings(_env_file=None, LANGUAGE="").language == "en"


def test_base_url_ignores_trailing_slash() -> None:
    settings = Settings(
        _env_file=None,
        FANART_API_URL="https://fanart.example.com/",
        FANART_API_VERSION="v3.2",
    )

    assert settings.fanart_base_url == "https://fanart.example.com/v3.2"


def test_rate_limiter_config_reflects_overrides() -> None:
    settings = Settings(
        _env_file=None,
        FANART_RATE_BURST=5,
        FANART_RATE_WINDOW=2.5,
        FANART_CONCURRENCY=3,
        FANART_COOLDOWN=12,
        FANART_ACQUIRE_TIMEOUT=4,
    )

    config = settings.rate_limiter_config()
    assert (config.burst, config.window_seconds, config.concurrency) == (5, 2.5, 3)
    assert config.cooldown_seconds == 12
    assert config.acquire_timeout == 4


def test_invalid_concurrency_raises() -> None:
    with pytest.raises(ValueError):
        Settings(_env_file=None, FANART_CONCURRENCY=0)
