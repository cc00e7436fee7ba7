"""Client for the fanart.tv artwork catalog."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..config import Settings
from ..errors import DecodeFailure, NotFound, RateLimitExceeded, TransientAuthFailure
from ..models import Movie, Show
from .cache import CacheStore, movie_key, show_key
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

AggregateT = TypeVar("AggregateT", bound=BaseModel)


class FanartClient:
    """Fetch movie and show artwork aggregates, going through cache and limiter.

    Network and decoding problems are soft failures: they are logged and the
    fetch returns ``None``. Only :class:`RateLimitExceeded` reaches the caller
    so it can decide whether to try again later.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        cache: CacheStore,
        rate_limiter: RateLimiter,
    ):
        if not settings.fanart_api_key:
            raise ValueError("fanart.tv API key is required when initialising FanartClient")
        self._settings = settings
        self._client = http_client
        self._cache = cache
        self._limiter = rate_limiter

    def _headers(self) -> dict[str, str]:
        return {
            "Content-type": "application/json",
            "api-key": str(self._settings.fanart_api_key),
            "api-version": self._settings.fanart_api_version,
        }

    async def fetch_movie(self, tmdb_id: int) -> Movie | None:
        """Return artwork for a TMDB movie id, or ``None`` when unavailable."""

        if tmdb_id <= 0:
            return None
        return await self._fetch(
            Movie, f"/movies/{tmdb_id}", movie_key(tmdb_id), f"movie ({tmdb_id})"
        )

    async def fetch_show(self, tvdb_id: int) -> Show | None:
        """Return artwork for a TheTVDB show id, or ``None`` when unavailable."""

        if tvdb_id <= 0:
            return None
        return await self._fetch(
            Show, f"/tv/{tvdb_id}", show_key(tvdb_id), f"show ({tvdb_id})"
        )

    async def _fetch(
        self, model: type[AggregateT], endpoint: str, key: str, label: str
    ) -> AggregateT | None:
        cached = await self._cache.get(key)
        if cached is not None:
            try:
                aggregate = model.model_validate(cached)
            except ValidationError as exc:
                logger.warning("Cached fanart for %s is invalid: %s", label, exc)
            else:
                logger.debug("Serving fanart for %s from cache", label)
                return aggregate

        try:
            payload = await self._request(endpoint)
        except NotFound:
            logger.debug("No fanart available for %s", label)
            return None
        except (TransientAuthFailure, DecodeFailure) as exc:
            logger.warning("Fanart request for %s failed: %s", label, exc)
            return None
        except httpx.HTTPError as exc:
            logger.warning("Error getting fanart for %s: %s", label, exc)
            return None

        try:
            aggregate = model.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Unmarshal error for %s: %s", label, exc)
            return None

        await self._cache.set(
            key,
            aggregate.model_dump(mode="json", by_alias=True),
            timedelta(seconds=self._settings.fanart_cache_ttl_seconds),
        )
        return aggregate

    async def _request(self, endpoint: str) -> dict[str, Any]:
        """Perform the GET, retrying once per remaining auth retry on HTTP 403."""

        attempts = self._settings.fanart_auth_retries + 1
        for attempt in range(1, attempts + 1):
            response = await self._limiter.call(
                lambda: self._client.get(endpoint, headers=self._headers())
            )
            status = response.status_code
            if status == 429:
                delay = self._limiter.cool_down(response.headers)
                logger.warning(
                    "Rate limit exceeded getting %s, cooling down for %.1fs",
                    endpoint,
                    delay,
                )
                raise RateLimitExceeded(
                    f"fanart.tv rejected {endpoint} with HTTP 429", retry_after=delay
                )
            if status == 403:
                if attempt < attempts:
                    logger.info(
                        "fanart.tv refused %s (HTTP 403), retrying (%s/%s)",
                        endpoint,
                        attempt,
                        attempts - 1,
                    )
                    continue
                raise TransientAuthFailure(
                    f"fanart.tv refused {endpoint} after {attempts} attempt(s)"
                )
            if status == 404:
                raise NotFound(endpoint)
            response.raise_for_status()
            try:
                payload = response.json()
            except ValueError as exc:
                raise DecodeFailure(f"Invalid JSON returned for {endpoint}") from exc
            if not isinstance(payload, dict):
                raise DecodeFailure(f"Unexpected payload type returned for {endpoint}")
            return payload
        raise TransientAuthFailure(f"fanart.tv refused {endpoint}")
