"""Read-through caches for catalog payloads."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from typing import Any, Callable, Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import CacheEntry

logger = logging.getLogger(__name__)

FANART_MOVIE_KEY = "fanart.movie.{id}"
FANART_SHOW_KEY = "fanart.show.{id}"


def movie_key(tmdb_id: int) -> str:
    return FANART_MOVIE_KEY.format(id=tmdb_id)


def show_key(tvdb_id: int) -> str:
    return FANART_SHOW_KEY.format(id=tvdb_id)


class CacheStore(Protocol):
    """Key/value store whose entries expire after a per-entry TTL."""

    async def get(self, key: str) -> Any | None:
        """Return the cached value or ``None`` when missing or expired."""

    async def set(self, key: str, value: Any, ttl: timedelta) -> None:
        """Store ``value`` under ``key`` for ``ttl``."""


class MemoryCacheStore:
    """Process-local cache, mostly useful for tests and single workers."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: Any, ttl: timedelta) -> None:
        now = self._clock()
        self._purge_expired(now)
        self._entries[key] = (now + ttl.total_seconds(), value)

    def _purge_expired(self, now: float) -> None:
        expired = [
            key for key, (expires_at, _) in self._entries.items() if expires_at <= now
        ]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)


class DatabaseCacheStore:
    """Cache persisted in the ``cache_entries`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> Any | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(CacheEntry.payload, CacheEntry.expires_at).where(
                        CacheEntry.key == key
                    )
                )
                row = result.one_or_none()
        except SQLAlchemyError as exc:
            logger.warning("Cache lookup for %s failed: %s", key, exc)
            return None
        if row is None:
            return None
        payload, expires_at = row
        if expires_at <= datetime.utcnow():
            return None
        return payload

    async def set(self, key: str, value: Any, ttl: timedelta) -> None:
        now = datetime.utcnow()
        try:
            async with self._session_factory() as session:
                await session.execute(delete(CacheEntry).where(CacheEntry.key == key))
                session.add(
                    CacheEntry(
                        key=key,
                        payload=value,
                        expires_at=now + ttl,
                        created_at=now,
                        updated_at=now,
                    )
                )
                await session.commit()
        except SQLAlchemyError as exc:
            logger.warning("Cache write for %s failed: %s", key, exc)

    async def purge_expired(self) -> int:
        """Delete stale rows and return how many were removed."""

        async with self._session_factory() as session:
            result = await session.execute(
                delete(CacheEntry).where(CacheEntry.expires_at <= datetime.utcnow())
            )
            await session.commit()
        return result.rowcount or 0
