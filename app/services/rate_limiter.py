"""Burst-window and concurrency limiter for outbound catalog requests.

Every request to the art catalog runs through :meth:`RateLimiter.call`, which
waits until both of the following hold:

* fewer than ``burst`` calls were dispatched during the last
  ``window_seconds`` (a rolling window), and
* fewer than ``concurrency`` calls are currently in flight.

When the upstream answers with HTTP 429 the caller hands the response headers
to :meth:`RateLimiter.cool_down`, which pauses all dispatching for the
``Retry-After`` delay. The limiter never retries a call on its own.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, TypeVar

from ..errors import RateLimitExceeded
from ..utils import parse_retry_after

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class RateLimiterConfig:
    """Capacity limits for a :class:`RateLimiter`."""

    burst: int = 50
    window_seconds: float = 10.0
    concurrency: int = 25
    cooldown_seconds: float = 30.0
    # ``None`` waits for capacity indefinitely.
    acquire_timeout: float | None = 60.0

    def __post_init__(self) -> None:
        if self.burst < 1:
            raise ValueError("burst must be at least 1")
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if self.cooldown_seconds < 0:
            raise ValueError("cooldown_seconds must not be negative")


class RateLimiter:
    """Gate coroutines so the catalog never sees more traffic than allowed."""

    def __init__(self, config: RateLimiterConfig | None = None, *, name: str = "fanart"):
        self._config = config or RateLimiterConfig()
        self._name = name
        self._semaphore = asyncio.Semaphore(self._config.concurrency)
        self._lock = asyncio.Lock()
        self._dispatched: deque[float] = deque()
        self._cooldown_until = 0.0
        self._closed = False

    @property
    def config(self) -> RateLimiterConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def cooldown_remaining(self) -> float:
        """Seconds left before dispatching resumes after a 429."""

        return max(self._cooldown_until - time.monotonic(), 0.0)

    async def call(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run ``fn`` once capacity is available and return its result.

        Raises :class:`RateLimitExceeded` without invoking ``fn`` when no slot
        could be acquired within ``acquire_timeout`` or the limiter is closed.
        Exceptions raised by ``fn`` itself propagate unchanged.
        """

        if self._closed:
            raise RateLimitExceeded(f"Rate limiter {self._name} is closed")

        timeout = self._config.acquire_timeout
        try:
            if timeout is None:
                await self._acquire()
            else:
                await asyncio.wait_for(self._acquire(), timeout)
        except asyncio.TimeoutError as exc:
            raise RateLimitExceeded(
                f"No {self._name} request slot available within {timeout:.1f}s",
                retry_after=self.cooldown_remaining or None,
            ) from exc

        try:
            return await fn()
        finally:
            self._semaphore.release()

    def cool_down(self, headers: Mapping[str, str] | None = None) -> float:
        """Suspend dispatching after the upstream signalled too many requests.

        Returns the applied delay in seconds.
        """

        delay = parse_retry_after(headers)
        if delay is None:
            delay = self._config.cooldown_seconds
        until = time.monotonic() + delay
        if until > self._cooldown_until:
            self._cooldown_until = until
        logger.info(
            "RateLimiter[%s]: cooling down for %.1fs after upstream rejection",
            self._name,
            delay,
        )
        return delay

    def close(self) -> None:
        """Reject every pending and future call."""

        self._closed = True

    async def _acquire(self) -> None:
        await self._semaphore.acquire()
        try:
            await self._reserve_window_slot()
        except BaseException:
            self._semaphore.release()
            raise

    async def _reserve_window_slot(self) -> None:
        window = self._config.window_seconds
        while True:
            async with self._lock:
                if self._closed:
                    raise RateLimitExceeded(f"Rate limiter {self._name} is closed")
                now = time.monotonic()
                wait = self._cooldown_until - now
                if wait <= 0:
                    while self._dispatched and now - self._dispatched[0] >= window:
                        self._dispatched.popleft()
                    if len(self._dispatched) < self._config.burst:
                        self._dispatched.append(now)
                        return
                    wait = window - (now - self._dispatched[0])
            logger.debug(
                "RateLimiter[%s]: no capacity, waiting %.2fs", self._name, wait
            )
            await asyncio.sleep(wait)
