"""Exceptions raised while talking to the fanart.tv catalog."""

from __future__ import annotations


class FanartError(Exception):
    """Base class for artwork catalog failures."""


class RateLimitExceeded(FanartError):
    """The request was rejected by, or never dispatched through, the rate limiter."""

    def __init__(self, message: str, *, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class TransientAuthFailure(FanartError):
    """The catalog kept answering 403 after the retry budget was spent."""


class NotFound(FanartError):
    """The catalog has no artwork record for the requested identifier."""


class DecodeFailure(FanartError):
    """The response body could not be decoded into an artwork aggregate."""
