"""Utility helpers for the FanartPicks service."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Mapping

# Season marker of images scoped to something other than a single season.
OTHER_SEASON = -1


def parse_likes(value: Any) -> int:
    """Return a non-negative popularity score, treating garbage as zero."""

    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    try:
        likes = int(str(value).strip())
    except (TypeError, ValueError):
        return 0
    return max(likes, 0)


def parse_season(value: Any) -> int | None:
    """Parse a catalog season marker.

    ``""`` and missing values mean the image is not scoped to a season and map
    to ``None``. ``"0"`` is the specials/show-level season and stays ``0``.
    Any other marker, such as ``"all"``, maps to :data:`OTHER_SEASON`, which
    never matches a requested season.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else OTHER_SEASON
    text = str(value).strip()
    if not text:
        return None
    if not text.isdigit():
        return OTHER_SEASON
    return int(text)


def parse_retry_after(headers: Mapping[str, str] | None) -> float | None:
    """Extract a ``Retry-After`` delay in seconds from response headers."""

    if not headers:
        return None
    raw: str | None = None
    for name, value in headers.items():
        if name.lower() == "retry-after":
            raw = value
            break
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return None
    try:
        seconds = float(raw)
    except ValueError:
        try:
            moment = parsedate_to_datetime(raw)
        except (TypeError, ValueError):
            return None
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        seconds = (moment - datetime.now(timezone.utc)).total_seconds()
        return max(seconds, 0.0)
    if seconds < 0:
        return None
    return seconds
