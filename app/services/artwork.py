"""Compose resolved artwork records out of fanart.tv aggregates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ..config import Settings
from ..errors import RateLimitExceeded
from ..models import ArtworkRecord, Artworks, Image, Movie, Show, ShowImage
from .fanart import FanartClient
from .selector import all_images, all_show_images, best_image, best_show_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SlotRule:
    """Where a slot draws candidates from, in precedence order."""

    sources: tuple[str, ...]
    strict: bool = False
    # Season-scoped records still query some slots at show level.
    season_scoped: bool = True


# Every slot lists its catalog sources most specific first.
MOVIE_SLOTS: dict[str, SlotRule] = {
    "poster": SlotRule(("movieposter",)),
    "banner": SlotRule(("moviebanner",)),
    "fanart": SlotRule(("moviebackground",)),
    "clearart": SlotRule(("hdmovieclearart", "movieclearart")),
    "clearlogo": SlotRule(("hdmovielogo", "movielogo")),
    "landscape": SlotRule(("moviethumb",)),
    "keyart": SlotRule(("moviebackground",)),
    "discart": SlotRule(("moviedisc",)),
}

SHOW_SLOTS: dict[str, SlotRule] = {
    "poster": SlotRule(("tvposter",)),
    "banner": SlotRule(("tvbanner",)),
    "fanart": SlotRule(("showbackground",)),
    "clearart": SlotRule(("hdclearart", "clearart")),
    "clearlogo": SlotRule(("hdtvlogo", "clearlogo")),
    "landscape": SlotRule(("tvthumb",)),
    "keyart": SlotRule(("showbackground",)),
}

SEASON_SLOTS: dict[str, SlotRule] = {
    "tvshowposter": SlotRule(("seasonposter", "tvposter"), strict=True, season_scoped=False),
    "poster": SlotRule(("seasonposter", "tvposter"), strict=True),
    "banner": SlotRule(("seasonbanner", "tvbanner"), strict=True),
    "fanart": SlotRule(("showbackground",)),
    "clearart": SlotRule(("hdclearart", "clearart")),
    "clearlogo": SlotRule(("hdtvlogo", "clearlogo")),
    "landscape": SlotRule(("seasonthumb", "tvthumb"), strict=True),
}

# Slots seeded from a different field of the previous record.
_PREVIOUS_FIELD = {"tvshowposter": "poster"}


def _movie_sources(movie: Movie, rule: SlotRule) -> list[Sequence[Image]]:
    sources: list[Sequence[Image]] = []
    for name in rule.sources:
        if name == "moviedisc":
            sources.append(movie.disc_images())
        else:
            sources.append(getattr(movie, name))
    return sources


def _show_sources(show: Show, rule: SlotRule) -> list[Sequence[ShowImage]]:
    return [getattr(show, name) for name in rule.sources]


def _previous_value(previous: ArtworkRecord, slot: str) -> str:
    return getattr(previous, _PREVIOUS_FIELD.get(slot, slot))


def movie_artwork(
    movie: Movie, previous: ArtworkRecord, *, language: str
) -> ArtworkRecord:
    """Resolve every movie slot, keeping ``previous`` values where nothing fits."""

    best: dict[str, str] = {}
    available: dict[str, list[str]] = {}
    for slot, rule in MOVIE_SLOTS.items():
        sources = _movie_sources(movie, rule)
        fallback = _previous_value(previous, slot)
        best[slot] = best_image(fallback, sources, language=language)
        available[slot] = all_images(fallback, sources, language=language)

    return previous.model_copy(
        update={
            **best,
            "fanarts": available["fanart"],
            "available_artworks": Artworks(**available),
        }
    )


def show_artwork(
    show: Show, previous: ArtworkRecord, *, language: str
) -> ArtworkRecord:
    """Resolve show-level artwork; no season filtering is applied."""

    best: dict[str, str] = {}
    available: dict[str, list[str]] = {}
    for slot, rule in SHOW_SLOTS.items():
        sources = _show_sources(show, rule)
        fallback = _previous_value(previous, slot)
        best[slot] = best_show_image(
            fallback, sources, language=language, strict=rule.strict
        )
        available[slot] = all_show_images(fallback, sources, language=language)

    return previous.model_copy(
        update={
            **best,
            "fanarts": available["fanart"],
            "available_artworks": Artworks(**available),
        }
    )


def _season_scoped_artwork(
    show: Show, season: int, previous: ArtworkRecord, *, language: str
) -> ArtworkRecord:
    best: dict[str, str] = {}
    for slot, rule in SEASON_SLOTS.items():
        best[slot] = best_show_image(
            _previous_value(previous, slot),
            _show_sources(show, rule),
            language=language,
            season=season if rule.season_scoped else None,
            strict=rule.strict,
        )
    fanarts = all_show_images(
        previous.fanart,
        _show_sources(show, SEASON_SLOTS["fanart"]),
        language=language,
        season=season,
    )
    return previous.model_copy(
        update={**best, "fanarts": fanarts, "available_artworks": None}
    )


def season_artwork(
    show: Show, season: int, previous: ArtworkRecord, *, language: str
) -> ArtworkRecord:
    """Resolve artwork for a season listing of ``show``."""

    return _season_scoped_artwork(show, season, previous, language=language)


def episode_artwork(
    show: Show, season: int, previous: ArtworkRecord, *, language: str
) -> ArtworkRecord:
    """Resolve artwork for an episode; ``season`` is the episode's season."""

    return _season_scoped_artwork(show, season, previous, language=language)


class ArtworkService:
    """Fetch aggregates and map them, degrading to the previous artwork."""

    def __init__(self, settings: Settings, client: FanartClient | None):
        self._settings = settings
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def resolve_movie(
        self, tmdb_id: int, previous: ArtworkRecord | None = None
    ) -> ArtworkRecord:
        previous = previous or ArtworkRecord()
        if self._client is None:
            return previous.model_copy()
        try:
            movie = await self._client.fetch_movie(tmdb_id)
        except RateLimitExceeded as exc:
            logger.warning("Keeping previous artwork for movie %s: %s", tmdb_id, exc)
            return previous.model_copy()
        if movie is None:
            return previous.model_copy()
        return movie_artwork(movie, previous, language=self._settings.language)

    async def resolve_show(
        self, tvdb_id: int, previous: ArtworkRecord | None = None
    ) -> ArtworkRecord:
        previous = previous or ArtworkRecord()
        show = await self._load_show(tvdb_id)
        if show is None:
            return previous.model_copy()
        return show_artwork(show, previous, language=self._settings.language)

    async def resolve_season(
        self, tvdb_id: int, season: int, previous: ArtworkRecord | None = None
    ) -> ArtworkRecord:
        previous = previous or ArtworkRecord()
        show = await self._load_show(tvdb_id)
        if show is None:
            return previous.model_copy()
        return season_artwork(
            show, season, previous, language=self._settings.language
        )

    async def resolve_episode(
        self,
        tvdb_id: int,
        season: int,
        episode: int,
        previous: ArtworkRecord | None = None,
    ) -> ArtworkRecord:
        previous = previous or ArtworkRecord()
        show = await self._load_show(tvdb_id)
        if show is None:
            logger.debug(
                "No fanart for show %s, keeping artwork of S%02dE%02d",
                tvdb_id,
                season,
                episode,
            )
            return previous.model_copy()
        return episode_artwork(
            show, season, previous, language=self._settings.language
        )

    async def _load_show(self, tvdb_id: int) -> Show | None:
        if self._client is None:
            return None
        try:
            return await self._client.fetch_show(tvdb_id)
        except RateLimitExceeded as exc:
            logger.warning("Keeping previous artwork for show %s: %s", tvdb_id, exc)
            return None
