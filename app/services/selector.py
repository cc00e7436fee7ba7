"""Pick the best artwork URL out of ranked candidate lists.

Sources are ordered: an earlier list always wins over a later one as long as
it yields any candidate. Inside a list an image in the preferred language wins
immediately; otherwise the most liked English or language-neutral image is
chosen, keeping the first one seen on ties.

The show variants add a season filter applied in two tiers. Tier 1 keeps
images of the requested season; tier 2, consulted only when tier 1 found
nothing in that list, falls back to unscoped images and to season ``0``
(specials). In strict mode the first list may not fall back to season ``0``.
"""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from ..models import Image, ShowImage

NEUTRAL_LANGUAGES = frozenset({"en", ""})

SeasonFilter = Callable[[ShowImage], bool]


def _candidates(images: Iterable[Image | None]) -> Iterable[Image]:
    for image in images:
        if image is not None and image.url:
            yield image


def _pick(images: Iterable[Image], language: str) -> str | None:
    best: Image | None = None
    for image in _candidates(images):
        if image.lang == language:
            return image.url
        if image.lang in NEUTRAL_LANGUAGES:
            if best is None or image.likes > best.likes:
                best = image
    return best.url if best is not None else None


def _collect(images: Iterable[Image], language: str, found: list[str]) -> int:
    """Append acceptable URLs to ``found``; return how many were accepted."""

    accepted = 0
    for image in _candidates(images):
        if image.lang == language or image.lang in NEUTRAL_LANGUAGES:
            accepted += 1
            if image.url not in found:
                found.append(image.url)
    return accepted


def best_image(
    fallback: str, sources: Sequence[Sequence[Image]], *, language: str
) -> str:
    """Return the preferred URL across ranked ``sources`` or ``fallback``."""

    if not sources:
        return ""
    for images in sources:
        url = _pick(images, language)
        if url is not None:
            return url
    return fallback


def all_images(
    fallback: str, sources: Sequence[Sequence[Image]], *, language: str
) -> list[str]:
    """Return every acceptable URL in discovery order, or ``[fallback]``."""

    found: list[str] = []
    for images in sources:
        _collect(images, language, found)
    return found or [fallback]


def _season_tiers(
    season: int | None, strict: bool, index: int
) -> tuple[SeasonFilter, SeasonFilter]:
    if season is None:
        return (lambda image: True), (lambda image: True)

    allow_specials = not strict or index > 1

    def exact(image: ShowImage) -> bool:
        return image.season == season

    def fallback_tier(image: ShowImage) -> bool:
        if image.season is None:
            return True
        return image.season == 0 and allow_specials

    return exact, fallback_tier


def best_show_image(
    fallback: str,
    sources: Sequence[Sequence[ShowImage]],
    *,
    language: str,
    season: int | None = None,
    strict: bool = False,
) -> str:
    """Season-aware :func:`best_image`.

    ``season=None`` asks for show-level artwork and accepts every image.
    """

    if not sources:
        return ""
    for index, images in enumerate(sources, start=1):
        for accepts in _season_tiers(season, strict, index):
            url = _pick((image for image in _candidates(images) if accepts(image)), language)
            if url is not None:
                return url
    return fallback


def all_show_images(
    fallback: str,
    sources: Sequence[Sequence[ShowImage]],
    *,
    language: str,
    season: int | None = None,
    strict: bool = False,
) -> list[str]:
    """Season-aware :func:`all_images`.

    Tier 2 of a list is only consulted when tier 1 accepted nothing from it.
    """

    found: list[str] = []
    for index, images in enumerate(sources, start=1):
        exact, fallback_tier = _season_tiers(season, strict, index)
        exact_images = (image for image in _candidates(images) if exact(image))
        if _collect(exact_images, language, found):
            continue
        _collect(
            (image for image in _candidates(images) if fallback_tier(image)),
            language,
            found,
        )
    return found or [fallback]
