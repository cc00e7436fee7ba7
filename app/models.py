"""Pydantic models describing fanart.tv payloads and resolved artwork."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils import parse_likes, parse_season


class Image(BaseModel):
    """A single candidate image as listed by the catalog."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    url: str = ""
    lang: str = ""
    likes: int = 0

    @field_validator("id", "url", "lang", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("likes", mode="before")
    @classmethod
    def _coerce_likes(cls, value: Any) -> int:
        return parse_likes(value)


class ShowImage(Image):
    """Show artwork, optionally tied to a season.

    ``season`` is ``None`` for images the catalog did not scope to a season and
    ``0`` for specials/show-level images. Markers such as ``"all"`` become
    ``OTHER_SEASON`` and only match show-level queries.
    """

    season: int | None = None

    @field_validator("season", mode="before")
    @classmethod
    def _coerce_season(cls, value: Any) -> int | None:
        return parse_season(value)


class Disk(Image):
    """Disc artwork; selection only cares about the embedded image."""

    disc: str = ""
    disc_type: str = ""

    @field_validator("disc", "disc_type", mode="before")
    @classmethod
    def _coerce_disc(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    def as_image(self) -> Image:
        return Image(id=self.id, url=self.url, lang=self.lang, likes=self.likes)


def _non_empty(urls: list[str]) -> list[str]:
    return [url for url in urls if url]


def _drop_null_entries(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, list):
        return [entry for entry in value if entry is not None]
    return value


class Movie(BaseModel):
    """Artwork aggregate returned by ``/movies/{id}``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    tmdb_id: str = ""
    imdb_id: str = ""
    hdmovieclearart: list[Image] = Field(default_factory=list)
    hdmovielogo: list[Image] = Field(default_factory=list)
    movieposter: list[Image] = Field(default_factory=list)
    moviebackground: list[Image] = Field(default_factory=list)
    moviedisc: list[Disk] = Field(default_factory=list)
    moviethumb: list[Image] = Field(default_factory=list)
    movieart: list[Image] = Field(default_factory=list)
    movieclearart: list[Image] = Field(default_factory=list)
    movielogo: list[Image] = Field(default_factory=list)
    moviebanner: list[Image] = Field(default_factory=list)

    @field_validator("name", "tmdb_id", "imdb_id", mode="before")
    @classmethod
    def _coerce_identifiers(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator(
        "hdmovieclearart",
        "hdmovielogo",
        "movieposter",
        "moviebackground",
        "moviedisc",
        "moviethumb",
        "movieart",
        "movieclearart",
        "movielogo",
        "moviebanner",
        mode="before",
    )
    @classmethod
    def _clean_lists(cls, value: Any) -> Any:
        return _drop_null_entries(value)

    def disc_images(self) -> list[Image]:
        return [disk.as_image() for disk in self.moviedisc]


class Show(BaseModel):
    """Artwork aggregate returned by ``/tv/{id}``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    tvdb_id: str = Field(default="", alias="thetvdb_id")
    hdclearart: list[ShowImage] = Field(default_factory=list)
    hdtvlogo: list[ShowImage] = Field(default_factory=list)
    clearlogo: list[ShowImage] = Field(default_factory=list)
    clearart: list[ShowImage] = Field(default_factory=list)
    tvposter: list[ShowImage] = Field(default_factory=list)
    tvbanner: list[ShowImage] = Field(default_factory=list)
    tvthumb: list[ShowImage] = Field(default_factory=list)
    showbackground: list[ShowImage] = Field(default_factory=list)
    seasonposter: list[ShowImage] = Field(default_factory=list)
    seasonthumb: list[ShowImage] = Field(default_factory=list)
    seasonbanner: list[ShowImage] = Field(default_factory=list)
    characterart: list[ShowImage] = Field(default_factory=list)

    @field_validator("name", "tvdb_id", mode="before")
    @classmethod
    def _coerce_identifiers(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator(
        "hdclearart",
        "hdtvlogo",
        "clearlogo",
        "clearart",
        "tvposter",
        "tvbanner",
        "tvthumb",
        "showbackground",
        "seasonposter",
        "seasonthumb",
        "seasonbanner",
        "characterart",
        mode="before",
    )
    @classmethod
    def _clean_lists(cls, value: Any) -> Any:
        return _drop_null_entries(value)


class Artworks(BaseModel):
    """Every acceptable candidate per slot, in preference order."""

    poster: list[str] = Field(default_factory=list)
    banner: list[str] = Field(default_factory=list)
    fanart: list[str] = Field(default_factory=list)
    clearart: list[str] = Field(default_factory=list)
    clearlogo: list[str] = Field(default_factory=list)
    landscape: list[str] = Field(default_factory=list)
    icon: list[str] = Field(default_factory=list)
    discart: list[str] = Field(default_factory=list)
    keyart: list[str] = Field(default_factory=list)


class ArtworkRecord(BaseModel):
    """Resolved artwork for a list item, one URL per slot."""

    thumb: str = ""
    poster: str = ""
    tvshowposter: str = ""
    banner: str = ""
    fanart: str = ""
    fanarts: list[str] = Field(default_factory=list)
    clearart: str = ""
    clearlogo: str = ""
    landscape: str = ""
    icon: str = ""
    discart: str = ""
    keyart: str = ""
    available_artworks: Artworks | None = None

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-ready mapping without empty slots."""

        payload: dict[str, Any] = {}
        for key, value in self.model_dump(mode="json").items():
            if key == "available_artworks":
                if value:
                    lists = {
                        name: _non_empty(urls) for name, urls in value.items()
                    }
                    lists = {name: urls for name, urls in lists.items() if urls}
                    if lists:
                        payload[key] = lists
                continue
            if isinstance(value, list):
                value = _non_empty(value)
            if value:
                payload[key] = value
        return payload
