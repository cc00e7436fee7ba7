"""Tests for the ranked artwork selection rules."""

from __future__ import annotations

import pytest

from app.models import Image, ShowImage
from app.services.selector import (
    all_images,
    all_show_images,
    best_image,
    best_show_image,
)


def img(url: str, lang: str = "", likes: str = "0") -> Image:
    return Image.model_validate({"id": url, "url": url, "lang": lang, "likes": likes})


def simg(url: str, season: str = "", lang: str = "", likes: str = "0") -> ShowImage:
    return ShowImage.model_validate(
        {"id": url, "url": url, "lang": lang, "likes": likes, "season": season}
    )


def test_empty_sources_fall_back() -> None:
    assert best_image("old", [[], []], language="fr") == "old"
    assert all_images("old", [[], []], language="fr") == ["old"]
    assert best_show_image("old", [[]], language="fr", season=2, strict=True) == "old"
    assert all_show_images("old", [[]], language="fr", season=2) == ["old"]


def test_no_sources_at_all() -> None:
    """Passing no lists differs from passing empty lists for the best pick."""

    assert best_image("old", [], language="en") == ""
    assert all_images("old", [], language="en") == ["old"]
    assert best_show_image("old", [], language="en") == ""
    assert all_show_images("old", [], language="en") == ["old"]


def test_preferred_language_beats_popularity() -> None:
    sources = [[img("A", "fr", "1"), img("B", "en", "99")]]

    assert best_image("old", sources, language="fr") == "A"


def test_preferred_language_later_in_list_still_wins() -> None:
    sources = [[img("B", "en", "99"), img("A", "fr", "1")]]

    assert best_image("old", sources, language="fr") == "A"


def test_popularity_breaks_ties_between_neutral_languages() -> None:
    sources = [[img("X", "en", "3"), img("Y", "", "7")]]

    assert best_image("old", sources, language="fr") == "Y"


def test_first_seen_wins_equal_likes() -> None:
    sources = [[img("X", "en", "4"), img("Y", "", "4")]]

    assert best_image("old", sources, language="de") == "X"


def test_malformed_likes_count_as_zero() -> None:
    sources = [[img("X", "en", "lots"), img("Y", "en", "1")]]

    assert best_image("old", sources, language="de") == "Y"
    assert best_image("old", [[img("X", "en", "n/a")]], language="de") == "X"


def test_foreign_languages_are_ignored() -> None:
    sources = [[img("X", "ru", "50")], [img("Y", "en", "1")]]

    assert best_image("old", sources, language="fr") == "Y"
    assert all_images("old", sources, language="fr") == ["Y"]


def test_earlier_list_takes_precedence() -> None:
    sources = [[img("HD", "en", "1")], [img("SD", "en", "100")]]

    assert best_image("old", sources, language="fr") == "HD"


def test_preferred_language_in_later_list_does_not_override_earlier_list() -> None:
    sources = [[img("HD", "en", "1")], [img("SD-FR", "fr", "1")]]

    assert best_image("old", sources, language="fr") == "HD"


def test_images_without_url_are_never_selected() -> None:
    sources = [[img("", "fr", "10"), img("Y", "en", "1")]]

    assert best_image("old", sources, language="fr") == "Y"
    assert all_images("old", sources, language="fr") == ["Y"]


def test_all_images_deduplicates_in_discovery_order() -> None:
    sources = [
        [img("A", "fr"), img("B", "en"), img("A", "en")],
        [img("C", ""), img("B", "fr")],
    ]

    assert all_images("old", sources, language="fr") == ["A", "B", "C"]


def test_all_images_counts_english_preferred_entry_once() -> None:
    sources = [[img("A", "en", "3")]]

    assert all_images("old", sources, language="en") == ["A"]


def test_selection_is_idempotent() -> None:
    sources = [[img("A", "en", "2"), img("B", "", "9"), img("C", "fr")]]

    assert best_image("old", sources, language="de") == best_image(
        "old", sources, language="de"
    )
    assert all_images("old", sources, language="de") == all_images(
        "old", sources, language="de"
    )


def test_strict_season_match_in_first_list() -> None:
    sources = [[simg("S1", "1")], [simg("S0", "0")]]

    assert best_show_image("old", sources, language="en", season=1, strict=True) == "S1"


def test_strict_forbids_specials_from_first_list() -> None:
    sources = [[simg("Z", "0")]]

    assert best_show_image("old", sources, language="en", season=2, strict=True) == "old"


def test_non_strict_allows_specials_from_first_list() -> None:
    sources = [[simg("Z", "0")]]

    assert best_show_image("old", sources, language="en", season=2) == "Z"


def test_strict_allows_specials_from_secondary_list() -> None:
    sources = [[simg("Z", "0")], [simg("T0", "0")]]

    assert best_show_image("old", sources, language="en", season=2, strict=True) == "T0"


def test_unscoped_images_qualify_in_second_tier() -> None:
    sources = [[simg("S3", "3"), simg("ANY", "")]]

    assert best_show_image("old", sources, language="en", season=2, strict=True) == "ANY"


def test_first_tier_popularity_beats_second_tier() -> None:
    sources = [[simg("ANY", "", likes="500"), simg("S2", "2", likes="1")]]

    assert best_show_image("old", sources, language="en", season=2) == "S2"


def test_second_tier_language_match_returns_immediately() -> None:
    sources = [[simg("ANY-EN", "", "en", "50"), simg("ANY-FR", "", "fr", "0")]]

    assert best_show_image("old", sources, language="fr", season=4) == "ANY-FR"


def test_first_tier_foreign_only_falls_to_second_tier() -> None:
    sources = [[simg("S2-RU", "2", "ru", "10"), simg("ANY", "", "en", "1")]]

    assert best_show_image("old", sources, language="fr", season=2) == "ANY"


def test_unscoped_query_accepts_every_season() -> None:
    sources = [[simg("S5", "5", "en", "1"), simg("S0", "0", "en", "8")]]

    assert best_show_image("old", sources, language="fr") == "S0"
    assert all_show_images("old", sources, language="fr") == ["S5", "S0"]


def test_all_marker_never_matches_a_requested_season() -> None:
    sources = [[simg("ALL", "all", "en", "3")], [simg("TV", "", "en", "1")]]

    assert best_show_image("old", sources, language="fr", season=2, strict=True) == "TV"
    assert best_show_image("old", sources, language="fr", season=2) == "TV"
    assert all_show_images("old", sources, language="fr", season=2) == ["TV"]


def test_all_marker_matches_show_level_queries() -> None:
    sources = [[simg("ALL", "all", "en", "3")], [simg("TV", "", "en", "1")]]

    assert best_show_image("old", sources, language="fr") == "ALL"
    assert all_show_images("old", sources, language="fr") == ["ALL", "TV"]


@pytest.mark.parametrize(
    ("season", "expected"),
    [
        (1, ["S1", "P-S1"]),
        (2, ["ALL", "P-ALL"]),
    ],
)
def test_all_show_images_tiers_per_list(season: int, expected: list[str]) -> None:
    sources = [
        [simg("S1", "1"), simg("ALL", "")],
        [simg("P-S1", "1"), simg("P-ALL", "")],
    ]

    assert all_show_images("old", sources, language="en", season=season) == expected


def test_all_show_images_keeps_accumulating_across_lists() -> None:
    sources = [[simg("S2", "2")], [simg("T0", "0"), simg("T-ALL", "")]]

    assert all_show_images("old", sources, language="en", season=2) == [
        "S2",
        "T0",
        "T-ALL",
    ]


def test_all_show_images_strict_skips_first_list_specials() -> None:
    sources = [[simg("Z", "0")], [simg("T0", "0")]]

    assert all_show_images("old", sources, language="en", season=2, strict=True) == ["T0"]
    assert all_show_images("old", sources, language="en", season=2) == ["Z", "T0"]


def test_all_show_images_falls_back_when_nothing_matches() -> None:
    sources = [[simg("S3", "3")]]

    assert all_show_images("old", sources, language="en", season=1) == ["old"]
