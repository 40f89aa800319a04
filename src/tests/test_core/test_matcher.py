"""
Test matcher

Validate first-fit selection over one search page and the substring exclusion rule. The catalog
is replaced by the FakeCatalog from conftest.py so no network calls are made and every
search / tag request can be counted.

*** Fixtures ***
- fake_catalog, candidate (defined in conftest.py)
"""

import logging

import pytest

from wallhaven_plugin.matcher import Found
from wallhaven_plugin.matcher import NOT_FOUND
from wallhaven_plugin.matcher import NotFound
from wallhaven_plugin.matcher import SearchPolicy
from wallhaven_plugin.matcher import is_admissible
from wallhaven_plugin.matcher import select_wallpaper
from wallhaven_plugin.wallhaven_handler import DecodeError
from wallhaven_plugin.wallhaven_handler import TargetResolution
from wallhaven_plugin.wallhaven_handler import TransportError


UHD = TargetResolution(3840, 2160)


@pytest.mark.parametrize(
    ["tags", "excluded", "expected"],
    [
        ((), (), True),
        ((), ("neon",), True),
        (("city", "night"), (), True),
        (("city", "night"), ("car",), True),
        (("racecar",), ("car",), False),
        (("city", "Neon Lights"), ("neon",), False),
        (("city", "neon lights"), ("NEON",), False),
        (("sunset", "beach"), ("sun", "sea"), False),
        (("forest",), ("forests",), True),
    ],
)
def test_is_admissible(tags, excluded, expected):
    assert is_admissible(tags, excluded) is expected


def test_search_policy_normalizes_input():

    policy = SearchPolicy(query="  ", excluded=["Neon", "ANIME", ""])

    assert policy.query is None
    assert policy.excluded == frozenset({"neon", "anime"})


def test_search_policy_is_immutable():

    policy = SearchPolicy(query="car")

    with pytest.raises(AttributeError):
        policy.query = "bike"


def test_empty_exclusion_returns_first_candidate(fake_catalog, candidate):

    page = [candidate("aaa111"), candidate("bbb222"), candidate("ccc333")]
    catalog = fake_catalog(page=page, tags={"aaa111": ["neon"], "bbb222": ["city"]})

    result = select_wallpaper(catalog, SearchPolicy(), UHD)

    assert result == Found(page[0], ("neon",))
    assert catalog.tag_calls == ["aaa111"]


def test_empty_page_returns_not_found_without_tag_requests(fake_catalog):

    catalog = fake_catalog(page=[])

    result = select_wallpaper(catalog, SearchPolicy(excluded={"neon"}), UHD)

    assert result is NOT_FOUND
    assert not result
    assert catalog.tag_calls == []


def test_all_candidates_rejected_after_checking_each(fake_catalog, candidate):

    page = [candidate("aaa111"), candidate("bbb222"), candidate("ccc333")]
    catalog = fake_catalog(
        page=page,
        tags={
            "aaa111": ["neon city"],
            "bbb222": ["Neon"],
            "ccc333": ["cyberpunk", "neon-genesis"],
        },
    )

    result = select_wallpaper(catalog, SearchPolicy(excluded={"neon"}), UHD)

    assert isinstance(result, NotFound)
    assert catalog.tag_calls == ["aaa111", "bbb222", "ccc333"]


def test_fourth_candidate_wins_after_four_tag_requests(fake_catalog, candidate):

    page = [candidate(f"w{i}0000") for i in range(6)]
    tags = {f"w{i}0000": ["neon", "city"] for i in range(3)}
    tags["w30000"] = ["forest", "fog"]
    catalog = fake_catalog(page=page, tags=tags)

    result = select_wallpaper(catalog, SearchPolicy(query=None, excluded={"neon"}), UHD)

    assert isinstance(result, Found)
    assert result.wallpaper == page[3]
    assert result.tags == ("forest", "fog")
    assert len(catalog.tag_calls) == 4


def test_candidate_without_tags_is_admissible(fake_catalog, candidate):

    page = [candidate("aaa111"), candidate("bbb222")]
    catalog = fake_catalog(page=page, tags={"aaa111": ["neon"]})

    result = select_wallpaper(catalog, SearchPolicy(excluded={"neon"}), UHD)

    assert result == Found(page[1], ())


def test_query_and_resolution_passed_to_search(fake_catalog):

    catalog = fake_catalog(page=[])

    select_wallpaper(catalog, SearchPolicy(query="car"), TargetResolution(1920, 1080))

    assert catalog.search_calls == [(TargetResolution(1920, 1080), "car")]


def test_search_failure_propagates_without_tag_requests(fake_catalog, candidate):

    catalog = fake_catalog(
        page=[candidate("aaa111")], search_error=TransportError("connection refused")
    )

    with pytest.raises(TransportError):
        select_wallpaper(catalog, SearchPolicy(), UHD)

    assert catalog.tag_calls == []


@pytest.mark.parametrize(
    "error", [TransportError("connection reset"), DecodeError("bad shape")]
)
def test_tag_failure_aborts_selection(fake_catalog, candidate, error):
    """
    A failure on the second candidate must not be skipped, even though the third would match.
    """

    page = [candidate("aaa111"), candidate("bbb222"), candidate("ccc333")]
    catalog = fake_catalog(
        page=page,
        tags={"aaa111": ["neon"], "ccc333": ["forest"]},
        tag_errors={"bbb222": error},
    )

    with pytest.raises(type(error)):
        select_wallpaper(catalog, SearchPolicy(excluded={"neon"}), UHD)

    assert catalog.tag_calls == ["aaa111", "bbb222"]


def test_rejections_and_match_are_logged(fake_catalog, candidate, caplog):

    page = [candidate("aaa111"), candidate("bbb222")]
    catalog = fake_catalog(page=page, tags={"aaa111": ["neon"], "bbb222": ["fog"]})
    logger = logging.getLogger("test_matcher")

    with caplog.at_level(logging.INFO, logger="test_matcher"):
        select_wallpaper(catalog, SearchPolicy(excluded={"neon"}), UHD, logger=logger)

    messages = [record.getMessage() for record in caplog.records]
    assert f"{page[0].url} does not match" in messages
    assert f"{page[1].url} ['fog']" in messages
