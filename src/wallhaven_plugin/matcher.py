"""
Wallpaper Matcher

Pick a wallpaper from one randomized search page. Candidates are tried in the order the
server returned them; the server's random seed is what makes the pick random, so the page
is never reshuffled here. For each candidate the tags are fetched (one request each) and
the first candidate whose tags clear every exclusion term wins. Nothing is ranked or scored.

Exclusion terms match as case-insensitive substrings of a tag: excluding "car" also
rejects a wallpaper tagged "racecar".

Errors from the catalog client are not caught. A single failed request anywhere in the
loop aborts the whole selection.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional, Union

from wallhaven_plugin.wallhaven_handler import CandidateSummary
from wallhaven_plugin.wallhaven_handler import CatalogClient
from wallhaven_plugin.wallhaven_handler import TagSet
from wallhaven_plugin.wallhaven_handler import TargetResolution


log = logging.getLogger(__name__)


class NoMatchError(Exception):
    """
    Raised when a search succeeded but no candidate on the page passed the exclusion filter.
    """

    pass


@dataclass(frozen=True)
class SearchPolicy:
    """
    What to look for (optional free text query) and what to reject (exclusion terms).
    Terms are stored lowercase; a blank query means no text filter.
    """

    query: Optional[str] = None
    excluded: frozenset = field(default_factory=frozenset)

    def __post_init__(self):
        query = self.query.strip() if self.query else None
        object.__setattr__(self, "query", query or None)
        object.__setattr__(
            self, "excluded", frozenset(term.lower() for term in self.excluded if term)
        )


@dataclass(frozen=True)
class Found:
    wallpaper: CandidateSummary
    tags: TagSet


class NotFound:
    """The page held no admissible candidate."""

    def __bool__(self):
        return False

    def __repr__(self):
        return "NOT_FOUND"


NOT_FOUND = NotFound()

MatchResult = Union[Found, NotFound]


def is_admissible(tags: Iterable[str], excluded: Iterable[str]) -> bool:
    """
    True if no tag contains any excluded term. No tags, or no terms, is always admissible.
    """

    terms = [term.lower() for term in excluded]
    return all(
        term not in tag.lower() for tag in tags for term in terms
    )


def select_wallpaper(
    client: CatalogClient,
    policy: SearchPolicy,
    resolution: TargetResolution,
    logger: logging.Logger = log,
) -> MatchResult:
    """
    Return Found for the first admissible candidate of one search page, or NOT_FOUND.
    """

    candidates = client.search(resolution, policy.query)
    logger.info(
        "search for %s (query: %s) returned %d candidates",
        resolution,
        policy.query,
        len(candidates),
    )

    for candidate in candidates:
        tags = client.fetch_tags(candidate.id)

        if is_admissible(tags, policy.excluded):
            logger.info("%s %s", candidate.url, list(tags))
            return Found(candidate, tags)

        logger.info("%s does not match", candidate.url)

    return NOT_FOUND
