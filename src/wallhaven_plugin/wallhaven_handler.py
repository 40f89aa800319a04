"""
Wallhaven API - Catalog Client

This module is a thin wrapper around two endpoints of the public wallhaven.cc JSON API:

    /search     randomized search filtered by resolution and an optional free text query
    /w/<id>     detail lookup for a single wallpaper, used here only for its tags

URLs are built by the small decorators below (base url, path, resolution) so the endpoint
layout lives in one place. Every call issues exactly one GET request through requests and
either returns typed data or raises TransportError / DecodeError. There are no retries and
nothing is cached, each call is a fresh round trip.

API reference: https://wallhaven.cc/help/api
"""

from dataclasses import dataclass
from functools import wraps
from inspect import signature
from typing import Optional, Protocol
from urllib.parse import quote, urlencode

import requests


class TransportError(Exception):
    """
    Raised when a request to the remote service could not be completed: connection
    problems, timeouts, or a non-2xx status code.
    """

    def __init__(self, msg: str, status_code: Optional[int] = None):
        super().__init__(msg)
        self.status_code = status_code


class DecodeError(Exception):
    """
    Raised when a response body is not JSON or does not have the expected shape.
    """

    pass


RESOLUTION_FILTERS = {"atleast": "atleast", "exact": "resolutions"}


@dataclass(frozen=True)
class TargetResolution:
    width: int
    height: int

    def __post_init__(self):
        for value in (self.width, self.height):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(
                    f"Resolution must be two positive integers, got {self.width}x{self.height}."
                )

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class CandidateSummary:
    """One wallpaper from a search page. 'url' is the wallhaven page, 'path' the raw image."""

    id: str
    url: str
    path: str


@dataclass(frozen=True)
class SearchMeta:
    last_page: int
    seed: Optional[str] = None


TagSet = tuple[str, ...]


class CatalogClient(Protocol):
    """The two remote operations the matcher depends on."""

    def search(
        self, resolution: TargetResolution, query: Optional[str] = None
    ) -> list[CandidateSummary]:
        ...

    def fetch_tags(self, identifier: str) -> TagSet:
        ...


"""
URL building
"""


def base_url(func):
    """
    Inject the API base url into the decorated url builder so a change of host or API
    version happens in one place.
    """

    base_url = "https://wallhaven.cc/api/v1"

    @wraps(func)
    def wrapper(*args, **kwargs):
        return func(base_url=base_url, *args, **kwargs)

    return wrapper


def url_path(url_path: str):
    """
    Inject the path component for the intended endpoint.
    """

    def wrapper(func):
        @wraps(func)
        def inner(*args, **kwargs):
            return func(url_path=url_path, *args, **kwargs)

        return inner

    return wrapper


def resolution(func):
    """
    Convert the 'resolution' argument of the decorated function into the (key, value) pair
    the search endpoint expects, e.g. ("atleast", "3840x2160"). The key depends on the
    'resolution_filter' argument.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):

        arguments = signature(func).bind(*args, **kwargs).arguments
        target = arguments.get("resolution")
        mode = arguments.get("resolution_filter", "atleast")

        try:
            key = RESOLUTION_FILTERS[mode]
        except KeyError:
            raise ValueError(
                f"Unknown resolution filter '{mode}', expected one of {sorted(RESOLUTION_FILTERS)}."
            )

        return func(resolution_param=(key, str(target)), *args, **kwargs)

    return wrapper


def make_wallhaven_url(path_components: list[str], params: dict = None) -> str:
    url = "/".join(path_components)
    if params:
        url = f"{url}?{urlencode(params, quote_via=quote)}"
    return url


@base_url
@url_path("search")
@resolution
def search_url(
    resolution: TargetResolution,
    query: Optional[str] = None,
    resolution_filter: str = "atleast",
    api_key: Optional[str] = None,
    *args,
    **kwargs,
) -> str:
    """
    Build the url for a randomized search page. Only the first page is ever requested.
    """

    key, value = kwargs.get("resolution_param")
    params = {"sorting": "random", key: value}
    if query:
        params["q"] = query
    if api_key:
        params["apikey"] = api_key

    return make_wallhaven_url([kwargs.get("base_url"), kwargs.get("url_path")], params)


@base_url
@url_path("w")
def wallpaper_url(identifier: str, api_key: Optional[str] = None, *args, **kwargs) -> str:

    params = {"apikey": api_key} if api_key else None
    return make_wallhaven_url(
        [kwargs.get("base_url"), kwargs.get("url_path"), quote(identifier, safe="")],
        params,
    )


"""
Response decoding
"""


def _require(obj, key: str, kind, context: str):
    if not isinstance(obj, dict) or key not in obj:
        raise DecodeError(f"{context}: missing '{key}' in response.")
    value = obj[key]
    if not isinstance(value, kind):
        raise DecodeError(
            f"{context}: expected '{key}' to be {kind.__name__}, got {type(value).__name__}."
        )
    return value


def parse_search_response(body) -> tuple[list[CandidateSummary], SearchMeta]:
    """
    Decode a search envelope of the form {data: [...], meta: {last_page, seed}}.
    """

    data = _require(body, "data", list, "search")
    meta = _require(body, "meta", dict, "search")

    last_page = _require(meta, "last_page", int, "search meta")
    seed = meta.get("seed")
    if seed is not None and not isinstance(seed, str):
        raise DecodeError("search meta: expected 'seed' to be str or null.")

    candidates = [
        CandidateSummary(
            id=_require(item, "id", str, "search item"),
            url=_require(item, "url", str, "search item"),
            path=_require(item, "path", str, "search item"),
        )
        for item in data
    ]

    return candidates, SearchMeta(last_page=last_page, seed=seed)


def parse_tags_response(body) -> TagSet:
    """
    Decode a detail envelope of the form {data: {tags: [{name}, ...]}} into lowercase tag names.
    """

    data = _require(body, "data", dict, "wallpaper")
    tags = _require(data, "tags", list, "wallpaper")
    return tuple(_require(tag, "name", str, "wallpaper tag").lower() for tag in tags)


"""
Client
"""


class WallhavenClient:
    """
    Blocking client for the wallhaven.cc API. Construct once per run with the resolution
    filter mode ("atleast" or "exact") and optional API key / timeout.
    """

    def __init__(
        self,
        resolution_filter: str = "atleast",
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        if resolution_filter not in RESOLUTION_FILTERS:
            raise ValueError(
                f"Unknown resolution filter '{resolution_filter}', expected one of {sorted(RESOLUTION_FILTERS)}."
            )

        self.resolution_filter = resolution_filter
        self.api_key = api_key
        self.timeout = timeout
        self.last_meta: Optional[SearchMeta] = None

    def _get_json(self, url: str):

        try:
            r = requests.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as error:
            raise TransportError(f"Request to {url} failed: {error}")

        try:
            r.raise_for_status()
        except requests.exceptions.HTTPError:
            raise TransportError(
                f"Something went wrong trying to access {url} (status code {r.status_code})",
                status_code=r.status_code,
            )

        try:
            return r.json()
        except ValueError as error:
            raise DecodeError(f"Response from {url} is not valid JSON: {error}")

    def search(
        self, resolution: TargetResolution, query: Optional[str] = None
    ) -> list[CandidateSummary]:
        """
        Request one randomized page of wallpapers matching the resolution filter and
        optional query. Candidates are returned in server order.
        """

        url = search_url(
            resolution,
            query=query,
            resolution_filter=self.resolution_filter,
            api_key=self.api_key,
        )
        candidates, self.last_meta = parse_search_response(self._get_json(url))
        return candidates

    def fetch_tags(self, identifier: str) -> TagSet:
        """
        Request the detail record for one wallpaper and return its lowercase tag names.
        """

        url = wallpaper_url(identifier, api_key=self.api_key)
        return parse_tags_response(self._get_json(url))
