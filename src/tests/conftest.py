"""
conftest.py

Test configuration for wallhaven-plugin tests.

Defines Pytest fixtures used across the whole test suite: generated test images and a fake
catalog client that serves canned search pages and tags instead of calling wallhaven.cc.
Fixtures used within only a single module are defined directly in that module.
"""

import io
from pathlib import Path

import pytest
from PIL import Image

from wallhaven_plugin.wallhaven_handler import CandidateSummary


class FakeCatalog:
    """
    Stand-in for WallhavenClient. 'pages' is the single search page to return, 'tags' maps
    wallpaper id to its tag list. Every call is recorded so tests can count requests.
    """

    def __init__(self, page=(), tags=None, search_error=None, tag_errors=None):
        self.page = list(page)
        self.tags = tags or {}
        self.search_error = search_error
        self.tag_errors = tag_errors or {}
        self.search_calls = []
        self.tag_calls = []

    def search(self, resolution, query=None):
        self.search_calls.append((resolution, query))
        if self.search_error is not None:
            raise self.search_error
        return list(self.page)

    def fetch_tags(self, identifier):
        self.tag_calls.append(identifier)
        if identifier in self.tag_errors:
            raise self.tag_errors[identifier]
        return tuple(tag.lower() for tag in self.tags.get(identifier, ()))


def make_candidate(identifier: str) -> CandidateSummary:
    return CandidateSummary(
        id=identifier,
        url=f"https://wallhaven.cc/w/{identifier}",
        path=f"https://w.wallhaven.cc/full/{identifier[:2]}/wallhaven-{identifier}.jpg",
    )


@pytest.fixture
def fake_catalog():
    """Factory fixture: fake_catalog(page=[...], tags={...})"""

    return FakeCatalog


@pytest.fixture
def candidate():
    """Factory fixture: candidate("abc123") -> CandidateSummary"""

    return make_candidate


@pytest.fixture(scope="session")
def jpeg_bytes() -> bytes:
    """
    Raw bytes of a small JPEG generated with Pillow.
    """

    buffer = io.BytesIO()
    Image.new("RGB", (64, 36), color=(30, 120, 200)).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def test_image(tmp_path, jpeg_bytes) -> Path:
    """
    Path to a valid JPEG inside the test's tmp_path.
    """

    path = tmp_path / "test_image.jpg"
    path.write_bytes(jpeg_bytes)
    return path


@pytest.fixture
def not_an_image(tmp_path) -> Path:

    path = tmp_path / "not_an_image.txt"
    path.write_text("this is not an image")
    return path
