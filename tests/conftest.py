"""Shared fakes for the render and fetch capabilities."""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import pytest

from site_mirror.config import MirrorConfig
from site_mirror.models import FetchResponse, RenderedPage


class FakeFetcher:
    """Serves canned responses and records every URL requested."""

    def __init__(self) -> None:
        self.responses: Dict[str, Union[FetchResponse, Exception]] = {}
        self.calls: List[str] = []
        self.closed = False

    def add(self, url: str, body: bytes, status: int = 200, content_type: str = "") -> None:
        self.responses[url] = FetchResponse(url, status, body, content_type)

    def fail(self, url: str, exc: Exception) -> None:
        self.responses[url] = exc

    def fetch(self, url: str) -> FetchResponse:
        self.calls.append(url)
        value = self.responses.get(url)
        if value is None:
            return FetchResponse(url, 404, b"")
        if isinstance(value, Exception):
            raise value
        return value

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class FakeRenderer:
    """Returns fixed HTML per URL; unknown URLs behave like navigation errors."""

    def __init__(
        self,
        pages: Optional[Dict[str, Union[str, Exception]]] = None,
        generate: Optional[Callable[[str], str]] = None,
    ) -> None:
        self.pages = dict(pages or {})
        self.generate = generate
        self.calls: List[str] = []

    async def render(self, url: str) -> RenderedPage:
        self.calls.append(url)
        page = self.pages.get(url)
        if page is None and self.generate is not None:
            page = self.generate(url)
        if page is None:
            raise RuntimeError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        if isinstance(page, Exception):
            raise page
        return RenderedPage(url=url, final_url=url, html=page)

    async def __aenter__(self) -> "FakeRenderer":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def make_renderer() -> Callable[..., FakeRenderer]:
    return FakeRenderer


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., MirrorConfig]:
    def _make(start_url: str = "https://example.test/app/", **overrides) -> MirrorConfig:
        settings = dict(
            start_url=start_url,
            output_root=tmp_path / "site",
            path_prefix="/app/",
            max_pages=50,
            wait_after_load=0.0,
        )
        settings.update(overrides)
        return MirrorConfig(**settings)

    return _make
