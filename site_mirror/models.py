"""Data models used throughout the mirror pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

DOWNLOADED = "downloaded"
EXISTING = "existing"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class RenderedPage:
    """HTML captured from the browser after the page settled."""

    url: str
    final_url: str
    html: str


@dataclass
class FetchResponse:
    """Raw HTTP response for an asset request."""

    url: str
    status: int
    content: bytes
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass
class DownloadResult:
    """Outcome of ensuring a single asset exists on disk."""

    url: str
    status: str
    local_path: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return self.status in (DOWNLOADED, EXISTING) and self.local_path is not None


@dataclass
class PageResult:
    """Everything produced while processing one page."""

    url: str
    output_path: Optional[Path] = None
    assets: Dict[str, Path] = field(default_factory=dict)
    links: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CrawlStats:
    """Summary counts reported when a crawl finishes."""

    output_root: Path
    pages_visited: int = 0
    pages_saved: int = 0
    pages_failed: int = 0
    assets_downloaded: int = 0
    assets_failed: int = 0
    elapsed_seconds: float = 0.0
