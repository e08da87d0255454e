"""Asset downloading with process-wide dedup and stylesheet recursion."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Set

import requests

from .config import ConfigurationError
from .extract import parse_css_urls
from .fetch import HttpFetcher
from .models import DOWNLOADED, EXISTING, FAILED, SKIPPED, DownloadResult
from .paths import to_local_path
from .rewrite import rewrite_css
from .urls import is_data_uri, is_stylesheet_url, resolve_reference
from .utils import exists, write_bytes

logger = logging.getLogger("site_mirror")


def _is_stylesheet(url: str, content_type: str) -> bool:
    mime = content_type.split(";")[0].strip().lower()
    return mime == "text/css" or is_stylesheet_url(url)


class AssetPipeline:
    """Download each asset URL at most once per crawl run.

    ``downloaded`` maps asset URLs to their files, ``failed`` records URLs
    that could not be fetched, and ``in_progress`` holds URLs whose download
    has started but not finished, which stops stylesheet cycles.
    """

    def __init__(self, fetcher: Optional[HttpFetcher], output_root: Path) -> None:
        if fetcher is None:
            raise ConfigurationError("No fetch capability configured for asset downloads")
        self.fetcher = fetcher
        self.output_root = Path(output_root)
        self.downloaded: Dict[str, Path] = {}
        self.failed: Set[str] = set()
        self.in_progress: Set[str] = set()

    def ensure_downloaded(self, url: str) -> DownloadResult:
        """Make sure ``url`` exists on disk; filesystem errors propagate."""
        if is_data_uri(url):
            return DownloadResult(url, SKIPPED)
        if url in self.downloaded:
            return DownloadResult(url, EXISTING, self.downloaded[url])
        if url in self.failed:
            return DownloadResult(url, FAILED)
        if url in self.in_progress:
            logger.debug("Skipping %s: download already in progress", url)
            return DownloadResult(url, SKIPPED)

        local_path = to_local_path(url, self.output_root)
        if local_path is None:
            logger.warning("Skipping %s: cannot map URL to a local path", url)
            self.failed.add(url)
            return DownloadResult(url, FAILED)
        if exists(local_path):
            self.downloaded[url] = local_path
            return DownloadResult(url, EXISTING, local_path)

        self.in_progress.add(url)
        try:
            return self._download(url, local_path)
        finally:
            self.in_progress.discard(url)

    def _download(self, url: str, local_path: Path) -> DownloadResult:
        logger.info("Downloading %s", url)
        try:
            response = self.fetcher.fetch(url)
        except requests.RequestException as exc:
            logger.warning("Failed to fetch asset %s: %s", url, exc)
            self.failed.add(url)
            return DownloadResult(url, FAILED)
        if not response.ok:
            logger.warning("Failed to fetch asset %s: HTTP %s", url, response.status)
            self.failed.add(url)
            return DownloadResult(url, FAILED)

        write_bytes(local_path, response.content)
        self.downloaded[url] = local_path
        if _is_stylesheet(url, response.content_type):
            self._localize_stylesheet(url, local_path, response.content)
        return DownloadResult(url, DOWNLOADED, local_path)

    def _localize_stylesheet(self, css_url: str, css_path: Path, content: bytes) -> None:
        """Fetch what the stylesheet references and rewrite it in place."""
        css_text = content.decode("utf-8", errors="surrogateescape")
        references: Dict[str, Path] = {}
        for reference in parse_css_urls(css_text):
            absolute = resolve_reference(css_url, reference)
            if absolute is None or absolute in references:
                continue
            result = self._ensure_isolated(absolute)
            if result.ok:
                references[absolute] = result.local_path
        if not references:
            return
        rewritten = rewrite_css(css_text, css_url, references, css_path)
        if rewritten != css_text:
            write_bytes(css_path, rewritten.encode("utf-8", errors="surrogateescape"))
            logger.debug("Rewrote %d reference(s) in %s", len(references), css_path)

    def _ensure_isolated(self, url: str) -> DownloadResult:
        """Like ``ensure_downloaded`` but a failed write only loses this asset."""
        try:
            return self.ensure_downloaded(url)
        except OSError as exc:
            logger.error("Failed to save asset %s: %s", url, exc)
            self.failed.add(url)
            return DownloadResult(url, FAILED)

    def download_all(self, urls: Iterable[str]) -> Dict[str, Path]:
        """Download assets one at a time and return the URL to file map."""
        url_to_local: Dict[str, Path] = {}
        for url in urls:
            result = self._ensure_isolated(url)
            if result.ok:
                url_to_local[url] = result.local_path
        return url_to_local
