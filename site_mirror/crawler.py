"""High-level orchestration: render pages, mirror assets, follow links."""

from __future__ import annotations

import logging
import time
from typing import Any, List, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .assets import AssetPipeline
from .config import MirrorConfig, MirrorError
from .extract import extract_assets, extract_links
from .fetch import HttpFetcher
from .frontier import Frontier
from .models import CrawlStats, PageResult
from .paths import page_output_path
from .render import PlaywrightRenderer
from .rewrite import rewrite_html
from .utils import write_text

logger = logging.getLogger("site_mirror")


class MirrorCrawler:
    """Owns all state for one crawl run: frontier, asset store and results.

    Pages are processed strictly one after another. ``renderer`` is anything
    with an async ``render(url) -> RenderedPage`` method.
    """

    def __init__(
        self,
        config: MirrorConfig,
        fetcher: Optional[HttpFetcher],
        renderer: Any = None,
    ) -> None:
        self.config = config
        self.renderer = renderer
        self.frontier = Frontier(
            config.start_hostname, config.path_prefix, config.max_pages
        )
        self.assets = AssetPipeline(fetcher, config.output_root)
        self.results: List[PageResult] = []

    async def process_page(self, url: str) -> PageResult:
        """Render one page, save it with local asset references, queue its links."""
        rendered = await self.renderer.render(url)
        base_url = rendered.final_url or url

        asset_urls = extract_assets(rendered.html, base_url)
        logger.debug("Found %d asset(s) on %s", len(asset_urls), url)
        url_to_local = self.assets.download_all(asset_urls)

        output_path = page_output_path(url, self.config.output_root)
        if output_path is None:
            raise MirrorError(f"Cannot map page URL to a file: {url}")
        html = rewrite_html(rendered.html, base_url, url_to_local, output_path)
        write_text(output_path, html)
        logger.info("Saved HTML to %s", output_path)

        admitted = [
            link
            for link in extract_links(rendered.html, base_url)
            if self.frontier.admit(link)
        ]
        return PageResult(
            url=url,
            output_path=output_path,
            assets=url_to_local,
            links=admitted,
        )

    async def run(self, renderer: Any = None) -> CrawlStats:
        """Crawl from the start URL until the frontier is empty or the cap is hit."""
        if renderer is not None:
            self.renderer = renderer
        if self.renderer is None:
            raise MirrorError("No renderer available for the crawl")

        start = time.perf_counter()
        self.frontier.seed(self.config.start_url)
        while True:
            url = self.frontier.pop()
            if url is None:
                break
            logger.info("Visiting %s", url)
            try:
                result = await self.process_page(url)
            except PlaywrightTimeoutError as exc:
                logger.error("Timeout while loading %s: %s", url, exc)
                result = PageResult(url=url, error=str(exc))
            except Exception as exc:  # pylint: disable=broad-except
                logger.exception("Unexpected error loading %s", url)
                result = PageResult(url=url, error=str(exc))
            self.results.append(result)

        return CrawlStats(
            output_root=self.config.output_root,
            pages_visited=len(self.frontier.visited),
            pages_saved=sum(1 for result in self.results if result.ok),
            pages_failed=sum(1 for result in self.results if not result.ok),
            assets_downloaded=len(self.assets.downloaded),
            assets_failed=len(self.assets.failed),
            elapsed_seconds=time.perf_counter() - start,
        )


async def _crawl(config: MirrorConfig, fetcher: HttpFetcher) -> CrawlStats:
    # Built before the browser starts so configuration errors surface first.
    crawler = MirrorCrawler(config, fetcher)
    async with PlaywrightRenderer(config) as renderer:
        return await crawler.run(renderer)


async def run_mirror(
    config: MirrorConfig,
    fetcher: Optional[HttpFetcher] = None,
) -> CrawlStats:
    """Mirror a site with Playwright rendering and requests-based downloads."""
    config.validate()
    if fetcher is not None:
        return await _crawl(config, fetcher)
    with HttpFetcher(config.request_timeout, config.user_agent) as owned:
        return await _crawl(config, owned)
