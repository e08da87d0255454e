"""Page rendering through a single headless Chromium page."""

from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import async_playwright

from .config import MirrorConfig
from .models import RenderedPage

logger = logging.getLogger("site_mirror")


class PlaywrightRenderer:
    """Render pages one at a time in a single reusable browser page.

    Use as an async context manager so the browser is always shut down.
    Navigation timeouts surface as ``playwright.async_api.TimeoutError``.
    """

    def __init__(self, config: MirrorConfig) -> None:
        self.config = config
        self._playwright: Any = None
        self._browser: Any = None
        self._page: Any = None

    async def __aenter__(self) -> "PlaywrightRenderer":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def start(self) -> None:
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=True)
        self._page = await self._browser.new_page(user_agent=self.config.user_agent)
        self._page.set_default_navigation_timeout(self.config.navigation_timeout * 1000)

    async def render(self, url: str) -> RenderedPage:
        """Navigate to ``url``, let it settle and return the rendered HTML."""
        if self._page is None:
            raise RuntimeError("Renderer has not been started")
        logger.debug("Loading %s", url)
        await self._page.goto(url, wait_until="networkidle")
        if self.config.wait_after_load:
            await self._page.wait_for_timeout(int(self.config.wait_after_load * 1000))
        html = await self._page.content()
        return RenderedPage(url=url, final_url=self._page.url, html=html)

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
            self._page = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
