"""MCP server exposing the site mirror as a tool."""

from __future__ import annotations

import logging
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .config import DEFAULT_MAX_PAGES, MirrorConfig
from .crawler import run_mirror
from .models import CrawlStats

logger = logging.getLogger("site_mirror.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="site-mirror")


def format_summary(stats: CrawlStats) -> str:
    """Plain-text report returned to the MCP client."""
    return "\n".join(
        [
            f"Pages visited: {stats.pages_visited}",
            f"Pages saved: {stats.pages_saved}",
            f"Pages failed: {stats.pages_failed}",
            f"Assets downloaded: {stats.assets_downloaded}",
            f"Assets failed: {stats.assets_failed}",
            f"Output folder: {stats.output_root}",
        ]
    )


@mcp.tool()
async def mirror(
    url: str,
    output: str = "rendered-site",
    path_prefix: str = "/",
    max_pages: int = DEFAULT_MAX_PAGES,
) -> str:
    """Render a site with Playwright and save an offline copy under ``output``."""

    config = MirrorConfig(
        start_url=url,
        output_root=Path(output).expanduser().resolve(),
        path_prefix=path_prefix,
        max_pages=max_pages,
    )
    stats = await run_mirror(config)
    return format_summary(stats)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
