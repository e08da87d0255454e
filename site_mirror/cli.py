"""Command-line entry point for the site mirror."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import (
    DEFAULT_MAX_PAGES,
    DEFAULT_NAVIGATION_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_USER_AGENT,
    ConfigurationError,
    MirrorConfig,
)
from .crawler import run_mirror

logger = logging.getLogger("site_mirror.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Render a site via Playwright, save the rendered HTML and its assets, "
            "and rewrite references so the copy can be browsed offline."
        ),
    )
    parser.add_argument("start_url", help="Page where the crawl starts")
    parser.add_argument(
        "--prefix",
        default="/",
        help="Only crawl pages whose path starts with this prefix",
    )
    parser.add_argument(
        "--output",
        default="rendered-site",
        type=Path,
        help="Directory where pages and assets should be written",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=DEFAULT_MAX_PAGES,
        help="Stop after visiting this many pages",
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=1000,
        help="Milliseconds to wait after network idle before reading HTML",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_NAVIGATION_TIMEOUT,
        help="Navigation timeout in seconds",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=DEFAULT_REQUEST_TIMEOUT,
        help="Timeout in seconds for each asset download",
    )
    parser.add_argument(
        "--user-agent",
        default=DEFAULT_USER_AGENT,
        help="User-Agent header for the browser and asset requests",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> MirrorConfig:
    return MirrorConfig(
        start_url=args.start_url,
        output_root=Path(args.output).resolve(),
        path_prefix=args.prefix,
        max_pages=args.max_pages,
        wait_after_load=args.delay_ms / 1000,
        navigation_timeout=args.timeout,
        request_timeout=args.request_timeout,
        user_agent=args.user_agent,
    )


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = build_config(args)
    try:
        config.validate()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        sys.exit(2)

    try:
        stats = asyncio.run(run_mirror(config))
    except ConfigurationError as exc:
        logger.error("%s", exc)
        sys.exit(2)

    logger.info(
        "Finished in %.2fs (%d pages saved, %d failed, %d asset downloads failed)",
        stats.elapsed_seconds,
        stats.pages_saved,
        stats.pages_failed,
        stats.assets_failed,
    )
    print(f"Pages visited: {stats.pages_visited}")
    print(f"Assets downloaded: {stats.assets_downloaded}")
    print(f"Output folder: {stats.output_root}")


if __name__ == "__main__":
    main()
