"""Asset and link discovery on rendered HTML."""

from __future__ import annotations

import re
from typing import Callable, Iterable, Iterator, List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .urls import is_fetchable_reference, resolve_reference

CSS_URL_RE = re.compile(r"url\(\s*([\"']?)([^)\"']+)\1\s*\)", re.IGNORECASE)
CSS_IMPORT_RE = re.compile(r"@import\s+([\"'])([^\"']+)\1", re.IGNORECASE)
SRCSET_SPLIT_RE = re.compile(r"\s*,\s*")
WS_RE = re.compile(r"\s+")

# (CSS selector, attribute holding the URL)
ASSET_SELECTORS: Tuple[Tuple[str, str], ...] = (
    ("img[src]", "src"),
    ("script[src]", "src"),
    ('link[rel~="stylesheet"][href]', "href"),
    ("source[src]", "src"),
    ("video[src]", "src"),
    ("audio[src]", "src"),
    ("iframe[src]", "src"),
    ("track[src]", "src"),
    ("video[poster]", "poster"),
    ('link[rel~="icon"][href]', "href"),
    ('a[rel~="icon"][href]', "href"),
    ('link[rel~="apple-touch-icon"][href]', "href"),
)

OG_IMAGE_SELECTOR = 'meta[property="og:image"][content]'
SRCSET_SELECTOR = "img[srcset], source[srcset]"


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def document_base(soup: BeautifulSoup, page_url: str) -> str:
    """Base URL used by the browser, honouring ``<base href>``."""
    tag = soup.find("base", href=True)
    if tag and tag.get("href"):
        return urljoin(page_url, tag["href"])
    return page_url


def parse_css_urls(css_text: str) -> List[str]:
    """Return raw ``url(...)`` and ``@import "..."`` references in order."""
    found: List[str] = []
    for pattern in (CSS_URL_RE, CSS_IMPORT_RE):
        for match in pattern.finditer(css_text):
            reference = match.group(2).strip()
            if is_fetchable_reference(reference) and reference not in found:
                found.append(reference)
    return found


def parse_srcset(value: str) -> List[str]:
    """Return the URL part of each ``srcset`` candidate."""
    urls: List[str] = []
    if not value:
        return urls
    for candidate in SRCSET_SPLIT_RE.split(value.strip()):
        parts = WS_RE.split(candidate.strip())
        if parts and parts[0]:
            urls.append(parts[0])
    return urls


def selector_references(soup: BeautifulSoup) -> Iterator[str]:
    for selector, attribute in ASSET_SELECTORS:
        for tag in soup.select(selector):
            yield tag.get(attribute)


def og_image_references(soup: BeautifulSoup) -> Iterator[str]:
    for tag in soup.select(OG_IMAGE_SELECTOR):
        yield tag.get("content")


def srcset_references(soup: BeautifulSoup) -> Iterator[str]:
    for tag in soup.select(SRCSET_SELECTOR):
        yield from parse_srcset(tag.get("srcset", ""))


def inline_style_references(soup: BeautifulSoup) -> Iterator[str]:
    for tag in soup.select("[style]"):
        yield from parse_css_urls(tag.get("style") or "")


def style_block_references(soup: BeautifulSoup) -> Iterator[str]:
    for style in soup.find_all("style"):
        yield from parse_css_urls(style.string or "")


Extractor = Callable[[BeautifulSoup], Iterable[Optional[str]]]

EXTRACTORS: Tuple[Extractor, ...] = (
    selector_references,
    og_image_references,
    srcset_references,
    inline_style_references,
    style_block_references,
)


def _resolve_unique(references: Iterable[Optional[str]], base: str) -> List[str]:
    urls: List[str] = []
    seen = set()
    for reference in references:
        absolute = resolve_reference(base, reference)
        if absolute and absolute not in seen:
            seen.add(absolute)
            urls.append(absolute)
    return urls


def extract_assets(html: str, page_url: str) -> List[str]:
    """Absolute URLs of every asset the page references, in discovery order."""
    soup = parse_html(html)
    base = document_base(soup, page_url)
    return _resolve_unique(
        (reference for extractor in EXTRACTORS for reference in extractor(soup)),
        base,
    )


def extract_links(html: str, page_url: str) -> List[str]:
    """Absolute targets of every ``<a href>`` on the page."""
    soup = parse_html(html)
    base = document_base(soup, page_url)
    return _resolve_unique((tag.get("href") for tag in soup.select("a[href]")), base)
