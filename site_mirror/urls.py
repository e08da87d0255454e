"""URL normalization and scope checks for pages and assets."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urldefrag, urljoin, urlparse, urlunparse

WEB_SCHEMES = ("http", "https")
NON_FETCHABLE_PREFIXES = (
    "#",
    "mailto:",
    "tel:",
    "javascript:",
    "data:",
    "blob:",
    "about:",
)


def is_fetchable_reference(value: Optional[str]) -> bool:
    """Return True if a raw href/src value points at something downloadable."""
    if not value:
        return False
    stripped = value.strip()
    if not stripped:
        return False
    return not stripped.lower().startswith(NON_FETCHABLE_PREFIXES)


def is_data_uri(url: str) -> bool:
    return url.strip().lower().startswith("data:")


def is_stylesheet_url(url: str) -> bool:
    """Stylesheets are recognised by a ``.css`` path, query strings allowed."""
    try:
        path = urlparse(url).path
    except ValueError:
        return False
    return path.lower().endswith(".css")


def resolve_reference(base: str, reference: Optional[str]) -> Optional[str]:
    """Resolve a raw reference against ``base`` into an absolute http(s) URL.

    Fragments are dropped because they never change which resource is fetched.
    """
    if not is_fetchable_reference(reference):
        return None
    try:
        absolute, _ = urldefrag(urljoin(base, reference.strip()))
        parsed = urlparse(absolute)
    except ValueError:
        return None
    if parsed.scheme.lower() not in WEB_SCHEMES or not parsed.netloc:
        return None
    return absolute


def normalize_page_url(raw: Optional[str], base: Optional[str] = None) -> Optional[str]:
    """Normalize a page URL: absolute, no fragment, single trailing slash."""
    if not raw or not raw.strip():
        return None
    try:
        absolute = urljoin(base, raw.strip()) if base else raw.strip()
        parsed = urlparse(absolute)
        parsed.port  # raises ValueError for malformed ports
    except ValueError:
        return None
    scheme = parsed.scheme.lower()
    if scheme not in WEB_SCHEMES or not parsed.netloc:
        return None
    path = parsed.path or "/"
    if path != "/" and path.endswith("/"):
        path = path.rstrip("/") + "/"
    return urlunparse((scheme, parsed.netloc.lower(), path, parsed.params, parsed.query, ""))


def protocol_relative(url: str) -> Optional[str]:
    """Return the ``//host/path?query`` form of an absolute URL."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not parsed.netloc:
        return None
    tail = f"//{parsed.netloc}{parsed.path}"
    if parsed.query:
        tail += f"?{parsed.query}"
    return tail


def in_scope(url: str, hostname: str, path_prefix: str) -> bool:
    """Check that a page URL is on the crawl host and under the path prefix."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if (parsed.hostname or "") != hostname.lower():
        return False
    return (parsed.path or "/").startswith(path_prefix)
