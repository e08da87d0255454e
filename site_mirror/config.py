"""Configuration objects and constants for the mirror crawler."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)
DEFAULT_MAX_PAGES = 500
DEFAULT_NAVIGATION_TIMEOUT = 45.0
DEFAULT_REQUEST_TIMEOUT = 30.0


class MirrorError(RuntimeError):
    """Base class for errors raised by the mirror crawler."""


class ConfigurationError(MirrorError):
    """Raised when the crawl cannot start because of bad settings."""


@dataclass
class MirrorConfig:
    """Top-level settings that control crawling and asset mirroring."""

    start_url: str
    output_root: Path
    path_prefix: str = "/"
    max_pages: int = DEFAULT_MAX_PAGES
    wait_after_load: float = 1.0
    navigation_timeout: float = DEFAULT_NAVIGATION_TIMEOUT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def start_hostname(self) -> str:
        return urlparse(self.start_url).hostname or ""

    def validate(self) -> None:
        """Raise ConfigurationError if the settings cannot drive a crawl."""
        parsed = urlparse(self.start_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ConfigurationError(
                f"Start URL must be an absolute http(s) URL: {self.start_url!r}"
            )
        if not self.path_prefix.startswith("/"):
            raise ConfigurationError(
                f"Path prefix must start with '/': {self.path_prefix!r}"
            )
        if self.max_pages < 1:
            raise ConfigurationError("max_pages must be at least 1")
        for name in ("wait_after_load", "navigation_timeout", "request_timeout"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} cannot be negative")
