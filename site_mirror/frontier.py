"""FIFO crawl frontier with a visited set and a page cap."""

from __future__ import annotations

from collections import deque
from typing import Deque, Optional, Set

from .config import DEFAULT_MAX_PAGES
from .urls import in_scope, normalize_page_url


class Frontier:
    """Pending page URLs in discovery order plus everything already visited.

    A URL leaves the queue exactly once: ``pop`` marks it visited before the
    page is processed, so a failed visit is never queued again.
    """

    def __init__(
        self,
        start_hostname: str,
        path_prefix: str = "/",
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        self.start_hostname = start_hostname.lower()
        self.path_prefix = path_prefix
        self.max_pages = max_pages
        self.queue: Deque[str] = deque()
        self.pending: Set[str] = set()
        self.visited: Set[str] = set()

    def __len__(self) -> int:
        return len(self.queue)

    def _push(self, url: str) -> None:
        self.queue.append(url)
        self.pending.add(url)

    def _is_new(self, url: str) -> bool:
        return url not in self.visited and url not in self.pending

    def seed(self, url: str) -> bool:
        """Queue the start URL; only normalization applies, not the scope filter."""
        normalized = normalize_page_url(url)
        if normalized is None or not self._is_new(normalized):
            return False
        self._push(normalized)
        return True

    def admit(self, raw_url: str, base: Optional[str] = None) -> bool:
        """Queue a discovered link if it is in scope and not seen before."""
        normalized = normalize_page_url(raw_url, base)
        if normalized is None:
            return False
        if not in_scope(normalized, self.start_hostname, self.path_prefix):
            return False
        if not self._is_new(normalized):
            return False
        self._push(normalized)
        return True

    @property
    def exhausted(self) -> bool:
        return not self.queue or len(self.visited) >= self.max_pages

    def pop(self) -> Optional[str]:
        """Return the next page to visit, or None once the crawl is over."""
        while not self.exhausted:
            url = self.queue.popleft()
            self.pending.discard(url)
            if url in self.visited:
                continue
            self.mark_visited(url)
            return url
        return None

    def mark_visited(self, url: str) -> None:
        self.visited.add(url)
        self.pending.discard(url)
