"""HTTP fetch capability used for asset downloads."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .config import DEFAULT_REQUEST_TIMEOUT, DEFAULT_USER_AGENT
from .models import FetchResponse

logger = logging.getLogger("site_mirror")


class HttpFetcher:
    """Thin wrapper around a ``requests.Session`` that follows redirects.

    Any HTTP status is returned as a ``FetchResponse``; network failures raise
    ``requests.RequestException`` for the caller to handle.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent, "Accept": "*/*"})

    def fetch(self, url: str) -> FetchResponse:
        resp = self.session.get(url, timeout=self.timeout, allow_redirects=True)
        logger.debug("GET %s -> %s", url, resp.status_code)
        return FetchResponse(
            url=url,
            status=resp.status_code,
            content=resp.content,
            content_type=resp.headers.get("Content-Type", ""),
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
