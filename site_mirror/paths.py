"""Deterministic mapping from remote URLs to files under the output root."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path, PurePosixPath
from typing import List, Optional
from urllib.parse import quote, unquote, urlparse

from .urls import WEB_SCHEMES

HTML_LIKE_EXTS = {".html", ".htm", ".xhtml", ".php", ".asp", ".aspx", ".jsp"}
QUERY_SUFFIX_CHARS = 12


def query_suffix(query: str) -> str:
    """Short stable digest used to keep query-parameterized resources apart."""
    return hashlib.sha1(f"?{query}".encode("utf-8")).hexdigest()[:QUERY_SUFFIX_CHARS]


def _path_segments(path: str) -> List[str]:
    # Dot segments would let a URL escape the output root.
    return [seg for seg in path.split("/") if seg not in ("", ".", "..")]


def to_local_path(url: str, output_root: Path) -> Optional[Path]:
    """Map an asset URL to its file under ``output_root``.

    The decoded URL path is kept as-is; a trailing ``/`` becomes an ``index``
    file. When the last segment has no extension and the URL carries a query
    string, a digest of the query is appended so ``/img?id=1`` and
    ``/img?id=2`` end up in different files. Returns None for URLs that cannot
    be parsed or are not http(s).
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if parsed.scheme.lower() not in WEB_SCHEMES or not parsed.netloc:
        return None

    path = unquote(parsed.path or "/")
    if path.endswith("/"):
        path += "index"
    segments = _path_segments(path) or ["index"]

    name = segments[-1]
    if not PurePosixPath(name).suffix and parsed.query:
        segments[-1] = f"{name}_{query_suffix(parsed.query)}"
    return Path(output_root).joinpath(*segments)


def page_output_path(url: str, output_root: Path) -> Optional[Path]:
    """Return where the rendered HTML of a page is written."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if parsed.scheme.lower() not in WEB_SCHEMES or not parsed.netloc:
        return None

    root = Path(output_root)
    path = unquote(parsed.path or "/")
    segments = _path_segments(path)
    if path.endswith("/") or not segments:
        return root.joinpath(*segments, "index.html")

    suffix = PurePosixPath(segments[-1]).suffix.lower()
    if suffix in HTML_LIKE_EXTS:
        return root.joinpath(*segments)
    if not suffix:
        return root.joinpath(*segments, "index.html")
    return root.joinpath(*segments[:-1], f"{segments[-1]}.html")


def relative_reference(from_file: Path, target: Path) -> str:
    """Percent-encoded relative link from ``from_file``'s directory to ``target``."""
    rel = Path(os.path.relpath(target, Path(from_file).parent)).as_posix()
    return quote(rel, safe="/")
