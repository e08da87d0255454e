"""Rewrite remote references in saved HTML and CSS to relative local paths."""

from __future__ import annotations

import html as html_lib
import re
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urldefrag

from .extract import (
    ASSET_SELECTORS,
    CSS_IMPORT_RE,
    CSS_URL_RE,
    OG_IMAGE_SELECTOR,
    SRCSET_SELECTOR,
    SRCSET_SPLIT_RE,
    WS_RE,
    document_base,
    parse_html,
)
from .paths import relative_reference
from .urls import protocol_relative, resolve_reference

# Attributes that pin a tag to the exact remote bytes or origin.
PINNING_ATTRIBUTES = ("integrity", "crossorigin", "referrerpolicy")

# A match must not run on into a longer path, e.g. a.png inside a.png.webp.
_REFERENCE_END = r"(?![\w.~%/-])"


def _reference_pattern(url: str) -> Optional[re.Pattern[str]]:
    """Pattern for the absolute, protocol-relative and HTML-escaped forms of ``url``."""
    tail = protocol_relative(url)
    if tail is None:
        return None
    forms = {tail, html_lib.escape(tail, quote=False)}
    alternatives = "|".join(
        re.escape(form) for form in sorted(forms, key=len, reverse=True)
    )
    return re.compile(rf"(?:https?:)?(?:{alternatives}){_REFERENCE_END}")


def rewrite_references(
    text: str,
    url_to_local: Mapping[str, Path],
    referencing_file: Path,
) -> str:
    """Replace every literal occurrence of each mapped URL with a relative path.

    This is a plain textual substitution over the whole blob, so it also
    reaches URLs inside inline scripts and JSON. Longer URLs are handled first
    so that a URL which is a prefix of another never clobbers it.
    """
    for url in sorted(url_to_local, key=len, reverse=True):
        pattern = _reference_pattern(url)
        if pattern is None:
            continue
        relative = relative_reference(referencing_file, url_to_local[url])
        text = pattern.sub(lambda _match: relative, text)
    return text


def _local_reference(
    reference: Optional[str],
    base: str,
    url_to_local: Mapping[str, Path],
    referencing_file: Path,
) -> Optional[str]:
    absolute = resolve_reference(base, reference)
    if absolute is None or absolute not in url_to_local:
        return None
    relative = relative_reference(referencing_file, url_to_local[absolute])
    _, fragment = urldefrag(reference.strip())
    return f"{relative}#{fragment}" if fragment else relative


def rewrite_css(
    css_text: str,
    css_url: str,
    url_to_local: Mapping[str, Path],
    css_path: Path,
) -> str:
    """Rewrite ``url(...)`` and ``@import`` references inside a stylesheet.

    References resolve against ``css_url``; those without a local copy are
    left untouched.
    """

    def _replace_url(match: re.Match) -> str:
        local = _local_reference(match.group(2), css_url, url_to_local, css_path)
        if local is None:
            return match.group(0)
        return f'url("{local}")'

    def _replace_import(match: re.Match) -> str:
        local = _local_reference(match.group(2), css_url, url_to_local, css_path)
        if local is None:
            return match.group(0)
        return f'@import "{local}"'

    text = CSS_URL_RE.sub(_replace_url, css_text)
    return CSS_IMPORT_RE.sub(_replace_import, text)


def rewrite_html(
    html: str,
    page_url: str,
    url_to_local: Mapping[str, Path],
    html_path: Path,
) -> str:
    """Point the page's asset references at their local copies.

    Known asset attributes, ``srcset`` candidates and inline CSS are rewritten
    on the parsed document first, which also catches root-relative and
    relative references. The serialized result then goes through
    ``rewrite_references`` for absolute URLs embedded anywhere else.
    """
    soup = parse_html(html)
    base = document_base(soup, page_url)

    def _local(reference: Optional[str]) -> Optional[str]:
        return _local_reference(reference, base, url_to_local, html_path)

    selectors = ASSET_SELECTORS + ((OG_IMAGE_SELECTOR, "content"),)
    for selector, attribute in selectors:
        for tag in soup.select(selector):
            local = _local(tag.get(attribute))
            if local is None:
                continue
            tag[attribute] = local
            for name in PINNING_ATTRIBUTES:
                if name in tag.attrs:
                    del tag.attrs[name]

    for tag in soup.select(SRCSET_SELECTOR):
        candidates = []
        for candidate in SRCSET_SPLIT_RE.split(tag.get("srcset", "").strip()):
            parts = WS_RE.split(candidate.strip())
            if not parts or not parts[0]:
                continue
            url_part = _local(parts[0]) or parts[0]
            candidates.append(" ".join([url_part, *parts[1:]]))
        tag["srcset"] = ", ".join(candidates)

    for tag in soup.select("[style]"):
        style = tag.get("style") or ""
        rewritten = rewrite_css(style, base, url_to_local, html_path)
        if rewritten != style:
            tag["style"] = rewritten

    for style in soup.find_all("style"):
        if style.string:
            rewritten = rewrite_css(style.string, base, url_to_local, html_path)
            if rewritten != style.string:
                style.string.replace_with(rewritten)

    # Local relative paths must not resolve against the remote site.
    for tag in soup.find_all("base"):
        tag.decompose()

    return rewrite_references(str(soup), url_to_local, html_path)
