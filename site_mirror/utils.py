"""Filesystem helpers shared by the page and asset writers."""

from __future__ import annotations

from pathlib import Path


def ensure_parent_dir(path: Path) -> None:
    """Create the directory that will hold ``path`` if it is missing."""
    path.parent.mkdir(parents=True, exist_ok=True)


def write_bytes(path: Path, data: bytes) -> None:
    ensure_parent_dir(path)
    path.write_bytes(data)


def write_text(path: Path, text: str) -> None:
    ensure_parent_dir(path)
    path.write_text(text, encoding="utf-8")


def exists(path: Path) -> bool:
    """Return True when a regular file is already present at ``path``."""
    return path.is_file()
