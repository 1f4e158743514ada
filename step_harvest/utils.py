"""Utility helpers for path sanitization and URL handling."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional
from urllib.parse import urlparse

ILLEGAL_PATH_CHARS = re.compile(r'[/\\?%*:|"<>\x00-\x1f]')
WHITESPACE = re.compile(r"\s")


def sanitize_segment(label: str) -> str:
    """Turn a breadcrumb label into a directory name."""
    segment = WHITESPACE.sub("_", label.strip())
    return ILLEGAL_PATH_CHARS.sub("_", segment)


def sanitize_file_name(title: str) -> str:
    """Make a product title safe for use as a file name, keeping spaces."""
    return ILLEGAL_PATH_CHARS.sub("-", title.strip())


def path_segments(labels: Iterable[Optional[str]]) -> List[str]:
    """Sanitize breadcrumb labels, dropping any that cannot name a directory."""
    segments = []
    for label in labels:
        segment = sanitize_segment(label or "")
        if segment in ("", ".", ".."):
            continue
        segments.append(segment)
    return segments


def root_key(root_url: str) -> str:
    """Return the last non-empty path segment of a catalog root URL."""
    parts = [part for part in root_url.split("/") if part]
    if not parts:
        raise ValueError(f"Cannot derive a key from URL: {root_url!r}")
    return parts[-1]


def site_origin(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def same_origin(href: Optional[str], root_url: str) -> bool:
    """True when href is an absolute http(s) URL on the root's host."""
    if not href:
        return False
    parsed = urlparse(href)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False
    root = urlparse(root_url)
    return parsed.scheme == root.scheme and parsed.netloc == root.netloc
