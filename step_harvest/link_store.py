"""Persistence of discovered product links, one JSON file per catalog root."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List

from .utils import root_key


def links_file(links_dir: Path, root_url: str) -> Path:
    return links_dir / f"{root_key(root_url)}Links.json"


def save_links(links: Iterable[str], links_dir: Path, root_url: str) -> Path:
    """Overwrite the root's link file with the given URLs."""
    links_dir.mkdir(parents=True, exist_ok=True)
    path = links_file(links_dir, root_url)
    path.write_text(json.dumps(sorted(links), indent=2), encoding="utf-8")
    return path


def load_links(links_dir: Path, root_url: str) -> List[str]:
    """Read the root's link file; raises FileNotFoundError or ValueError."""
    path = links_file(links_dir, root_url)
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        raise ValueError(f"{path} does not contain a JSON array of URLs")
    return data
