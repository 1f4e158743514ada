"""Data models used throughout the harvest pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Tuple


@dataclass(frozen=True)
class ProductDescriptor:
    """Everything needed to fetch one product's archive and place it on disk."""

    save_root: Path
    path_segments: Tuple[str, ...]
    file_name: str
    archive_url: str

    @property
    def destination(self) -> Path:
        return self.save_root.joinpath(*self.path_segments)


@dataclass(frozen=True)
class ArchiveEntry:
    """A single file stored inside a downloaded archive."""

    relative_subpath: PurePosixPath
    payload: bytes


@dataclass
class HarvestStats:
    """Per-root outcome counts of a harvest run."""

    root_url: str
    downloaded: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.downloaded + self.skipped + self.failed
