"""Configuration objects and constants for the harvester."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

DEFAULT_ROOT_URLS = (
    "https://www.gobilda.com/structure/",
    "https://www.gobilda.com/motion/",
    "https://www.gobilda.com/electronics/",
    "https://www.gobilda.com/hardware/",
    "https://www.gobilda.com/kits/",
)

# Resource types aborted at request level; the pages are only read, never shown.
DEFAULT_BLOCKED_RESOURCES = ("stylesheet", "font", "image")


@dataclass
class HarvestConfig:
    """Top-level settings that control discovery and archive retrieval."""

    save_dir: Path
    links_dir: Path
    root_urls: List[str] = field(default_factory=lambda: list(DEFAULT_ROOT_URLS))
    navigation_timeout: float = 5.0
    download_timeout: float = 30.0
    headless: bool = True
    browser_executable: Optional[Path] = None
    viewport_width: int = 1280
    viewport_height: int = 800
    blocked_resource_types: Tuple[str, ...] = DEFAULT_BLOCKED_RESOURCES
    product_link_selector: str = "li.product a"
    breadcrumb_selector: str = ".breadcrumbs a"
    title_selector: str = ".productView-title"
    archive_link_selector: str = ".product-downloadsList-listItem-link.ext-zip"
    archive_extension: str = ".zip"
    asset_extension: str = ".step"
    max_depth: Optional[int] = None

    @property
    def navigation_timeout_ms(self) -> float:
        return self.navigation_timeout * 1000
