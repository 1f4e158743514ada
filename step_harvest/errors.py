"""Exception types raised while crawling product pages and fetching archives."""

from __future__ import annotations


class HarvestError(Exception):
    """Base class for recoverable per-page and per-product failures."""


class ElementNotFound(HarvestError):
    """An expected element is missing from the rendered page."""

    def __init__(self, selector: str) -> None:
        super().__init__(f"No element found for selector: {selector}")
        self.selector = selector


class NavigationFailure(HarvestError):
    """Loading a page timed out or failed at the network level."""

    def __init__(self, url: str, reason: object) -> None:
        super().__init__(f"Failed to load {url}: {reason}")
        self.url = url


class ArchiveRetrievalFailure(HarvestError):
    """Downloading or decompressing an archive failed."""

    def __init__(self, url: str, reason: object) -> None:
        super().__init__(f"Failed to retrieve archive {url}: {reason}")
        self.url = url
