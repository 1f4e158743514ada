"""Depth-first discovery of product pages beneath a catalog root."""

from __future__ import annotations

import logging
from typing import List, Set, Tuple

from playwright.async_api import Error as PlaywrightError, Page

from .config import HarvestConfig
from .errors import HarvestError
from .page_query import navigate, read_all_hrefs
from .utils import same_origin

logger = logging.getLogger("step_harvest")


async def child_links(page: Page, root_url: str, config: HarvestConfig) -> List[str]:
    """Product-card hrefs on the loaded page that stay within the catalog's site."""
    hrefs = await read_all_hrefs(page, config.product_link_selector)
    return [href for href in hrefs if same_origin(href, root_url)]


async def discover(root_url: str, page: Page, config: HarvestConfig) -> Set[str]:
    """Collect every leaf product URL reachable from root_url.

    Listing pages (those with product-card links) are expanded one child at a
    time, each child's whole subtree finishing before its next sibling starts.
    Pages without product-card links are leaves and end up in the result. A
    failure on one page only ends that branch.
    """
    links: Set[str] = set()
    visited: Set[str] = set()
    stack: List[Tuple[str, int]] = [(root_url, 0)]

    while stack:
        url, depth = stack.pop()
        if url in visited:
            continue
        visited.add(url)

        try:
            await navigate(
                page,
                url,
                wait_until="domcontentloaded",
                timeout=config.navigation_timeout_ms,
            )
            children = await child_links(page, root_url, config)
        except (HarvestError, PlaywrightError) as exc:
            logger.error("Error in getting links %s: %s", url, exc)
            continue
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected error getting links from %s", url)
            continue

        if not children:
            logger.info("Found product page: %s", url)
            links.add(url)
            continue

        if config.max_depth is not None and depth >= config.max_depth:
            logger.warning(
                "Not expanding %s: depth limit %d reached (%d links dropped)",
                url,
                config.max_depth,
                len(children),
            )
            continue

        logger.debug("Listing page %s has %d child links", url, len(children))
        for child in reversed(children):
            stack.append((child, depth + 1))

    return links
