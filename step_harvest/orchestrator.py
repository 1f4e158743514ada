"""High-level orchestration of discovery and harvest runs over catalog roots."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

import requests
from playwright.async_api import Error as PlaywrightError, Page

from .archive import materialize
from .browser import open_page
from .config import HarvestConfig
from .discovery import discover
from .errors import ArchiveRetrievalFailure, HarvestError
from .extractor import read_product
from .link_store import load_links, save_links
from .models import HarvestStats

logger = logging.getLogger("step_harvest")


async def discover_root(page: Page, root_url: str, config: HarvestConfig) -> Set[str]:
    """Discover the root's product pages and overwrite its link file."""
    links = await discover(root_url, page, config)
    try:
        path = save_links(links, config.links_dir, root_url)
    except (OSError, ValueError) as exc:
        logger.error("Cannot save links for %s to %s: %s", root_url, config.links_dir, exc)
        return links
    logger.info("Links for %s have been saved to %s (%d links)", root_url, path, len(links))
    return links


async def harvest_root(
    page: Page,
    root_url: str,
    config: HarvestConfig,
    session: Optional[requests.Session] = None,
) -> HarvestStats:
    """Download the archive of every product stored in the root's link file."""
    stats = HarvestStats(root_url=root_url)
    try:
        links = load_links(config.links_dir, root_url)
    except (OSError, ValueError) as exc:
        logger.error("Cannot read links for %s: %s", root_url, exc)
        return stats

    for link in links:
        try:
            descriptor = await read_product(link, page, config)
        except (HarvestError, PlaywrightError) as exc:
            logger.error("Error in scraping %s (skipping): %s", link, exc)
            stats.failed += 1
            continue
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected error scraping %s", link)
            stats.failed += 1
            continue
        if descriptor is None:
            stats.skipped += 1
            continue

        try:
            materialize(
                descriptor.archive_url,
                descriptor.destination,
                descriptor.file_name,
                session=session,
                timeout=config.download_timeout,
            )
        except (ArchiveRetrievalFailure, OSError) as exc:
            logger.error("Error: %s (skipping): %s", link, exc)
            stats.failed += 1
            continue
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected error downloading %s", descriptor.archive_url)
            stats.failed += 1
            continue
        stats.downloaded += 1

    logger.info(
        "Finished %s: %d downloaded, %d skipped, %d failed",
        root_url,
        stats.downloaded,
        stats.skipped,
        stats.failed,
    )
    return stats


async def run_discovery(config: HarvestConfig) -> Dict[str, Set[str]]:
    """Rebuild the link file of every configured root."""
    results: Dict[str, Set[str]] = {}
    async with open_page(config) as page:
        for root_url in config.root_urls:
            results[root_url] = await discover_root(page, root_url, config)
    return results


async def run_harvest(config: HarvestConfig) -> List[HarvestStats]:
    """Fetch archives for every link stored for the configured roots."""
    results: List[HarvestStats] = []
    with requests.Session() as session:
        async with open_page(config) as page:
            for root_url in config.root_urls:
                results.append(await harvest_root(page, root_url, config, session))
    return results


async def run_all(config: HarvestConfig) -> List[HarvestStats]:
    """Discover then harvest each root, reusing one page for both stages."""
    results: List[HarvestStats] = []
    with requests.Session() as session:
        async with open_page(config) as page:
            for root_url in config.root_urls:
                await discover_root(page, root_url, config)
                results.append(await harvest_root(page, root_url, config, session))
    return results
