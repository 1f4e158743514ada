"""Read a product page into the descriptor used to fetch its archive."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urljoin

from playwright.async_api import Page

from .config import HarvestConfig
from .errors import ElementNotFound, HarvestError
from .models import ProductDescriptor
from .page_query import navigate, read_all_text, read_href, read_text
from .utils import path_segments, sanitize_file_name, site_origin

logger = logging.getLogger("step_harvest")


async def read_product(
    url: str,
    page: Page,
    config: HarvestConfig,
) -> Optional[ProductDescriptor]:
    """Read the product page at url.

    Returns None when the product has no archive to download. Raises
    HarvestError (or a browser error) when the page cannot be read.
    """
    await navigate(page, url, wait_until="load", timeout=config.navigation_timeout_ms)

    labels = await read_all_text(page, config.breadcrumb_selector)
    segments = path_segments(labels)
    if not segments:
        raise ElementNotFound(config.breadcrumb_selector)

    title = await read_text(page, config.title_selector)
    file_name = sanitize_file_name(title) + config.asset_extension

    href = await read_href(page, config.archive_link_selector, config.archive_extension)
    if href is None:
        logger.info("Skipping: no %s archive for %s", config.archive_extension, url)
        return None

    archive_url = urljoin(site_origin(url) + "/", href)
    logger.debug("Product %s -> %s (%s)", url, "/".join(segments), file_name)
    return ProductDescriptor(
        save_root=config.save_dir,
        path_segments=tuple(segments),
        file_name=file_name,
        archive_url=archive_url,
    )


async def extract_product(
    url: str,
    page: Page,
    config: HarvestConfig,
) -> Optional[ProductDescriptor]:
    """Return the product's descriptor, or None when it has no archive or cannot be read."""
    try:
        return await read_product(url, page, config)
    except HarvestError as exc:
        logger.error("Error in scraping %s: %s", url, exc)
    except Exception:  # pylint: disable=broad-except
        logger.exception("Unexpected error scraping %s", url)
    return None
