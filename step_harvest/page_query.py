"""Thin helpers for reading elements out of a rendered Playwright page."""

from __future__ import annotations

import logging
from typing import List, Optional

from playwright.async_api import (
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

from .errors import ElementNotFound, NavigationFailure

logger = logging.getLogger("step_harvest")

_TEXT_CONTENT_JS = "elements => elements.map(e => e.textContent)"
_HREF_JS = "elements => elements.map(e => e.getAttribute('href'))"


async def navigate(
    page: Page,
    url: str,
    wait_until: str = "load",
    timeout: Optional[float] = None,
) -> None:
    """Load url in the shared page, raising NavigationFailure on any browser error."""
    logger.debug("Loading %s", url)
    try:
        await page.goto(url, wait_until=wait_until, timeout=timeout)
    except PlaywrightError as exc:
        raise NavigationFailure(url, exc) from exc


async def read_text(page: Page, selector: str) -> str:
    """Return the stripped text content of the first element matching selector.

    Raises ElementNotFound when nothing matches within the page timeout or the
    element has no text.
    """
    try:
        element = await page.wait_for_selector(selector, state="attached")
    except PlaywrightTimeoutError as exc:
        raise ElementNotFound(selector) from exc
    if element is None:
        raise ElementNotFound(selector)
    content = await element.text_content()
    if not content or not content.strip():
        raise ElementNotFound(selector)
    return content.strip()


async def read_href(
    page: Page,
    selector: str,
    extension: str = ".zip",
) -> Optional[str]:
    """Return the href of the first match, or None if absent or not an archive link."""
    element = await page.query_selector(selector)
    if element is None:
        return None
    href = await element.get_attribute("href")
    if not href or not href.endswith(extension):
        logger.info("No %s link found for selector %s", extension, selector)
        return None
    return href


async def read_all_text(page: Page, selector: str) -> List[str]:
    texts = await page.eval_on_selector_all(selector, _TEXT_CONTENT_JS)
    return [text for text in texts if text is not None]


async def read_all_hrefs(page: Page, selector: str) -> List[Optional[str]]:
    return await page.eval_on_selector_all(selector, _HREF_JS)
