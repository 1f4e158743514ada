"""Playwright setup for the single page shared by a whole run."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Collection

from playwright.async_api import Page, Route, async_playwright

from .config import HarvestConfig

logger = logging.getLogger("step_harvest")


def resource_blocker(blocked: Collection[str]):
    """Build a route handler that aborts requests of the given resource types."""

    async def handle(route: Route) -> None:
        if route.request.resource_type in blocked:
            await route.abort()
        else:
            await route.continue_()

    return handle


@asynccontextmanager
async def open_page(config: HarvestConfig) -> AsyncIterator[Page]:
    """Launch Chromium and yield one configured page, closing the browser on exit."""
    async with async_playwright() as playwright:
        launch_args = {"headless": config.headless}
        if config.browser_executable:
            launch_args["executable_path"] = str(config.browser_executable)
        browser = await playwright.chromium.launch(**launch_args)
        try:
            page = await browser.new_page(
                viewport={
                    "width": config.viewport_width,
                    "height": config.viewport_height,
                }
            )
            page.set_default_timeout(config.navigation_timeout_ms)
            if config.blocked_resource_types:
                await page.route("**/*", resource_blocker(set(config.blocked_resource_types)))
            logger.debug("Browser ready (headless=%s)", config.headless)
            yield page
        finally:
            await browser.close()
