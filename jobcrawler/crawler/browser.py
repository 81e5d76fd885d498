"""
Browser lifecycle for a crawl run.

One Chromium process per run; each attempt gets its own context and page
so cookies, headers and init scripts never leak between concurrent
workers. Media, fonts and images are blocked; CSS/JS/XHR load normally.
"""

import random
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from playwright.async_api import Browser, Page, Playwright, Route, async_playwright

from jobcrawler.core.logging import get_logger

logger = get_logger(__name__)

BLOCK_RESOURCE_TYPES = {"media", "font", "image"}

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-web-resources",
    "--disable-client-side-phishing-detection",
    "--no-sandbox",
    "--disable-setuid-sandbox",
]


async def _block_heavy_resources(route: Route) -> None:
    if route.request.resource_type in BLOCK_RESOURCE_TYPES:
        await route.abort()
        return
    await route.continue_()


class BrowserPool:
    """
    Launches Chromium and hands out fresh pages.

    Example:
        >>> async with BrowserPool(headless=True, proxy=None) as pool:
        ...     async with pool.open_page() as page:
        ...         await page.goto(url)
    """

    def __init__(self, headless: bool = True, proxy: Optional[Dict[str, str]] = None):
        self.headless = headless
        self.proxy = proxy
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def start(self) -> None:
        if self._browser is not None:
            return
        self._playwright = await async_playwright().start()
        launch_kwargs: Dict[str, object] = {"headless": self.headless, "args": LAUNCH_ARGS}
        if self.proxy:
            launch_kwargs["proxy"] = self.proxy
            logger.info(f"Using proxy {self.proxy.get('server')}")
        self._browser = await self._playwright.chromium.launch(**launch_kwargs)
        logger.info(f"Browser launched (headless={self.headless})")

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def __aenter__(self) -> "BrowserPool":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[Page]:
        """Yield a page in a brand-new context; both are closed on exit."""
        if self._browser is None:
            raise RuntimeError("BrowserPool.open_page() called before start()")

        context = await self._browser.new_context(
            viewport={"width": random.randint(1280, 1440), "height": random.randint(720, 900)},
            locale="en-US",
            java_script_enabled=True,
        )
        await context.route("**/*", _block_heavy_resources)
        try:
            page = await context.new_page()
            yield page
        finally:
            try:
                await context.close()
            except Exception as e:
                logger.debug(f"Context close failed: {e}")
