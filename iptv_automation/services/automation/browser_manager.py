"""
Shared Playwright browser and disposable per-operation contexts
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable, Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright, ViewportSize

from ...exceptions import BrowserInitializationError


class BrowserManager:
    """Owns the process-wide browser; every operation gets its own context"""

    LAUNCH_ARGS = [
        '--no-sandbox',
        '--disable-setuid-sandbox',
    ]

    def __init__(self, headless: bool = True, playwright_factory: Callable = async_playwright):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.headless = headless
        self._playwright_factory = playwright_factory

        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self._launch_lock = asyncio.Lock()

    async def get_browser(self) -> Browser:
        """Return the shared browser, relaunching it if it disconnected"""
        async with self._launch_lock:
            if self.browser and self.browser.is_connected():
                return self.browser

            try:
                if not self.playwright:
                    self.playwright = await self._playwright_factory().start()

                self.browser = await self.playwright.chromium.launch(
                    headless=self.headless,
                    args=self.LAUNCH_ARGS,
                )
            except Exception as e:
                error = BrowserInitializationError(f"Failed to launch browser: {str(e)}")
                self.logger.error(str(error))
                raise error from e

            self.logger.info("Browser launched")
            return self.browser

    @asynccontextmanager
    async def isolated_context(self) -> AsyncIterator[BrowserContext]:
        """Fresh cookies and storage for one operation, closed on every exit path"""
        browser = await self.get_browser()
        context = await browser.new_context(
            ignore_https_errors=True,
            viewport=ViewportSize({'width': 1280, 'height': 720}),
        )
        try:
            yield context
        finally:
            try:
                await context.close()
            except Exception as e:
                self.logger.warning(f"Error closing browser context: {e}")

    async def close(self):
        """Close the shared browser and stop Playwright"""
        try:
            if self.browser:
                await self.browser.close()
                self.browser = None

            if self.playwright:
                await self.playwright.stop()
                self.playwright = None

            self.logger.info("Browser resources cleaned up")
        except Exception as e:
            self.logger.warning(f"Error during browser cleanup: {e}")


class ScreenshotRecorder:
    """Writes timestamped debug screenshots for post-mortem inspection"""

    def __init__(self, directory: Path, enabled: bool = True):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.directory = Path(directory)
        self.enabled = enabled

    async def capture(self, page: Page, label: str) -> Optional[Path]:
        if not self.enabled:
            return None

        path = self.directory / f"{label}-{int(time.time() * 1000)}.png"
        try:
            await page.screenshot(path=str(path))
        except Exception as e:
            self.logger.warning(f"Could not capture {label} screenshot: {e}")
            return None

        self.logger.debug(f"Screenshot saved to {path}")
        return path
