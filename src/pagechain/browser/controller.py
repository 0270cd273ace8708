"""
Browser Controller

Manages the Playwright browser a test's chains run in.
"""

import logging
import os
from dataclasses import dataclass
from typing import Literal, Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
)

logger = logging.getLogger(__name__)


BrowserType = Literal["chromium", "firefox", "webkit"]

_BROWSER_TYPE_MAP = {
    "chrome": "chromium",
    "chromium": "chromium",
    "firefox": "firefox",
    "webkit": "webkit",
    "safari": "webkit",
}


@dataclass
class BrowserConfig:
    """
    Configuration for the test browser.

    Reads from environment variables with sensible defaults.
    """

    # Browser type (chromium is Playwright's Chrome-based browser)
    browser_type: BrowserType = "chromium"

    # Headless by default; tests run unattended
    headless: bool = True

    # Viewport size
    viewport_width: int = 1280
    viewport_height: int = 720

    # Slow motion delay in ms (useful for debugging)
    slow_mo: int = 0

    # Default timeout for page operations in ms
    default_timeout: int = 30000

    @classmethod
    def from_env(cls) -> "BrowserConfig":
        """
        Create BrowserConfig from environment variables.

        Environment variables:
            PAGECHAIN_BROWSER: chromium, firefox, or webkit (default: chromium)
            PAGECHAIN_HEADLESS: true/false (default: true)
            PAGECHAIN_VIEWPORT_WIDTH: int (default: 1280)
            PAGECHAIN_VIEWPORT_HEIGHT: int (default: 720)
            PAGECHAIN_SLOW_MO: int in ms (default: 0)
            PAGECHAIN_DEFAULT_TIMEOUT: int in ms (default: 30000)
        """
        env_type = os.getenv("PAGECHAIN_BROWSER", "chromium").lower()
        headless_str = os.getenv("PAGECHAIN_HEADLESS", "true").lower()

        return cls(
            browser_type=_BROWSER_TYPE_MAP.get(env_type, "chromium"),
            headless=headless_str in ("true", "1", "yes"),
            viewport_width=int(os.getenv("PAGECHAIN_VIEWPORT_WIDTH", "1280")),
            viewport_height=int(os.getenv("PAGECHAIN_VIEWPORT_HEIGHT", "720")),
            slow_mo=int(os.getenv("PAGECHAIN_SLOW_MO", "0")),
            default_timeout=int(os.getenv("PAGECHAIN_DEFAULT_TIMEOUT", "30000")),
        )


class BrowserController:
    """
    Owns one Playwright browser, context and page.

    Usage:
        >>> async with BrowserController(BrowserConfig.from_env()) as browser:
        ...     await Chain(browser.current_page, "<p>hi</p>").wait(10)
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        """
        Initialize browser controller.

        Args:
            config: Browser configuration (uses env if None)
        """
        self.config = config or BrowserConfig.from_env()

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def is_initialized(self) -> bool:
        """Check if browser is initialized."""
        return self._browser is not None

    @property
    def current_page(self) -> Optional[Page]:
        return self._page

    async def initialize(self) -> None:
        """Start Playwright, launch the browser and open a page."""
        if self._playwright is not None:
            return

        self._playwright = await async_playwright().start()

        launcher = self._get_browser_launcher()
        self._browser = await launcher.launch(
            headless=self.config.headless,
            slow_mo=self.config.slow_mo,
        )
        self._context = await self._browser.new_context(
            viewport={
                "width": self.config.viewport_width,
                "height": self.config.viewport_height,
            },
        )
        self._context.set_default_timeout(self.config.default_timeout)
        self._page = await self._context.new_page()

        logger.debug(
            f"Launched {self.config.browser_type} "
            f"({'headless' if self.config.headless else 'headed'})"
        )

    def _get_browser_launcher(self):
        """Get the appropriate browser launcher based on config."""
        if self._playwright is None:
            raise RuntimeError("Playwright not initialized")

        launchers = {
            "chromium": self._playwright.chromium,
            "firefox": self._playwright.firefox,
            "webkit": self._playwright.webkit,
        }
        return launchers.get(self.config.browser_type, self._playwright.chromium)

    async def close(self) -> None:
        """Close the browser and cleanup resources."""
        for resource in (self._page, self._context, self._browser):
            if resource is None:
                continue
            try:
                await resource.close()
            except PlaywrightError as e:
                logger.debug(f"Ignoring error while closing {type(resource).__name__}: {e}")

        self._page = None
        self._context = None
        self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    async def __aenter__(self) -> "BrowserController":
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
