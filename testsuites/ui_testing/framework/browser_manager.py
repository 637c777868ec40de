"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for live UI runs.

Features:
    - Single browser instance per manager
    - Isolated context per session (separate cookies and storage)
    - Browser and viewport settings read from configuration
    - new_session(): a ready-to-use Session over a fresh context

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
)

from dashboard_tools.common.global_config import get_config

from .playwright_driver import PlaywrightDriver
from .retry_engine import RetryPolicy
from .session import Session


class BrowserManager:
    """
    Manages browser instances and contexts for UI testing.

    Usage:
        async with BrowserManager() as manager:
            session = await manager.new_session()
            await session.navigate("/inbox")
    """

    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "headless": True,
        "args": [
            "--ignore-certificate-errors",
        ],
    }

    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1920, "height": 1080},
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        headless: Optional[bool] = None,
        browser_type: Optional[str] = None,
    ):
        """
        Initialize browser manager.

        Args:
            headless: Run browser in headless mode (defaults to ``ui.headless``)
            browser_type: 'chromium', 'firefox' or 'webkit' (defaults to ``ui.browser``)
        """
        self.headless = get_config("ui.headless", True) if headless is None else headless
        self.browser_type = browser_type or get_config("ui.browser", "chromium")

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        self._playwright = await async_playwright().start()

        if self.browser_type == "firefox":
            browser_launcher = self._playwright.firefox
        elif self.browser_type == "webkit":
            browser_launcher = self._playwright.webkit
        else:
            browser_launcher = self._playwright.chromium

        launch_options = {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.headless,
        }

        self._browser = await browser_launcher.launch(**launch_options)
        logger.debug(
            f"Browser started: {self.browser_type} "
            f"(headless={self.headless})"
        )

    async def close(self) -> None:
        """Close all contexts and browser."""
        for context in self._contexts:
            try:
                await context.close()
            except PlaywrightError as e:
                logger.debug(f"Context already closed: {e}")
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    async def new_context(self, **options: Any) -> BrowserContext:
        """
        Create new browser context.

        Each context is isolated - separate cookies, localStorage, etc.
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context_options = {
            **self.DEFAULT_CONTEXT_OPTIONS,
            "viewport": get_config("ui.viewport", self.DEFAULT_CONTEXT_OPTIONS["viewport"]),
            **options,
        }
        context = await self._browser.new_context(**context_options)
        context.set_default_navigation_timeout(get_config("ui.navigation_timeout_ms", 30000))
        self._contexts.append(context)

        return context

    async def new_page(
        self,
        context: Optional[BrowserContext] = None,
        **context_options: Any,
    ) -> Page:
        if context is None:
            context = await self.new_context(**context_options)

        return await context.new_page()

    async def new_session(
        self,
        base_url: Optional[str] = None,
        policy: Optional[RetryPolicy] = None,
        **context_options: Any,
    ) -> Session:
        """
        Build a Session over a fresh, isolated context.

        Args:
            base_url: Application base URL (defaults to ``ui.base_url``)
            policy: Retry policy for the session
            **context_options: Extra Playwright context options
        """
        page = await self.new_page(**context_options)
        session = Session(PlaywrightDriver(page), base_url=base_url, policy=policy)
        logger.debug(f"New session for {session.base_url}")
        return session

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser


__all__ = [
    "BrowserManager",
]
