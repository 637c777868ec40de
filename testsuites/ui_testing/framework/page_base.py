"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Navigation to the page's URL_PATH through the session
    - URL, title and load-state verification
    - Auto-retrying ``expect`` for page-level locators
    - The shared Navigator (sidebar, header, cookie consent), by delegation

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from typing import Any, Optional

import allure

from .assertions import Expectation
from .locator import Locator, TextPattern
from .navigation import Navigator
from .session import Session


class BasePage:
    """
    Base class for all page objects.

    The page borrows the session it is given; it never owns browser lifetime.
    Navigation capability lives on ``self.nav``; its attributes are also
    reachable on the page (``page.navigate_to_inbox()``, ``page.inbox_link``).

    Usage:
        class InboxPage(BasePage):
            URL_PATH = "/inbox"

            async def verify_page_loaded(self):
                await self.expect(self.page_heading).to_be_visible()
    """

    # Override in subclasses
    URL_PATH: str = "/"
    PAGE_TITLE: str = ""

    def __init__(self, session: Session):
        """
        Initialize page object.

        Args:
            session: Session of the test using this page
        """
        self.session = session
        self.nav = Navigator(session)

    def __getattr__(self, name: str) -> Any:
        nav = self.__dict__.get("nav")
        if nav is None or name.startswith("_"):
            raise AttributeError(name)
        return getattr(nav, name)

    @property
    def url(self) -> str:
        """Full URL of this page."""
        return self.session.absolute_url(self.URL_PATH)

    async def goto(self, wait_for_load: bool = True) -> None:
        with allure.step(f"Navigate to {self.URL_PATH}"):
            await self.session.navigate(self.URL_PATH)
            if wait_for_load:
                await self.wait_for_page_load()

    async def wait_for_page_load(
        self,
        state: str = "networkidle",
        timeout_ms: int = 15000,
    ) -> None:
        """
        Wait for the page to reach a stable load state.

        Args:
            state: Load state ('load', 'domcontentloaded', 'networkidle')
            timeout_ms: Timeout in milliseconds
        """
        await self.session.wait_for_load_state(state, timeout_ms)

    async def verify_url(self, expected: Optional[TextPattern] = None) -> None:
        """Assert the current URL (defaults to this page's URL)."""
        if expected is None:
            expected = re.compile(re.escape(self.url.rstrip("/")) + r"/?$")
        await self.session.expect_page().to_have_url(expected)

    async def verify_page_title(self, expected: Optional[TextPattern] = None) -> None:
        await self.session.expect_page().to_have_title(expected or self.PAGE_TITLE)

    def expect(self, locator: Locator, timeout_ms: Optional[int] = None) -> Expectation:
        return self.session.expect(locator, timeout_ms)

    async def verify_page_loaded(self) -> None:
        """Assert the page's anchor elements are visible. Override per page."""
        await self.verify_url()


__all__ = [
    "BasePage",
    "PageBase",
]

# Alias kept for page objects that prefer PageBase naming
PageBase = BasePage
