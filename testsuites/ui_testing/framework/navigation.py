"""
================================================================================
Navigation Capability
================================================================================

Sidebar, header and cookie-consent interactions shared by every dashboard
screen. Page objects hold a Navigator and delegate to it instead of
inheriting these locators.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import allure
from loguru import logger

from .locator import Locator, by_role, locate

if TYPE_CHECKING:
    from .session import Session


class Navigator:
    """Locators and transitions of the dashboard's global navigation."""

    def __init__(self, session: "Session"):
        self.session = session

        # Header
        self.sidebar_collapse = by_role("button", name="Collapse sidebar")
        self.search_button = by_role("button", name=re.compile(r"Search.*⌘.*K"))
        self.user_menu_button = by_role("button", name=re.compile(r"^Benjamin Canac"))

        # Main navigation, scoped to the sidebar
        self.sidebar = locate("aside")
        self.home_link = self.sidebar.get_by_role("link", name="Home", exact=True)
        self.inbox_link = self.sidebar.get_by_role("link", name=re.compile(r"^Inbox\b"))
        self.inbox_badge = self.inbox_link.get_by_text(re.compile(r"^\d+$"))
        self.customers_link = self.sidebar.get_by_role("link", name="Customers", exact=True)
        self.settings_button = self.sidebar.get_by_role("button", name="Settings", exact=True)

        # Settings submenu
        self.settings_general_link = self.sidebar.get_by_role("link", name="General", exact=True)
        self.settings_members_link = self.sidebar.get_by_role("link", name="Members", exact=True)
        self.settings_notifications_link = self.sidebar.get_by_role(
            "link", name="Notifications", exact=True
        )
        self.settings_security_link = self.sidebar.get_by_role("link", name="Security", exact=True)

        # Bottom navigation
        self.feedback_link = self.sidebar.get_by_role("link", name="Feedback", exact=True)
        self.help_support_link = self.sidebar.get_by_role("link", name="Help & Support", exact=True)

        # Cookie banner
        self.cookie_accept_button = by_role("button", name="Accept", exact=True)
        self.cookie_opt_out_button = by_role("button", name="Opt out", exact=True)

    @property
    def main_links(self) -> dict:
        return {
            "home": self.home_link,
            "inbox": self.inbox_link,
            "customers": self.customers_link,
            "settings": self.settings_button,
        }

    # =========================================================================
    # Transitions
    # =========================================================================

    async def navigate_to_home(self) -> None:
        with allure.step("Navigate to Home"):
            await self.session.click(self.home_link)

    async def navigate_to_inbox(self) -> None:
        with allure.step("Navigate to Inbox"):
            await self.session.click(self.inbox_link)

    async def navigate_to_customers(self) -> None:
        with allure.step("Navigate to Customers"):
            await self.session.click(self.customers_link)

    async def _open_settings_link(self, link: Locator) -> None:
        if not await self.session.is_visible(link):
            await self.session.click(self.settings_button)
        await self.session.click(link)

    async def navigate_to_settings(self) -> None:
        with allure.step("Navigate to Settings"):
            await self._open_settings_link(self.settings_general_link)

    async def navigate_to_settings_members(self) -> None:
        with allure.step("Navigate to Settings > Members"):
            await self._open_settings_link(self.settings_members_link)

    async def navigate_to_settings_notifications(self) -> None:
        with allure.step("Navigate to Settings > Notifications"):
            await self._open_settings_link(self.settings_notifications_link)

    async def navigate_to_settings_security(self) -> None:
        with allure.step("Navigate to Settings > Security"):
            await self._open_settings_link(self.settings_security_link)

    async def collapse_sidebar(self) -> None:
        await self.session.click(self.sidebar_collapse)

    async def open_search(self) -> None:
        await self.session.click(self.search_button)

    async def open_user_menu(self) -> None:
        await self.session.click(self.user_menu_button)

    # =========================================================================
    # Cookie Consent
    # =========================================================================

    async def accept_cookies(self) -> bool:
        """Click Accept if the banner is showing. Returns whether it was."""
        if await self.session.is_visible(self.cookie_accept_button):
            with allure.step("Accept cookies"):
                await self.session.click(self.cookie_accept_button)
            return True
        logger.warning("Cookie banner not present, nothing to accept")
        return False

    async def opt_out_cookies(self) -> bool:
        if await self.session.is_visible(self.cookie_opt_out_button):
            with allure.step("Opt out of cookies"):
                await self.session.click(self.cookie_opt_out_button)
            return True
        logger.warning("Cookie banner not present, nothing to opt out of")
        return False

    # =========================================================================
    # Verification
    # =========================================================================

    async def verify_navigation_present(self) -> None:
        with allure.step("Verify sidebar navigation"):
            for link in self.main_links.values():
                await self.session.expect(link).to_be_visible()

    async def verify_active_link(self, name: str) -> None:
        """The sidebar link for ``name`` (home/inbox/customers) is the current page."""
        with allure.step(f"Verify {name} is the active link"):
            await self.session.expect(self.main_links[name]).to_have_attribute(
                "aria-current", "page"
            )

    async def get_unread_count(self) -> int:
        return int(await self.session.text_content(self.inbox_badge))


__all__ = [
    "Navigator",
]
