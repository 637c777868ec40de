"""
================================================================================
Live UI Pytest Configuration
================================================================================

Fixtures for tests that drive the deployed dashboard in a real browser.

Key Features:
- Opt-in: every test here is skipped unless UI_LIVE=1
- One browser per test through BrowserManager, isolated context per session
- Screenshot and URL attached to Allure when a test fails

================================================================================
"""

import os
from typing import AsyncGenerator

import allure
import pytest
from loguru import logger
from playwright.async_api import Error as PlaywrightError

from testsuites.ui_testing.framework.browser_manager import BrowserManager
from testsuites.ui_testing.framework.session import Session
from testsuites.ui_testing.pages import CustomersPage, HomePage, InboxPage, SettingsPage


@pytest.fixture(autouse=True)
def _require_live_browser():
    if os.getenv("UI_LIVE") != "1":
        pytest.skip("Live UI tests are disabled (set UI_LIVE=1 to run them)")


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture
async def browser_manager() -> AsyncGenerator[BrowserManager, None]:
    manager = BrowserManager()
    await manager.start()
    yield manager
    await manager.close()


@pytest.fixture
async def live_session(request, browser_manager: BrowserManager) -> AsyncGenerator[Session, None]:
    """
    Session over a fresh browser context.

    On failure the current page is captured before the context closes.
    """
    session = await browser_manager.new_session()
    yield session

    report = getattr(request.node, "rep_call", None)
    if report is not None and report.failed:
        page = session.driver.page
        try:
            allure.attach(
                await page.screenshot(full_page=True),
                name="failure_screenshot",
                attachment_type=allure.attachment_type.PNG,
            )
            allure.attach(page.url, name="failure_url", attachment_type=allure.attachment_type.TEXT)
        except PlaywrightError as e:
            logger.warning(f"Failed to capture screenshot on failure: {e}")


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def live_home(live_session: Session) -> HomePage:
    return HomePage(live_session)


@pytest.fixture
def live_inbox(live_session: Session) -> InboxPage:
    return InboxPage(live_session)


@pytest.fixture
def live_customers(live_session: Session) -> CustomersPage:
    return CustomersPage(live_session)


@pytest.fixture
def live_settings(live_session: Session) -> SettingsPage:
    return SettingsPage(live_session)


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Keep each phase's report on the item so fixtures can see the outcome."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)
