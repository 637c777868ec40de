"""
================================================================================
UI Testing Pytest Configuration
================================================================================

Fixtures for the page-object suite. Tests run against the in-process
dashboard (``dashboard_app``) through ``InMemoryDriver`` on a virtual clock,
so waits are deterministic and no browser is needed.

Key Features:
- One isolated dashboard + Session per test
- Page Object fixtures for all screens
- Failure diagnostics (URL, dispatched inputs) attached to Allure

================================================================================
"""

from typing import AsyncGenerator

import allure
import pytest

from dashboard_tools.report_tools.allure_utils import attach_json
from testsuites.ui_testing.framework.clock import VirtualClock
from testsuites.ui_testing.framework.session import Session
from testsuites.ui_testing.pages import CustomersPage, HomePage, InboxPage, SettingsPage
from testsuites.ui_testing.tests.dashboard_app import DashboardApp


# ================================================================================
# Application Fixtures
# ================================================================================

@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def dashboard(clock: VirtualClock) -> DashboardApp:
    """Fresh dashboard with its own state for each test."""
    return DashboardApp.create(clock=clock)


@pytest.fixture
async def session(dashboard: DashboardApp) -> AsyncGenerator[Session, None]:
    """
    Function-scoped session over the in-process dashboard.

    Each test gets its own driver, accessor and retry engine.
    """
    session = Session(dashboard.driver, base_url=dashboard.driver.base_url)
    yield session
    await session.close()


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def home_page(session: Session) -> HomePage:
    return HomePage(session)


@pytest.fixture
def inbox_page(session: Session) -> InboxPage:
    return InboxPage(session)


@pytest.fixture
def customers_page(session: Session) -> CustomersPage:
    return CustomersPage(session)


@pytest.fixture
def settings_page(session: Session) -> SettingsPage:
    return SettingsPage(session)


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Attach the dashboard's URL and input log to the report of a failed test."""
    outcome = yield
    report = outcome.get_result()

    if report.when == "call" and report.failed:
        app = getattr(item, "funcargs", {}).get("dashboard")
        if isinstance(app, DashboardApp):
            attach_json(
                {
                    "url": app.driver.url,
                    "virtual_time_ms": app.driver.clock.now_ms(),
                    "dispatched": [
                        {"action": action.value, "target": ref, "payload": payload}
                        for action, ref, payload in app.driver.dispatched
                    ],
                },
                name="failure_context",
            )
            allure.attach(
                str(app.state),
                name="dashboard_state",
                attachment_type=allure.attachment_type.TEXT,
            )
