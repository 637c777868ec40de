"""
================================================================================
Live Dashboard Tests
================================================================================

Read-only checks against the deployed dashboard (``ui.base_url``) in a real
browser. Run with UI_LIVE=1, e.g.:

    UI_LIVE=1 python run_tests.py --suite e2e --no-headless

================================================================================
"""

import re

import allure
import pytest

from testsuites.ui_testing.pages.home_page import STATS_CARDS


@allure.epic("Dashboard")
@allure.feature("Live Smoke")
@pytest.mark.e2e
class TestLiveDashboard:
    """Smoke pass over every screen of the deployed dashboard."""

    @allure.story("Home")
    @allure.title("Home page shows stats cards and orders")
    @allure.severity(allure.severity_level.BLOCKER)
    @pytest.mark.P0
    @pytest.mark.smoke
    @pytest.mark.asyncio
    async def test_home_page(self, live_home):
        await live_home.goto()
        await live_home.accept_cookies()

        await live_home.verify_page_loaded()
        await live_home.verify_page_title()
        await live_home.verify_stats_cards()
        await live_home.verify_orders_table()
        assert re.match(r"^\$?[\d,]+", await live_home.get_stats_value(STATS_CARDS[0]))

    @allure.story("Navigation")
    @allure.title("Sidebar reaches every main screen")
    @allure.severity(allure.severity_level.CRITICAL)
    @pytest.mark.P0
    @pytest.mark.smoke
    @pytest.mark.asyncio
    async def test_sidebar_navigation(self, live_home, live_inbox, live_customers, live_settings):
        await live_home.goto()
        await live_home.verify_navigation_present()

        await live_home.navigate_to_inbox()
        await live_inbox.verify_url()
        await live_inbox.verify_page_loaded()

        await live_home.navigate_to_customers()
        await live_customers.verify_url()
        await live_customers.verify_page_loaded()

        await live_home.navigate_to_settings()
        await live_settings.verify_url()
        await live_settings.verify_page_loaded()

    @allure.story("Inbox")
    @allure.title("Inbox tabs switch selection")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P1
    @pytest.mark.regression
    @pytest.mark.asyncio
    async def test_inbox_tabs(self, live_inbox):
        await live_inbox.goto()
        await live_inbox.wait_for_emails_to_load()

        await live_inbox.verify_all_tab_selected()
        await live_inbox.click_unread_tab()
        await live_inbox.verify_unread_tab_selected()

    @allure.story("Customers")
    @allure.title("Customers table headers are in the declared order")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P1
    @pytest.mark.regression
    @pytest.mark.asyncio
    async def test_customers_table(self, live_customers):
        await live_customers.goto()
        await live_customers.wait_for_table_to_load()

        await live_customers.verify_table_structure()
        await live_customers.verify_pagination_controls()

    @allure.story("Settings")
    @allure.title("Profile form renders its fields")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P1
    @pytest.mark.regression
    @pytest.mark.asyncio
    async def test_settings_form(self, live_settings):
        await live_settings.goto()
        await live_settings.wait_for_form_to_load()

        await live_settings.verify_form_fields()
        await live_settings.verify_required_fields()
