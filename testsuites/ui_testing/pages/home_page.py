"""
================================================================================
Home Page Object
================================================================================

Dashboard landing page: date range, period selector, stats cards, revenue
chart and the recent orders table.

================================================================================
"""

from __future__ import annotations

import re
from enum import Enum

import allure
from loguru import logger

from testsuites.ui_testing.framework.extraction import Column, RowReader, RowSchema
from testsuites.ui_testing.framework.locator import Locator, by_role, by_text, document, locate
from testsuites.ui_testing.framework.page_base import PageBase

STATS_CARDS = ("customers", "conversions", "revenue", "orders")
ORDER_HEADERS = ["ID", "Date", "Status", "Email", "Amount"]


class OrderField(Enum):
    ID = "id"
    DATE = "date"
    STATUS = "status"
    EMAIL = "email"
    AMOUNT = "amount"


ORDER_ROW = RowSchema({
    OrderField.ID: Column(0, "ID"),
    OrderField.DATE: Column(1, "Date"),
    OrderField.STATUS: Column(2, "Status"),
    OrderField.EMAIL: Column(3, "Email"),
    OrderField.AMOUNT: Column(4, "Amount"),
})


class HomePage(PageBase):
    """Home page object (async)."""

    URL_PATH = "/"
    PAGE_TITLE = "Nuxt Dashboard Template"

    def __init__(self, session):
        super().__init__(session)

        self.page_heading = by_role("heading", name="Home", level=1)
        self.date_range_picker = by_role(
            "button", name=re.compile(r"\w{3} \d+, \d{4} - \w{3} \d+, \d{4}")
        )
        self.period_selector = by_role("combobox").filter(
            has_text=re.compile(r"^(daily|weekly|monthly)$")
        )

        # Stats cards are links holding an element titled with the card name
        self.stats_grid = locate("div", data_testid="home-stats")
        self.stats_card_links = self.stats_grid.get_by_role("link")

        # Revenue chart: the figure's container holds title and total
        self.revenue_chart = locate("figure").locator("img")
        self.revenue_chart_section = locate("figure").parent()
        self.revenue_chart_title = self.revenue_chart_section.locator("p").filter(
            has_text="Revenue"
        ).first()
        self.revenue_chart_value = self.revenue_chart_section.get_by_text(
            re.compile(r"^\$[\d,]+(\.\d+)?$")
        )

        # Orders table
        self.orders_table = by_role("table")
        self.table_headers = self.orders_table.locator("thead th")
        self.table_rows = self.orders_table.locator("tbody tr")

    # =========================================================================
    # Stats cards
    # =========================================================================

    def stats_card(self, card: str) -> Locator:
        if card not in STATS_CARDS:
            raise ValueError(f"Unknown stats card '{card}', expected one of {STATS_CARDS}")
        return self.stats_card_links.filter(has=by_text(re.compile(rf"^{card}$", re.I)))

    def stats_value(self, card: str) -> Locator:
        return self.stats_card(card).get_by_text(re.compile(r"^\$?[\d,]+(\.\d+)?$"))

    def stats_change(self, card: str) -> Locator:
        return self.stats_card(card).get_by_text(re.compile(r"^[+-]\d+(\.\d+)?%$"))

    async def get_stats_value(self, card: str) -> str:
        return await self.session.text_content(self.stats_value(card))

    async def get_stats_change(self, card: str) -> str:
        return await self.session.text_content(self.stats_change(card))

    @allure.step("Open stats card {card}")
    async def click_stats_card_link(self, card: str) -> None:
        await self.session.click(self.stats_card(card))

    # =========================================================================
    # Verification
    # =========================================================================

    @allure.step("Verify home page loaded")
    async def verify_page_loaded(self) -> None:
        await self.expect(self.page_heading).to_be_visible()
        await self.expect(self.date_range_picker).to_be_visible()
        await self.expect(self.period_selector).to_be_visible()

    @allure.step("Verify stats cards")
    async def verify_stats_cards(self) -> None:
        await self.expect(self.stats_card_links).to_have_count(len(STATS_CARDS))
        for card in STATS_CARDS:
            await self.expect(self.stats_card(card)).to_be_visible()

    @allure.step("Verify revenue chart")
    async def verify_revenue_chart(self) -> None:
        await self.expect(self.revenue_chart_title).to_be_visible()
        await self.expect(self.revenue_chart_value).to_be_visible()
        await self.expect(self.revenue_chart).to_be_visible()

    @allure.step("Verify orders table")
    async def verify_orders_table(self) -> None:
        await self.expect(self.orders_table).to_be_visible()
        await self.expect(self.table_headers).to_have_count(len(ORDER_HEADERS))
        await ORDER_ROW.verify_headers(self.session, self.table_headers)

    # =========================================================================
    # Orders
    # =========================================================================

    async def get_orders_row_count(self) -> int:
        return await self.session.count(self.table_rows)

    def get_order_by_id(self, order_id: str) -> Locator:
        id_cell = ORDER_ROW.locator_for(document(), OrderField.ID).filter(
            has_text=order_id, exact=True
        )
        return self.table_rows.filter(has=id_cell)

    def order(self, row: Locator) -> RowReader:
        return RowReader(self.session, row, ORDER_ROW)

    # =========================================================================
    # Toolbar
    # =========================================================================

    async def click_date_range_picker(self) -> None:
        await self.session.click(self.date_range_picker)

    @allure.step("Select period: {period}")
    async def select_period(self, period: str) -> None:
        await self.session.click(self.period_selector)
        await self.session.click(by_role("option", name=period, exact=True))
        logger.info(f"Selected period: {period}")

    async def get_selected_period(self) -> str:
        return await self.session.text_content(self.period_selector)


__all__ = [
    "HomePage",
    "OrderField",
    "ORDER_ROW",
]
