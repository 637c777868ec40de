"""
================================================================================
Customers Page Object
================================================================================

Customers table with search, status filter, row selection, bulk delete and
pagination.

Customer data is read positionally from the table cells; ``CUSTOMER_ROW``
declares which header each position must carry and ``verify_table_structure``
checks it before any read relies on it.

================================================================================
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, List

import allure
from loguru import logger

from testsuites.ui_testing.framework.extraction import Column, RowReader, RowSchema
from testsuites.ui_testing.framework.locator import Locator, by_placeholder, by_role, document, locate
from testsuites.ui_testing.framework.page_base import PageBase

STATUSES = ("All", "subscribed", "unsubscribed", "bounced")
TABLE_COLUMN_COUNT = 7


class CustomerField(Enum):
    ID = "id"
    NAME = "name"
    EMAIL = "email"
    LOCATION = "location"
    STATUS = "status"


# Column 0 holds the selection checkbox, column 6 the row actions
CUSTOMER_ROW = RowSchema({
    CustomerField.ID: Column(1, "ID"),
    CustomerField.NAME: Column(2, "Name"),
    CustomerField.EMAIL: Column(3, "Email"),
    CustomerField.LOCATION: Column(4, "Location"),
    CustomerField.STATUS: Column(5, "Status"),
})


class CustomersPage(PageBase):
    """Customers page object (async)."""

    URL_PATH = "/customers"
    PAGE_TITLE = "Nuxt Dashboard Template"

    def __init__(self, session):
        super().__init__(session)

        self.page_heading = by_role("heading", name="Customers", level=1)
        self.new_customer_button = by_role("button", name="New customer")

        # Filters and actions
        self.search_input = by_placeholder("Filter emails...")
        self.delete_button = by_role("button", name=re.compile(r"^Delete \d+$"))
        self.status_filter = by_role("combobox").filter(
            has_text=re.compile(r"^(All|subscribed|unsubscribed|bounced)$")
        )
        self.display_button = by_role("button", name="Display", exact=True)

        # Table
        self.customers_table = by_role("table")
        self.table_headers = self.customers_table.locator("thead th")
        self.table_rows = self.customers_table.locator("tbody tr")
        self.select_all_checkbox = self.customers_table.locator("thead").locator(
            "input", type="checkbox"
        )
        self.row_checkboxes = self.customers_table.locator("tbody").locator(
            "input", type="checkbox"
        )
        self.selected_rows_text = locate("main").get_by_text(
            re.compile(r"^\d+ of \d+ row\(s\) selected")
        )

        # Pagination
        self.pagination = locate("main").get_by_role("navigation")
        self.first_page_button = by_role("button", name="First Page", exact=True)
        self.previous_page_button = by_role("button", name="Previous Page", exact=True)
        self.next_page_button = by_role("button", name="Next Page", exact=True)
        self.last_page_button = by_role("button", name="Last Page", exact=True)
        self.current_page_button = self.pagination.locator("button", aria_pressed="true")

    @allure.step("Verify customers page loaded")
    async def verify_page_loaded(self) -> None:
        await self.expect(self.page_heading).to_be_visible()
        await self.expect(self.new_customer_button).to_be_visible()
        await self.expect(self.customers_table).to_be_visible()

    async def click_new_customer(self) -> None:
        await self.session.click(self.new_customer_button)

    # =========================================================================
    # Search and filters
    # =========================================================================

    @allure.step("Search customers: {term}")
    async def search_customers(self, term: str) -> None:
        await self.session.fill(self.search_input, term)
        await self.session.press(self.search_input, "Enter")

    async def clear_search(self) -> None:
        await self.session.clear(self.search_input)

    @allure.step("Filter by status: {status}")
    async def select_status_filter(self, status: str) -> None:
        if status not in STATUSES:
            raise ValueError(f"Unknown status '{status}', expected one of {STATUSES}")
        await self.session.click(self.status_filter)
        await self.session.click(by_role("option", name=status, exact=True))

    async def filter_by_status(self, status: str) -> None:
        await self.select_status_filter(status)

    async def click_display_button(self) -> None:
        await self.session.click(self.display_button)

    async def click_delete_button(self) -> None:
        await self.session.click(self.delete_button)

    # =========================================================================
    # Table
    # =========================================================================

    @allure.step("Verify customers table structure")
    async def verify_table_structure(self) -> None:
        await self.expect(self.customers_table).to_be_visible()
        await self.expect(self.table_headers).to_have_count(TABLE_COLUMN_COUNT)
        await CUSTOMER_ROW.verify_headers(self.session, self.table_headers)

    async def wait_for_table_to_load(self) -> None:
        await self.expect(self.table_rows.first()).to_be_visible()

    async def get_table_row_count(self) -> int:
        return await self.session.count(self.table_rows)

    def get_customer_by_index(self, index: int) -> Locator:
        return self.table_rows.nth(index)

    def get_customer_by_id(self, customer_id: str) -> Locator:
        id_cell = CUSTOMER_ROW.locator_for(document(), CustomerField.ID).filter(
            has_text=str(customer_id), exact=True
        )
        return self.table_rows.filter(has=id_cell)

    def get_customer_by_name(self, name: str) -> Locator:
        return self.table_rows.filter(has_text=name)

    def get_customer_by_email(self, email: str) -> Locator:
        return self.table_rows.filter(has_text=email)

    def customer(self, row: Locator) -> RowReader:
        return RowReader(self.session, row, CUSTOMER_ROW)

    async def get_customer_data(self, row: Locator) -> Dict[str, str]:
        fields = await self.customer(row).fields()
        return {name.value: value for name, value in fields.items()}

    async def verify_customer_status(self, row: Locator, expected_status: str) -> None:
        await self.expect(self.customer(row).locator(CustomerField.STATUS)).to_contain_text(
            expected_status
        )

    async def click_customer_actions(self, row: Locator) -> None:
        await self.session.click(row.locator("td").last().locator("button"))

    async def get_customers_by_status(self, status: str) -> List[Locator]:
        """Rows on the current page whose status cell reads ``status``."""
        matching = []
        for row in await self.session.all(self.table_rows):
            if await self.customer(row).field(CustomerField.STATUS) == status:
                matching.append(row)
        return matching

    # =========================================================================
    # Selection
    # =========================================================================

    async def select_all_customers(self) -> None:
        await self.session.check(self.select_all_checkbox)

    async def deselect_all_customers(self) -> None:
        await self.session.uncheck(self.select_all_checkbox)

    async def select_customer_by_index(self, index: int) -> None:
        await self.session.check(self.row_checkboxes.nth(index))

    async def deselect_customer_by_index(self, index: int) -> None:
        await self.session.uncheck(self.row_checkboxes.nth(index))

    async def select_customer_by_id(self, customer_id: str) -> None:
        row = self.get_customer_by_id(customer_id)
        await self.session.check(row.locator("input", type="checkbox"))

    async def get_selected_rows_text(self) -> str:
        return await self.session.text_content(self.selected_rows_text)

    async def verify_selected_rows(self, selected: int, total: int) -> None:
        await self.expect(self.selected_rows_text).to_contain_text(
            f"{selected} of {total} row(s) selected"
        )

    async def verify_customer_selected(self, index: int) -> None:
        await self.expect(self.row_checkboxes.nth(index)).to_be_checked()

    async def verify_customer_not_selected(self, index: int) -> None:
        await self.expect(self.row_checkboxes.nth(index)).not_.to_be_checked()

    # =========================================================================
    # Pagination
    # =========================================================================

    async def verify_pagination_controls(self) -> None:
        await self.expect(self.pagination).to_be_visible()
        await self.expect(self.first_page_button).to_be_visible()
        await self.expect(self.previous_page_button).to_be_visible()
        await self.expect(self.next_page_button).to_be_visible()
        await self.expect(self.last_page_button).to_be_visible()

    async def _click_if_enabled(self, button: Locator) -> bool:
        if await self.session.is_enabled(button):
            await self.session.click(button)
            return True
        logger.debug(f"Pagination button disabled: {button}")
        return False

    async def go_to_first_page(self) -> bool:
        return await self._click_if_enabled(self.first_page_button)

    async def go_to_previous_page(self) -> bool:
        return await self._click_if_enabled(self.previous_page_button)

    async def go_to_next_page(self) -> bool:
        return await self._click_if_enabled(self.next_page_button)

    async def go_to_last_page(self) -> bool:
        return await self._click_if_enabled(self.last_page_button)

    async def go_to_page(self, number: int) -> None:
        await self.session.click(self.pagination.get_by_role("button", name=f"Page {number}", exact=True))

    async def get_current_page(self) -> int:
        """Number on the pressed page button; ResolutionEmpty if none is pressed."""
        return int(await self.session.text_content(self.current_page_button))

    async def verify_current_page(self, number: int) -> None:
        current = self.pagination.get_by_role("button", name=f"Page {number}", exact=True)
        await self.expect(current).to_have_attribute("aria-pressed", "true")


__all__ = [
    "CustomerField",
    "CUSTOMER_ROW",
    "CustomersPage",
]
