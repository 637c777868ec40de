"""
================================================================================
Inbox Page Object
================================================================================

Email list with All/Unread tabs, email detail panel and reply form.

Email items are anchored on ``data-testid="email-item-N"`` (1-based). The
sender/time/subject/preview of a list item are read through ``EMAIL_ROW``;
the item markup has no per-field anchors, so the schema is the single place
that knows their positions.

================================================================================
"""

from __future__ import annotations

import re
from enum import Enum
from typing import List, Optional, Pattern, Sequence

import allure
from loguru import logger

from testsuites.ui_testing.framework.extraction import Anchor, RowReader, RowSchema
from testsuites.ui_testing.framework.locator import (
    Locator,
    by_role,
    by_test_id,
    by_text,
    locate,
)
from testsuites.ui_testing.framework.page_base import PageBase


EMAIL_ITEM_ID = re.compile(r"^email-item-\d+$")

# Notifications can take a while after sending
SEND_NOTIFICATION_TIMEOUT_MS = 10000


class EmailField(Enum):
    SENDER = "sender"
    TIME = "time"
    SUBJECT = "subject"
    PREVIEW = "preview"


# First div row holds sender then time; the paragraphs are subject then preview
EMAIL_ROW = RowSchema({
    EmailField.SENDER: Anchor(locate("div").first().locator("div").first()),
    EmailField.TIME: Anchor(locate("div").first().locator("div").last()),
    EmailField.SUBJECT: Anchor(locate("p").first()),
    EmailField.PREVIEW: Anchor(locate("p").last()),
})


class InboxPage(PageBase):
    """Inbox page object (async)."""

    URL_PATH = "/inbox"
    PAGE_TITLE = "Nuxt Dashboard Template"

    def __init__(self, session):
        super().__init__(session)

        self.page_heading = by_role("heading", name="Inbox", level=1)
        self.list_panel = by_test_id("inbox-list-panel")
        self.email_count = self.list_panel.locator("header").get_by_text(re.compile(r"^\d+$"))

        # Tabs
        self.all_tab = by_role("tab", name="All", exact=True)
        self.unread_tab = by_role("tab", name="Unread", exact=True)

        # Email list
        self.email_items = by_test_id(EMAIL_ITEM_ID)

        # Email details
        self.details_panel = by_test_id("email-details-panel")
        self.email_navbar = by_test_id("email-navbar")
        self.back_button = self.email_navbar.get_by_role("button").first()
        self.reply_section = by_test_id("reply-section")
        self.reply_header = by_test_id("reply-header")
        self.reply_textarea = by_test_id("reply-textarea")
        self.send_button = by_test_id("send-button")
        self.save_draft_button = by_test_id("save-draft-button")
        self.attach_file_button = by_test_id("attach-file-button")

        # Toast after a successful send
        self.sent_notification = by_text("Email sent", exact=True)
        self.sent_notification_description = by_text(
            "Your email has been sent successfully", exact=True
        )

    # =========================================================================
    # List
    # =========================================================================

    @allure.step("Verify inbox loaded")
    async def verify_page_loaded(self) -> None:
        await self.expect(self.page_heading).to_be_visible()
        await self.expect(self.email_count).to_be_visible()
        await self.verify_tabs_present()

    async def verify_tabs_present(self) -> None:
        await self.expect(self.all_tab).to_be_visible()
        await self.expect(self.unread_tab).to_be_visible()

    @allure.step("Click All tab")
    async def click_all_tab(self) -> None:
        await self.session.click(self.all_tab)

    @allure.step("Click Unread tab")
    async def click_unread_tab(self) -> None:
        await self.session.click(self.unread_tab)

    async def verify_all_tab_selected(self) -> None:
        await self.expect(self.all_tab).to_have_attribute("aria-selected", "true")

    async def verify_unread_tab_selected(self) -> None:
        await self.expect(self.unread_tab).to_have_attribute("aria-selected", "true")

    async def verify_email_count(self, expected: int, timeout_ms: Optional[int] = None) -> None:
        await self.expect(self.email_count, timeout_ms).to_have_text(str(expected))

    async def get_email_count(self) -> int:
        return int(await self.session.text_content(self.email_count))

    async def get_email_items_count(self) -> int:
        return await self.session.count(self.email_items)

    async def wait_for_emails_to_load(self) -> None:
        await self.expect(self.email_items.first()).to_be_visible()

    # =========================================================================
    # Lookup
    # =========================================================================

    def email_item(self, number: int) -> Locator:
        """Item by its 1-based test id number."""
        return by_test_id(f"email-item-{number}")

    def get_email_by_index(self, index: int) -> Locator:
        """Item by zero-based position in the current list."""
        return self.email_items.nth(index)

    def get_email_by_sender(self, sender: str) -> Locator:
        return self.email_items.filter(has_text=sender)

    def get_email_by_subject(self, subject: str) -> Locator:
        return self.email_items.filter(has_text=subject)

    async def find_emails_by_pattern(self, pattern: Pattern[str]) -> List[Locator]:
        """Current items whose text matches ``pattern``."""
        matching = []
        for email in await self.session.all(self.email_items):
            if pattern.search(await self.session.text_content(email)):
                matching.append(email)
        return matching

    def email(self, item: Locator) -> RowReader:
        return RowReader(self.session, item, EMAIL_ROW)

    async def get_email_fields(self, item: Locator) -> dict:
        fields = await self.email(item).fields()
        return {name.value: value for name, value in fields.items()}

    async def verify_email_structure(self, item: Locator) -> None:
        for name in EmailField:
            await self.expect(self.email(item).locator(name)).to_be_visible()

    async def scroll_to_email(self, index: int) -> None:
        await self.session.scroll_into_view(self.email_items.nth(index))

    # =========================================================================
    # Details and reply
    # =========================================================================

    @allure.step("Open email {number}")
    async def open_email(self, number: int) -> None:
        await self.session.click(self.email_item(number))
        await self.expect(self.details_panel).to_be_visible()

    async def click_email_by_sender(self, sender: str) -> None:
        await self.session.click(self.get_email_by_sender(sender))

    async def click_email_by_subject(self, subject: str) -> None:
        await self.session.click(self.get_email_by_subject(subject))

    async def verify_email_details(
        self,
        email_address: str,
        subject: str,
        snippets: Sequence[str] = (),
    ) -> None:
        with allure.step(f"Verify email details: {subject}"):
            await self.expect(by_text(email_address, exact=True)).to_be_visible()
            await self.expect(self.details_panel.get_by_role("heading", name=subject)).to_be_visible()
            for snippet in snippets:
                await self.expect(self.details_panel).to_contain_text(snippet)

    async def verify_sender_avatar(self, sender: str) -> None:
        await self.expect(self.details_panel.get_by_alt_text(sender)).to_be_visible()

    @allure.step("Back to inbox list")
    async def back_to_list(self) -> None:
        await self.session.click(self.back_button)
        await self.expect(self.details_panel).to_be_hidden()

    async def verify_reply_form(self) -> None:
        await self.expect(self.reply_section).to_be_visible()
        await self.expect(self.reply_textarea).to_be_visible()
        await self.expect(self.save_draft_button).to_be_visible()
        await self.expect(self.send_button).to_be_visible()
        await self.expect(self.attach_file_button).to_be_visible()

    async def fill_reply(self, text: str) -> None:
        await self.session.fill(self.reply_textarea, text)

    async def save_draft(self) -> None:
        await self.session.click(self.save_draft_button)

    @allure.step("Send reply")
    async def send_reply(self, text: str) -> None:
        await self.fill_reply(text)
        await self.expect(self.send_button).to_be_enabled()
        await self.session.click(self.send_button)
        logger.info("Reply sent, waiting for notification")

    async def verify_sent_notification(self, timeout_ms: int = SEND_NOTIFICATION_TIMEOUT_MS) -> None:
        await self.expect(self.sent_notification, timeout_ms).to_be_visible()
        await self.expect(self.sent_notification_description, timeout_ms).to_be_visible()


__all__ = [
    "EmailField",
    "EMAIL_ROW",
    "InboxPage",
]
