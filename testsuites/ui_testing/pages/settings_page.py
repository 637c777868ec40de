"""
================================================================================
Settings Page Object
================================================================================

General settings: secondary settings navigation and the profile form.

================================================================================
"""

from __future__ import annotations

from typing import Dict, Optional

import allure

from testsuites.ui_testing.framework.locator import Locator, by_role, locate
from testsuites.ui_testing.framework.page_base import PageBase

DEFAULT_PROFILE = {
    "name": "Benjamin Canac",
    "email": "ben@nuxtlabs.com",
    "username": "benjamincanac",
    "bio": "",
}

FIELD_DESCRIPTIONS = {
    "name": "Will appear on receipts, invoices, and other communication.",
    "email": "Used to sign in, for email receipts and product updates.",
    "username": "Your unique username for logging in and your profile URL.",
    "avatar": "JPG, GIF or PNG. 1MB Max.",
    "bio": "Brief description for your profile. URLs are hyperlinked.",
}

REQUIRED_FIELDS = ("name", "email", "username")

SETTINGS_SECTIONS = {
    "general": "/settings",
    "members": "/settings/members",
    "notifications": "/settings/notifications",
    "security": "/settings/security",
}


class SettingsPage(PageBase):
    """Settings page object (async)."""

    URL_PATH = "/settings"
    PAGE_TITLE = "Nuxt Dashboard Template"

    def __init__(self, session):
        super().__init__(session)

        self.page_heading = by_role("heading", name="Settings", level=1)

        # Secondary navigation: the second nav on the page, after the sidebar's
        self.settings_navigation = locate("nav").nth(1)
        self.general_nav_link = self.settings_navigation.get_by_role("link", name="General", exact=True)
        self.members_nav_link = self.settings_navigation.get_by_role("link", name="Members", exact=True)
        self.notifications_nav_link = self.settings_navigation.get_by_role(
            "link", name="Notifications", exact=True
        )
        self.security_nav_link = self.settings_navigation.get_by_role("link", name="Security", exact=True)
        self.documentation_link = self.settings_navigation.get_by_role(
            "link", name="Documentation", exact=True
        )

        # Profile form
        self.profile_section = locate("div", data_testid="profile-section")
        self.profile_title = self.profile_section.get_by_text("Profile", exact=True)
        self.profile_description = self.profile_section.get_by_text(
            "These informations will be displayed publicly."
        )
        self.save_changes_button = by_role("button", name="Save changes", exact=True)

        self.fields: Dict[str, Locator] = {
            "name": by_role("textbox", name="Name*", exact=True),
            "email": by_role("textbox", name="Email*", exact=True),
            "username": by_role("textbox", name="Username*", exact=True),
            "bio": by_role("textbox", name="Bio", exact=True),
        }
        self.labels: Dict[str, Locator] = {
            "name": locate("label").filter(has_text="Name*", exact=True),
            "email": locate("label").filter(has_text="Email*", exact=True),
            "username": locate("label").filter(has_text="Username*", exact=True),
            "avatar": locate("label").filter(has_text="Avatar", exact=True),
            "bio": locate("label").filter(has_text="Bio", exact=True),
        }
        self.descriptions: Dict[str, Locator] = {
            field: locate("p").filter(has_text=text)
            for field, text in FIELD_DESCRIPTIONS.items()
        }

        self.avatar_display = locate("span", data_testid="avatar")
        self.choose_avatar_button = by_role("button", name="Choose", exact=True)

        self.saved_notification = locate("main").get_by_text("Profile updated", exact=True)

    # Convenience accessors mirroring field names
    @property
    def name_field(self) -> Locator:
        return self.fields["name"]

    @property
    def email_field(self) -> Locator:
        return self.fields["email"]

    @property
    def username_field(self) -> Locator:
        return self.fields["username"]

    @property
    def bio_field(self) -> Locator:
        return self.fields["bio"]

    # =========================================================================
    # Verification
    # =========================================================================

    @allure.step("Verify settings page loaded")
    async def verify_page_loaded(self) -> None:
        await self.expect(self.page_heading).to_be_visible()
        await self.expect(self.settings_navigation).to_be_visible()

    @allure.step("Verify settings navigation")
    async def verify_settings_navigation(self) -> None:
        for link in (
            self.general_nav_link,
            self.members_nav_link,
            self.notifications_nav_link,
            self.security_nav_link,
            self.documentation_link,
        ):
            await self.expect(link).to_be_visible()

    async def verify_profile_form(self) -> None:
        await self.expect(self.profile_title).to_be_visible()
        await self.expect(self.profile_description).to_be_visible()
        await self.expect(self.save_changes_button).to_be_visible()

    @allure.step("Verify form fields")
    async def verify_form_fields(self) -> None:
        for field in self.fields.values():
            await self.expect(field).to_be_visible()
        for label in self.labels.values():
            await self.expect(label).to_be_visible()
        for description in self.descriptions.values():
            await self.expect(description).to_be_visible()
        await self.expect(self.avatar_display).to_be_visible()
        await self.expect(self.choose_avatar_button).to_be_visible()

    async def verify_required_fields(self) -> None:
        for field in REQUIRED_FIELDS:
            await self.expect(self.labels[field]).to_contain_text("*")
        await self.expect(self.labels["bio"]).not_.to_contain_text("*")

    async def verify_form_descriptions(self) -> None:
        for field, text in FIELD_DESCRIPTIONS.items():
            await self.expect(self.descriptions[field]).to_contain_text(text)

    async def verify_field_value(self, field: str, expected: str) -> None:
        await self.expect(self.fields[field]).to_have_value(expected)

    @allure.step("Verify default profile values")
    async def verify_default_values(self) -> None:
        for field, value in DEFAULT_PROFILE.items():
            await self.verify_field_value(field, value)

    async def wait_for_form_to_load(self) -> None:
        for field in REQUIRED_FIELDS:
            await self.expect(self.fields[field]).to_be_visible()

    # =========================================================================
    # Form actions
    # =========================================================================

    async def fill_field(self, field: str, value: str) -> None:
        await self.session.clear(self.fields[field])
        await self.session.fill(self.fields[field], value)

    async def fill_name(self, name: str) -> None:
        await self.fill_field("name", name)

    async def fill_email(self, email: str) -> None:
        await self.fill_field("email", email)

    async def fill_username(self, username: str) -> None:
        await self.fill_field("username", username)

    async def fill_bio(self, bio: str) -> None:
        await self.fill_field("bio", bio)

    async def get_field_value(self, field: str) -> str:
        return await self.session.input_value(self.fields[field])

    @allure.step("Fill profile")
    async def fill_complete_profile(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        username: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> None:
        values = {"name": name, "email": email, "username": username, "bio": bio}
        for field, value in values.items():
            if value:
                await self.fill_field(field, value)

    async def click_choose_avatar(self) -> None:
        await self.session.click(self.choose_avatar_button)

    @allure.step("Save profile changes")
    async def save_changes(self) -> None:
        await self.session.click(self.save_changes_button)

    # =========================================================================
    # Secondary navigation
    # =========================================================================

    async def open_section(self, section: str) -> None:
        links = {
            "general": self.general_nav_link,
            "members": self.members_nav_link,
            "notifications": self.notifications_nav_link,
            "security": self.security_nav_link,
        }
        with allure.step(f"Open settings section: {section}"):
            await self.session.click(links[section])

    async def navigate_to_documentation(self) -> None:
        await self.session.click(self.documentation_link)


__all__ = [
    "DEFAULT_PROFILE",
    "FIELD_DESCRIPTIONS",
    "SETTINGS_SECTIONS",
    "SettingsPage",
]
