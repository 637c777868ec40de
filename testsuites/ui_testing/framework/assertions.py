"""
================================================================================
Auto-Retrying Assertions
================================================================================

``expect``-style assertions on top of the retry engine.

Every assertion:
    - runs inside an ``allure.step`` named after the locator and expectation
    - re-resolves the locator on each poll until the predicate holds
    - on timeout attaches JSON diagnostics (locator, expected, observed,
      elapsed, attempts, page URL) and re-raises ``TimeoutFailure``

Usage:
    await session.expect(by_role("tab", name="All")).to_have_attribute("aria-selected", "true")
    await session.expect(by_test_id("email-item-1")).not_.to_be_visible()
    await session.expect(rows).to_have_count(4, timeout_ms=2000)
    await session.expect_page().to_have_url(re.compile(r"/inbox$"))

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Callable, Optional

import allure

from dashboard_tools.report_tools.allure_utils import attach_failure, attach_text

from .dom import normalize_whitespace
from .errors import AmbiguousMatch, TimeoutFailure
from .locator import TextPattern, describe_pattern
from .predicates import (
    Outcome,
    Predicate,
    contains_text,
    count_equals,
    has_attribute,
    has_text,
    has_value,
    is_checked,
    is_disabled,
    is_enabled,
    is_hidden,
    is_visible,
)
from .retry_engine import RetryEngine, RetryPolicy, resolve_policy

if TYPE_CHECKING:
    from .driver import Driver
    from .locator import Locator


class Expectation:
    """Assertions about one locator, re-evaluated until they hold."""

    def __init__(
        self,
        engine: RetryEngine,
        locator: "Locator",
        policy: Optional[RetryPolicy] = None,
        negated: bool = False,
        page_url: Optional[Callable[[], str]] = None,
    ):
        self.engine = engine
        self.locator = locator
        self.policy = policy
        self.negated = negated
        self.page_url = page_url

    @property
    def not_(self) -> "Expectation":
        return Expectation(
            self.engine, self.locator, self.policy, not self.negated, self.page_url
        )

    async def _assert(self, predicate: Predicate, timeout_ms: Optional[int] = None) -> Outcome:
        if self.negated:
            predicate = predicate.negate()
        policy = resolve_policy(self.policy, timeout_ms)

        with allure.step(f"Expect {self.locator.describe()} {predicate.description}"):
            try:
                return await self.engine.wait_for(self.locator, predicate, policy)
            except TimeoutFailure as failure:
                attach_failure(failure.to_dict(), self.page_url() if self.page_url else None)
                raise
            except AmbiguousMatch as e:
                attach_text(str(e), name="❌ Ambiguous Locator")
                raise

    async def to_be_visible(self, timeout_ms: Optional[int] = None) -> Outcome:
        return await self._assert(is_visible(), timeout_ms)

    async def to_be_hidden(self, timeout_ms: Optional[int] = None) -> Outcome:
        return await self._assert(is_hidden(), timeout_ms)

    async def to_contain_text(self, pattern: TextPattern, timeout_ms: Optional[int] = None) -> Outcome:
        return await self._assert(contains_text(pattern), timeout_ms)

    async def to_have_text(self, pattern: TextPattern, timeout_ms: Optional[int] = None) -> Outcome:
        return await self._assert(has_text(pattern), timeout_ms)

    async def to_have_attribute(
        self,
        name: str,
        value: Optional[TextPattern] = None,
        timeout_ms: Optional[int] = None,
    ) -> Outcome:
        return await self._assert(has_attribute(name, value), timeout_ms)

    async def to_be_checked(self, checked: bool = True, timeout_ms: Optional[int] = None) -> Outcome:
        return await self._assert(is_checked(checked), timeout_ms)

    async def to_be_enabled(self, timeout_ms: Optional[int] = None) -> Outcome:
        return await self._assert(is_enabled(), timeout_ms)

    async def to_be_disabled(self, timeout_ms: Optional[int] = None) -> Outcome:
        return await self._assert(is_disabled(), timeout_ms)

    async def to_have_count(self, expected: int, timeout_ms: Optional[int] = None) -> Outcome:
        return await self._assert(count_equals(expected), timeout_ms)

    async def to_have_value(self, value: TextPattern, timeout_ms: Optional[int] = None) -> Outcome:
        return await self._assert(has_value(value), timeout_ms)


def _page_match(actual: str, pattern: TextPattern) -> bool:
    if isinstance(pattern, re.Pattern):
        return pattern.search(actual) is not None
    return actual == pattern


class PageExpectation:
    """Assertions about the page itself (URL, title)."""

    def __init__(
        self,
        engine: RetryEngine,
        driver: "Driver",
        policy: Optional[RetryPolicy] = None,
    ):
        self.engine = engine
        self.driver = driver
        self.policy = policy

    async def _assert(
        self,
        subject: str,
        expected: str,
        probe: Callable,
        timeout_ms: Optional[int],
    ) -> Outcome:
        policy = resolve_policy(self.policy, timeout_ms)
        with allure.step(f"Expect {subject} {expected}"):
            try:
                return await self.engine.wait_until(probe, subject, expected, policy)
            except TimeoutFailure as failure:
                attach_failure(failure.to_dict(), self.driver.url)
                raise

    async def to_have_url(self, pattern: TextPattern, timeout_ms: Optional[int] = None) -> Outcome:
        """Whole-URL equality for strings, ``search`` for regular expressions."""

        async def probe() -> Outcome:
            url = self.driver.url
            return Outcome(_page_match(url, pattern), f'url "{url}"')

        return await self._assert(
            "page", f"to have url {describe_pattern(pattern)}", probe, timeout_ms
        )

    async def to_have_title(self, pattern: TextPattern, timeout_ms: Optional[int] = None) -> Outcome:
        async def probe() -> Outcome:
            title = normalize_whitespace(await self.driver.title())
            return Outcome(_page_match(title, pattern), f'title "{title}"')

        return await self._assert(
            "page", f"to have title {describe_pattern(pattern)}", probe, timeout_ms
        )


__all__ = [
    "Expectation",
    "PageExpectation",
]
