"""
================================================================================
Session Context
================================================================================

One browser session as seen by page objects and tests.

A Session is created per test and passed explicitly to every page object.
It owns the snapshot accessor and retry engine for its driver, so parallel
sessions never share state.

Reads:
    - count / all / all_text_contents / is_visible: instant, no waiting
    - text_content / input_value / get_attribute / is_enabled / is_checked:
      wait for the locator to resolve, then read the single node

Actions (click, fill, ...):
    - wait until exactly one visible and enabled node resolves, then dispatch
      the input once; effects are observed only through later assertions

Usage:
    session = Session(driver, base_url="https://dashboard-template.nuxt.dev")
    await session.navigate("/inbox")
    await session.click(by_test_id("email-item-1"))
    await session.expect(by_test_id("email-details-panel")).to_be_visible()

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import List, Optional

from loguru import logger

from dashboard_tools.common.global_config import get_config

from .assertions import Expectation, PageExpectation
from .clock import Clock
from .dom import Node
from .driver import Driver, InputAction
from .errors import AmbiguousMatch, ResolutionEmpty, TargetDetached
from .locator import Locator
from .predicates import is_actionable, is_attached
from .retry_engine import RetryEngine, RetryPolicy, resolve_policy
from .snapshot import ResolvedSet, SnapshotAccessor

# Times an action resolves its target again after the node was re-rendered
REDISPATCH_LIMIT = 3


class Session:
    """
    Explicit per-test context threaded through every page object.

    Args:
        driver: Browser driver (Playwright or in-memory)
        base_url: Prefix for relative navigation; defaults to ``ui.base_url``
        policy: Retry policy for this session; defaults to the process-wide one
    """

    def __init__(
        self,
        driver: Driver,
        base_url: Optional[str] = None,
        policy: Optional[RetryPolicy] = None,
    ):
        self.driver = driver
        self.base_url = (base_url or get_config("ui.base_url", "")).rstrip("/")
        self.policy = policy
        self.accessor = SnapshotAccessor(driver)
        self.engine = RetryEngine(self.accessor, driver.clock)

    @property
    def clock(self) -> Clock:
        return self.driver.clock

    @property
    def url(self) -> str:
        return self.driver.url

    def policy_for(self, timeout_ms: Optional[int] = None) -> RetryPolicy:
        return resolve_policy(self.policy, timeout_ms)

    def absolute_url(self, path_or_url: str) -> str:
        if "://" in path_or_url:
            return path_or_url
        return f"{self.base_url}/{path_or_url.lstrip('/')}"

    # =========================================================================
    # Navigation
    # =========================================================================

    async def navigate(self, path_or_url: str = "/") -> None:
        url = self.absolute_url(path_or_url)
        logger.info(f"Navigating to: {url}")
        await self.driver.navigate(url)

    async def wait_for_load_state(self, state: str = "networkidle", timeout_ms: int = 15000) -> None:
        await self.driver.wait_for_load_state(state, timeout_ms)

    async def title(self) -> str:
        return await self.driver.title()

    async def close(self) -> None:
        await self.driver.close()

    # =========================================================================
    # Instant Reads
    # =========================================================================

    async def resolve(self, locator: Locator) -> ResolvedSet:
        return await self.accessor.resolve(locator)

    async def count(self, locator: Locator) -> int:
        return len(await self.accessor.resolve(locator))

    async def all(self, locator: Locator) -> List[Locator]:
        """One ``nth`` locator per currently matching node."""
        total = await self.count(locator)
        return [locator.nth(i) for i in range(total)]

    async def all_text_contents(self, locator: Locator) -> List[str]:
        resolved = await self.accessor.resolve(locator)
        return [node.normalized_text() for node in resolved]

    async def is_visible(self, locator: Locator) -> bool:
        """Current visibility; False when nothing matches."""
        resolved = await self.accessor.resolve(locator)
        if len(resolved) > 1:
            raise AmbiguousMatch(locator.describe(), len(resolved), operation="is_visible")
        return not resolved.is_empty and resolved[0].is_visible()

    # =========================================================================
    # Single-Element Reads
    # =========================================================================

    async def element(
        self,
        locator: Locator,
        operation: str = "read",
        timeout_ms: Optional[int] = None,
    ) -> Node:
        """Wait for ``locator`` to resolve to one node and return it."""
        return await self.engine.wait_for_element(
            locator, is_attached(), self.policy_for(timeout_ms), operation=operation
        )

    async def text_content(self, locator: Locator, timeout_ms: Optional[int] = None) -> str:
        """Whitespace-normalised text of the single matching node."""
        node = await self.element(locator, "text_content", timeout_ms)
        return node.normalized_text()

    async def input_value(self, locator: Locator, timeout_ms: Optional[int] = None) -> str:
        node = await self.element(locator, "input_value", timeout_ms)
        return node.input_value()

    async def get_attribute(
        self,
        locator: Locator,
        name: str,
        timeout_ms: Optional[int] = None,
    ) -> Optional[str]:
        node = await self.element(locator, f"get_attribute({name})", timeout_ms)
        return node.attributes.get(name)

    async def is_enabled(self, locator: Locator, timeout_ms: Optional[int] = None) -> bool:
        node = await self.element(locator, "is_enabled", timeout_ms)
        return node.is_enabled()

    async def is_checked(self, locator: Locator, timeout_ms: Optional[int] = None) -> bool:
        node = await self.element(locator, "is_checked", timeout_ms)
        return node.is_checked()

    # =========================================================================
    # Actions
    # =========================================================================

    async def _act(
        self,
        action: InputAction,
        locator: Locator,
        payload: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> None:
        """
        Wait for one actionable node, then dispatch once.

        If the node left the page between the snapshot and the input, the
        locator is resolved again within what remains of the timeout.
        """
        policy = self.policy_for(timeout_ms)
        deadline = self.engine.clock.now_ms() + policy.timeout_ms
        for attempt in range(1, REDISPATCH_LIMIT + 1):
            target = await self.engine.wait_for_element(
                locator, is_actionable(), policy, operation=action.value
            )
            logger.debug(f"{action.value} {locator.describe()}")
            try:
                await self.driver.dispatch_input(action, target, payload)
                return
            except TargetDetached as e:
                remaining = deadline - self.engine.clock.now_ms()
                if remaining <= 0 or attempt == REDISPATCH_LIMIT:
                    raise ResolutionEmpty(locator.describe(), operation=action.value) from e
                logger.debug(f"{action.value} target re-rendered, resolving again: {locator.describe()}")
                policy = policy.with_timeout(int(remaining))

    async def click(self, locator: Locator, timeout_ms: Optional[int] = None) -> None:
        await self._act(InputAction.CLICK, locator, timeout_ms=timeout_ms)

    async def fill(self, locator: Locator, value: str, timeout_ms: Optional[int] = None) -> None:
        await self._act(InputAction.FILL, locator, value, timeout_ms)

    async def clear(self, locator: Locator, timeout_ms: Optional[int] = None) -> None:
        await self._act(InputAction.CLEAR, locator, timeout_ms=timeout_ms)

    async def check(self, locator: Locator, timeout_ms: Optional[int] = None) -> None:
        await self._act(InputAction.CHECK, locator, timeout_ms=timeout_ms)

    async def uncheck(self, locator: Locator, timeout_ms: Optional[int] = None) -> None:
        await self._act(InputAction.UNCHECK, locator, timeout_ms=timeout_ms)

    async def press(self, locator: Locator, key: str, timeout_ms: Optional[int] = None) -> None:
        await self._act(InputAction.PRESS, locator, key, timeout_ms)

    async def hover(self, locator: Locator, timeout_ms: Optional[int] = None) -> None:
        await self._act(InputAction.HOVER, locator, timeout_ms=timeout_ms)

    async def scroll_into_view(self, locator: Locator, timeout_ms: Optional[int] = None) -> None:
        await self._act(InputAction.SCROLL_INTO_VIEW, locator, timeout_ms=timeout_ms)

    # =========================================================================
    # Assertions
    # =========================================================================

    def expect(self, locator: Locator, timeout_ms: Optional[int] = None) -> Expectation:
        return Expectation(
            self.engine,
            locator,
            self.policy_for(timeout_ms),
            page_url=lambda: self.driver.url,
        )

    def expect_page(self, timeout_ms: Optional[int] = None) -> PageExpectation:
        return PageExpectation(self.engine, self.driver, self.policy_for(timeout_ms))


__all__ = [
    "Session",
]
