"""
================================================================================
Playwright Driver
================================================================================

Adapter from a Playwright async ``Page`` to the framework's driver surface.

    - snapshot(): one ``page.evaluate`` walks the DOM and returns a payload
      (tags, attributes, text nodes, render flag, live value/checked state)
    - every element carries a key that stays fixed while it is attached;
      dispatch_input() acts on the element behind the key and raises
      TargetDetached once it has left the page (``xpath=<ref>`` for nodes
      without a key)
    - "page/context/browser closed" and "execution context destroyed"
      errors become DriverUnavailable

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Optional, Union

from loguru import logger
from playwright.async_api import ElementHandle
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .clock import MonotonicClock
from .dom import Node
from .driver import InputAction
from .errors import DriverUnavailable, ResolutionEmpty, TargetDetached
from .snapshot import node_from_payload


SNAPSHOT_JS = """
() => {
  // Keys persist per element for the life of the document; the token keeps
  // keys from a previous document from matching anything in this one.
  const registry = window.__uiSnapshotRegistry || (window.__uiSnapshotRegistry = {
    token: Math.random().toString(36).slice(2, 10), ids: new WeakMap(), next: 1, live: new Map(),
  });
  registry.live = new Map();
  const keyOf = (el) => {
    let id = registry.ids.get(el);
    if (id === undefined) {
      id = registry.next++;
      registry.ids.set(el, id);
    }
    const key = registry.token + ":" + id;
    registry.live.set(key, el);
    return key;
  };
  const walk = (el) => {
    const out = { tag: el.tagName.toLowerCase(), attrs: {}, shown: true,
                  value: null, checked: null, key: keyOf(el), children: [] };
    for (const attr of Array.from(el.attributes)) {
      out.attrs[attr.name] = attr.value;
    }
    const style = window.getComputedStyle(el);
    const rect = el.getBoundingClientRect();
    const hasBox = (rect.width > 0 && rect.height > 0) || el.children.length > 0;
    out.shown = style.display !== "none" && style.visibility !== "hidden" && hasBox;
    if (el instanceof HTMLInputElement) {
      if (el.type === "checkbox" || el.type === "radio") {
        out.checked = el.checked;
      } else {
        out.value = el.value;
      }
    } else if (el instanceof HTMLTextAreaElement || el instanceof HTMLSelectElement) {
      out.value = el.value;
    }
    for (const child of Array.from(el.childNodes)) {
      if (child.nodeType === Node.TEXT_NODE) {
        if (child.data) out.children.push({ text: child.data });
      } else if (child.nodeType === Node.ELEMENT_NODE) {
        out.children.push(walk(child));
      }
    }
    return out;
  };
  return { tag: "#document", children: [walk(document.documentElement)] };
}
"""

# The element a snapshot key names, or null once it has left the document
RESOLVE_KEY_JS = """
(key) => {
  const registry = window.__uiSnapshotRegistry;
  const el = registry ? registry.live.get(key) : undefined;
  return el && el.isConnected ? el : null;
}
"""

# Fragments of Playwright error messages meaning the session is gone
SESSION_GONE_MARKERS = (
    "has been closed",
    "Target closed",
    "Browser closed",
    "Connection closed",
    "Execution context was destroyed",
)

# Fragments meaning an element handle outlived its node
DETACHED_MARKERS = (
    "not attached to the DOM",
    "Element is detached",
)


def is_session_gone(error: BaseException) -> bool:
    message = str(error)
    return any(marker in message for marker in SESSION_GONE_MARKERS)


class PlaywrightDriver:
    """
    Driver over a live Playwright page.

    Args:
        page: Playwright async Page owned by the caller
        action_timeout_ms: Upper bound for a single dispatched action
        wait_until: Load state ``navigate`` waits for
    """

    def __init__(
        self,
        page: Page,
        action_timeout_ms: int = 5000,
        wait_until: str = "networkidle",
    ):
        self.page = page
        self.action_timeout_ms = action_timeout_ms
        self.wait_until = wait_until
        self.clock = MonotonicClock()

    @property
    def url(self) -> str:
        return self.page.url

    async def navigate(self, url: str) -> None:
        try:
            await self.page.goto(url, wait_until=self.wait_until)
        except PlaywrightError as e:
            if is_session_gone(e):
                raise DriverUnavailable(f"Browser session unavailable: {e}") from e
            raise
        logger.debug(f"Navigated to: {url}")

    async def title(self) -> str:
        try:
            return await self.page.title()
        except PlaywrightError as e:
            if is_session_gone(e):
                raise DriverUnavailable(f"Browser session unavailable: {e}") from e
            raise

    async def wait_for_load_state(self, state: str = "networkidle", timeout_ms: int = 15000) -> None:
        await self.page.wait_for_load_state(state, timeout=timeout_ms)

    async def snapshot(self) -> Node:
        if self.page.is_closed():
            raise DriverUnavailable("Browser page has been closed")
        try:
            payload = await self.page.evaluate(SNAPSHOT_JS)
        except PlaywrightError as e:
            if is_session_gone(e):
                raise DriverUnavailable(f"Browser session unavailable: {e}") from e
            raise
        return node_from_payload(payload)

    async def _element_for(self, action: InputAction, target: Node) -> Union[Locator, ElementHandle]:
        """
        The live element behind a snapshot node.

        Nodes carrying a snapshot key are bound to the element they were read
        from, so a re-render between snapshot and input cannot retarget the
        action to whatever now sits at the same position.
        """
        if target.key is None:
            return self.page.locator(f"xpath={target.ref}")
        handle = await self.page.evaluate_handle(RESOLVE_KEY_JS, target.key)
        element = handle.as_element()
        if element is None:
            await handle.dispose()
            raise TargetDetached(target.ref, operation=f"{action.value} (element re-rendered)")
        return element

    async def dispatch_input(
        self,
        action: InputAction,
        target: Node,
        payload: Optional[str] = None,
    ) -> None:
        timeout = self.action_timeout_ms
        element = None
        logger.debug(f"Dispatch {action.value} -> {target.ref}")
        try:
            element = await self._element_for(action, target)
            if action is InputAction.CLICK:
                await element.click(timeout=timeout)
            elif action is InputAction.FILL:
                await element.fill(payload or "", timeout=timeout)
            elif action is InputAction.CLEAR:
                await element.fill("", timeout=timeout)
            elif action is InputAction.CHECK:
                await element.check(timeout=timeout)
            elif action is InputAction.UNCHECK:
                await element.uncheck(timeout=timeout)
            elif action is InputAction.PRESS:
                await element.press(payload or "", timeout=timeout)
            elif action is InputAction.HOVER:
                await element.hover(timeout=timeout)
            elif action is InputAction.SCROLL_INTO_VIEW:
                await element.scroll_into_view_if_needed(timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise ResolutionEmpty(target.ref, operation=f"{action.value} (element detached)") from e
        except PlaywrightError as e:
            if is_session_gone(e):
                raise DriverUnavailable(f"Browser session unavailable: {e}") from e
            if any(marker in str(e) for marker in DETACHED_MARKERS):
                raise TargetDetached(target.ref, operation=f"{action.value} (element re-rendered)") from e
            raise
        finally:
            if element is not None and target.key is not None:
                await self._release(element)

    async def _release(self, element: ElementHandle) -> None:
        try:
            await element.dispose()
        except PlaywrightError as e:
            # The handle's page or frame is already gone after a navigation
            logger.debug(f"Element handle not disposed: {e}")

    async def close(self) -> None:
        await self.page.close()


__all__ = [
    "PlaywrightDriver",
    "RESOLVE_KEY_JS",
    "SNAPSHOT_JS",
    "is_session_gone",
]
