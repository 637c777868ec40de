"""
================================================================================
In-Memory Driver
================================================================================

A browserless driver that renders HTML routes into a live tree and plays the
role of the application under test.

Features:
    - Route table: URL path -> HTML markup (parsed with BeautifulSoup)
    - Independent snapshot per call (the live tree is cloned, never shared);
      each live element is keyed so input follows the node a snapshot saw
    - Scheduled mutations applied when due on the driver's clock, to model
      asynchronous re-renders
    - Default input effects (fill/clear/check/uncheck, checkbox toggle,
      link navigation) plus handlers matched by locator, with bubbling
    - close() makes every later call raise DriverUnavailable

Usage:
    driver = InMemoryDriver({"/": "<html><body><h1>Home</h1></body></html>"})
    driver.on_click(by_test_id("send-button"), lambda d, node, _: d.schedule(
        300, lambda d: d.document.find(...).set_text("Email sent")))

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import urlsplit

from loguru import logger

from .clock import Clock, VirtualClock
from .dom import Node, annotate, document_title
from .driver import InputAction
from .errors import DriverUnavailable, TargetDetached
from .locator import Locator
from .snapshot import parse_html

Handler = Callable[["InMemoryDriver", Node, Optional[str]], None]
Mutation = Callable[["InMemoryDriver"], None]
RouteSetup = Callable[["InMemoryDriver"], None]

BLANK_PAGE = "<html><head><title></title></head><body></body></html>"
NOT_FOUND_PAGE = (
    "<html><head><title>404</title></head>"
    "<body><h1>Page not found</h1></body></html>"
)


@dataclass(order=True)
class _Scheduled:
    due_ms: float
    seq: int
    mutation: Mutation = field(compare=False)


def clone_tree(root: Node) -> Node:
    """Copy a tree without sharing any node with the original."""
    copy_root = Node(
        root.tag, dict(root.attributes), data=root.data, shown=root.shown,
        value=root.value, checked=root.checked, key=root.key,
    )
    pending: List[Tuple[Node, Node]] = [(root, copy_root)]
    while pending:
        source, target = pending.pop()
        for child in source.children:
            twin = Node(
                child.tag, dict(child.attributes), data=child.data, shown=child.shown,
                value=child.value, checked=child.checked, key=child.key,
            )
            target.append(twin)
            pending.append((child, twin))
    return annotate(copy_root)


class InMemoryDriver:
    """In-process stand-in for a browser page."""

    def __init__(
        self,
        routes: Optional[Dict[str, str]] = None,
        base_url: str = "http://dashboard.local",
        clock: Optional[Clock] = None,
    ):
        self.routes: Dict[str, str] = dict(routes or {})
        self.base_url = base_url.rstrip("/")
        self.clock = clock or VirtualClock()
        self.document: Node = parse_html(BLANK_PAGE)
        self.snapshot_count = 0
        self.dispatched: List[Tuple[InputAction, str, Optional[str]]] = []

        self._url = "about:blank"
        self._closed = False
        self._seq = 0
        self._next_key = 0
        self._scheduled: List[_Scheduled] = []
        self._handlers: List[Tuple[InputAction, Locator, Handler]] = []
        self._route_setups: Dict[str, List[RouteSetup]] = {}

    # -------------------------------------------------------------------------
    # Driver surface
    # -------------------------------------------------------------------------

    @property
    def url(self) -> str:
        return self._url

    def _ensure_open(self) -> None:
        if self._closed:
            raise DriverUnavailable("In-memory browser session has been closed")

    async def navigate(self, url: str) -> None:
        self._ensure_open()
        full_url = url if "://" in url else f"{self.base_url}/{url.lstrip('/')}"
        path = urlsplit(full_url).path or "/"
        if len(path) > 1:
            path = path.rstrip("/")
        markup = self.routes.get(path)
        if markup is None:
            logger.warning(f"No route for {path}, rendering 404 page")
            markup = NOT_FOUND_PAGE

        self._url = full_url
        self._scheduled.clear()
        self.render(markup)
        for setup in self._route_setups.get(path, []):
            setup(self)
        logger.debug(f"Navigated to: {full_url}")

    async def title(self) -> str:
        self._ensure_open()
        return document_title(self.document)

    async def wait_for_load_state(self, state: str = "networkidle", timeout_ms: int = 15000) -> None:
        self._ensure_open()

    async def snapshot(self) -> Node:
        self._ensure_open()
        self._apply_due()
        self.snapshot_count += 1
        self._assign_keys()
        return clone_tree(self.document)

    async def dispatch_input(
        self,
        action: InputAction,
        target: Node,
        payload: Optional[str] = None,
    ) -> None:
        self._ensure_open()
        self._apply_due()
        annotate(self.document)
        if target.key is not None:
            live = self.document.find(lambda n: n.key == target.key)
        else:
            live = self.document.find(lambda n: n.ref == target.ref)
        if live is None:
            raise TargetDetached(target.ref, operation=f"{action.value} (element detached)")

        self.dispatched.append((action, live.ref, payload))
        logger.debug(f"Dispatch {action.value} -> {live.ref}")

        self._apply_default_effect(action, live, payload)
        url_before = self._url
        self._run_handlers(action, live, payload)
        if action is InputAction.CLICK and self._url == url_before:
            await self._follow_link(live)

    async def close(self) -> None:
        self._closed = True

    # -------------------------------------------------------------------------
    # Application wiring
    # -------------------------------------------------------------------------

    def render(self, markup: str) -> None:
        """Replace the whole live document."""
        self.document = parse_html(markup)

    def when(self, action: InputAction, target: Locator, handler: Handler) -> None:
        """Run ``handler`` whenever ``action`` hits ``target`` or a descendant of it."""
        self._handlers.append((action, target, handler))

    def on_click(self, target: Locator, handler: Handler) -> None:
        self.when(InputAction.CLICK, target, handler)

    def on_route(self, path: str, setup: RouteSetup) -> None:
        """Run ``setup`` after every render of ``path`` (e.g. to schedule late content)."""
        self._route_setups.setdefault(path, []).append(setup)

    def schedule(self, delay_ms: float, mutation: Mutation) -> None:
        """Apply ``mutation`` to the live tree once ``delay_ms`` has elapsed."""
        self._seq += 1
        self._scheduled.append(_Scheduled(self.clock.now_ms() + delay_ms, self._seq, mutation))

    def query(self, locator: Locator) -> List[Node]:
        """Resolve against the live tree (for handlers that mutate what they find)."""
        annotate(self.document)
        return locator.evaluate(self.document)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _assign_keys(self) -> None:
        """Key every live element that has none; keys follow a node wherever it moves."""
        for node in self.document.iter_descendants():
            if node.key is None:
                self._next_key += 1
                node.key = f"mem:{self._next_key}"

    def _apply_due(self) -> None:
        now = self.clock.now_ms()
        due = sorted(item for item in self._scheduled if item.due_ms <= now)
        if not due:
            return
        self._scheduled = [item for item in self._scheduled if item.due_ms > now]
        for item in due:
            item.mutation(self)
        annotate(self.document)

    @staticmethod
    def _apply_default_effect(action: InputAction, node: Node, payload: Optional[str]) -> None:
        input_type = node.attributes.get("type", "").lower()
        if action is InputAction.FILL:
            node.value = payload or ""
        elif action is InputAction.CLEAR:
            node.value = ""
        elif action is InputAction.CHECK:
            node.checked = True
        elif action is InputAction.UNCHECK:
            node.checked = False
        elif action is InputAction.CLICK and node.tag == "input":
            if input_type == "checkbox":
                node.checked = not node.is_checked()
            elif input_type == "radio":
                node.checked = True

    def _run_handlers(self, action: InputAction, live: Node, payload: Optional[str]) -> None:
        for handled_action, target, handler in list(self._handlers):
            if handled_action is not action:
                continue
            matched = {id(node) for node in self.query(target)}
            node: Optional[Node] = live
            while node is not None:
                if id(node) in matched:
                    handler(self, node, payload)
                    break
                node = node.parent

    async def _follow_link(self, live: Node) -> None:
        node: Optional[Node] = live
        while node is not None and not (node.tag == "a" and "href" in node.attributes):
            node = node.parent
        if node is None:
            return
        href = node.attributes["href"]
        if href.startswith("/") or href.startswith(self.base_url):
            await self.navigate(href)


__all__ = [
    "InMemoryDriver",
    "clone_tree",
]
