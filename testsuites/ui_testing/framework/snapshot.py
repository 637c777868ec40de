"""
================================================================================
Snapshot Accessor
================================================================================

Reads the current rendered tree from a driver and resolves locators against it.

Features:
    - Fresh snapshot on every resolution (no caching between calls)
    - HTML markup -> tree conversion (BeautifulSoup) for in-process drivers
    - Browser payload -> tree conversion for the Playwright driver
    - ResolvedSet value with diagnostic rendering for failure messages

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString
from loguru import logger

from .dom import DOCUMENT_TAG, TEXT_TAG, Node, annotate

if TYPE_CHECKING:
    from .driver import Driver
    from .locator import Locator


# =============================================================================
# Tree Builders
# =============================================================================

def _node_from_tag(tag: Tag) -> Node:
    attributes: Dict[str, str] = {}
    for key, value in tag.attrs.items():
        attributes[key.lower()] = " ".join(value) if isinstance(value, list) else str(value)

    node = Node(tag.name.lower(), attributes=attributes)
    if node.tag == "input":
        input_type = attributes.get("type", "text").lower()
        if input_type in ("checkbox", "radio"):
            node.checked = "checked" in attributes
        else:
            node.value = attributes.get("value", "")
    return node


def parse_html(markup: str) -> Node:
    """
    Build an annotated tree from HTML markup.

    Comments, doctypes and other non-content strings are dropped; everything
    else keeps document order.
    """
    soup = BeautifulSoup(markup, "html.parser")
    root = Node(DOCUMENT_TAG)

    pending: List[Tuple[Any, Node]] = [(soup, root)]
    while pending:
        source, target = pending.pop()
        for child in source.children:
            if isinstance(child, PreformattedString):
                continue
            if isinstance(child, NavigableString):
                target.append(Node(TEXT_TAG, data=str(child)))
            elif isinstance(child, Tag):
                pending.append((child, target.append(_node_from_tag(child))))
    return annotate(root)


def node_from_payload(payload: Dict[str, Any]) -> Node:
    """
    Build an annotated tree from a browser snapshot payload.

    Payload shape (produced by the Playwright driver's snapshot script)::

        {"tag": "#document", "children": [
            {"tag": "div", "attrs": {...}, "shown": true,
             "value": null, "checked": null, "key": "k3:7",
             "children": [
                {"text": "Inbox"}
            ]}
        ]}
    """
    root = Node(payload.get("tag", DOCUMENT_TAG))
    pending: List[Tuple[Dict[str, Any], Node]] = [(payload, root)]
    while pending:
        source, target = pending.pop()
        for child in source.get("children", []):
            if "text" in child:
                target.append(Node(TEXT_TAG, data=child["text"]))
                continue
            node = Node(
                child["tag"].lower(),
                attributes=dict(child.get("attrs") or {}),
                shown=bool(child.get("shown", True)),
                value=child.get("value"),
                checked=child.get("checked"),
                key=child.get("key"),
            )
            pending.append((child, target.append(node)))
    return annotate(root)


# =============================================================================
# Resolution
# =============================================================================

@dataclass(frozen=True)
class ResolvedSet:
    """
    Nodes matched by a locator at one instant, in document order.

    Never persisted: every resolution produces a new set.
    """

    nodes: Tuple[Node, ...] = ()

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __getitem__(self, index: int) -> Node:
        return self.nodes[index]

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def describe(self) -> str:
        """Render the observed state for failure messages."""
        if not self.nodes:
            return "empty"
        if len(self.nodes) == 1:
            return f"1 element: {self.nodes[0].describe()}"
        preview = ", ".join(node.describe() for node in self.nodes[:3])
        more = ", ..." if len(self.nodes) > 3 else ""
        return f"{len(self.nodes)} elements: {preview}{more}"


class SnapshotAccessor:
    """
    Stateless reader over a driver.

    ``resolve`` asks the driver for a brand-new snapshot each time. Driver
    failures (``DriverUnavailable``) propagate untouched; retrying is the
    retry engine's job.
    """

    def __init__(self, driver: "Driver"):
        self.driver = driver

    async def snapshot(self) -> Node:
        return await self.driver.snapshot()

    async def resolve(self, locator: "Locator") -> ResolvedSet:
        root = await self.driver.snapshot()
        resolved = ResolvedSet(tuple(locator.evaluate(root)))
        logger.debug(f"Resolved {locator.describe()} -> {resolved.describe()}")
        return resolved


__all__ = [
    "ResolvedSet",
    "SnapshotAccessor",
    "node_from_payload",
    "parse_html",
]
