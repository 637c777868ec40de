"""
================================================================================
Rendered Tree Model
================================================================================

Plain-Python model of one snapshot of the rendered document.

Every driver produces the same shape: a ``#document`` root whose descendants
are element nodes and ``#text`` nodes. ``annotate`` then derives what the
locator layer matches on:
    - document order and parent links
    - an XPath-style ``ref`` the driver uses to dispatch input back
    - implicit ARIA role, heading level and accessible name

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional

DOCUMENT_TAG = "#document"
TEXT_TAG = "#text"

# Tags that never render and whose text is not part of the visible page
NON_RENDERED_TAGS = frozenset({
    "head", "script", "style", "template", "noscript", "title", "meta", "link",
})

IMPLICIT_ROLES: Dict[str, str] = {
    "article": "article",
    "aside": "complementary",
    "button": "button",
    "dialog": "dialog",
    "figure": "figure",
    "footer": "contentinfo",
    "form": "form",
    "header": "banner",
    "img": "img",
    "li": "listitem",
    "main": "main",
    "nav": "navigation",
    "ol": "list",
    "option": "option",
    "p": "paragraph",
    "select": "combobox",
    "table": "table",
    "tbody": "rowgroup",
    "td": "cell",
    "textarea": "textbox",
    "tfoot": "rowgroup",
    "th": "columnheader",
    "thead": "rowgroup",
    "tr": "row",
    "ul": "list",
}

INPUT_ROLES: Dict[str, Optional[str]] = {
    "button": "button",
    "checkbox": "checkbox",
    "email": "textbox",
    "hidden": None,
    "image": "button",
    "number": "spinbutton",
    "password": None,
    "radio": "radio",
    "range": "slider",
    "reset": "button",
    "search": "searchbox",
    "submit": "button",
    "tel": "textbox",
    "text": "textbox",
    "url": "textbox",
}

# Roles whose accessible name is computed from their content
NAME_FROM_CONTENT_ROLES = frozenset({
    "button", "cell", "checkbox", "columnheader", "heading", "link",
    "listitem", "menuitem", "option", "radio", "row", "rowheader", "switch",
    "tab", "tooltip", "treeitem",
})

FORM_CONTROL_TAGS = frozenset({"input", "textarea", "select"})

_HIDDEN_STYLE = re.compile(r"(display\s*:\s*none|visibility\s*:\s*hidden)", re.I)


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace and trim, the way rendered text reads."""
    return " ".join((text or "").split())


@dataclass(eq=False)
class Node:
    """
    One node of a rendered tree snapshot.

    Attributes:
        tag: Lower-case tag name, ``#text`` or ``#document``
        attributes: Raw attribute map
        children: Child nodes in document order
        data: Character data (text nodes only)
        shown: Driver-reported render flag (computed style / bounding box)
        value: Current value of form controls, when the driver knows it
        checked: Current checked state of checkable controls, when known
        key: Driver-assigned identity of the live element, stable while it
            stays attached; None when the driver does not track identity
    """

    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)
    data: str = ""
    shown: bool = True
    value: Optional[str] = None
    checked: Optional[bool] = None
    key: Optional[str] = None

    # Derived by annotate()
    parent: Optional["Node"] = field(default=None, repr=False)
    order: int = field(default=-1, repr=False)
    ref: str = field(default="", repr=False)
    role: Optional[str] = field(default=None, repr=False)
    name: str = field(default="", repr=False)
    level: Optional[int] = field(default=None, repr=False)

    # -------------------------------------------------------------------------
    # Structure
    # -------------------------------------------------------------------------

    @property
    def is_element(self) -> bool:
        return self.tag not in (TEXT_TAG, DOCUMENT_TAG)

    @property
    def is_text(self) -> bool:
        return self.tag == TEXT_TAG

    def element_children(self) -> List["Node"]:
        return [child for child in self.children if child.is_element]

    def iter_descendants(self) -> Iterator["Node"]:
        """Yield element descendants in document (pre-)order, excluding self."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if node.is_element:
                yield node
            stack.extend(reversed(node.children))

    def ancestor(self, levels: int) -> Optional["Node"]:
        """Walk ``levels`` steps up; the document root is never returned."""
        node: Optional[Node] = self
        for _ in range(levels):
            node = node.parent if node else None
        if node is None or not node.is_element:
            return None
        return node

    def find(self, match: Callable[["Node"], bool]) -> Optional["Node"]:
        return next((node for node in self.iter_descendants() if match(node)), None)

    # -------------------------------------------------------------------------
    # Content and state
    # -------------------------------------------------------------------------

    def text_content(self) -> str:
        if self.is_text:
            return self.data
        if self.tag in NON_RENDERED_TAGS:
            return ""
        return "".join(child.text_content() for child in self.children)

    def normalized_text(self) -> str:
        return normalize_whitespace(self.text_content())

    def _renders(self) -> bool:
        if not self.shown or self.tag in NON_RENDERED_TAGS:
            return False
        if "hidden" in self.attributes:
            return False
        if self.tag == "input" and self.attributes.get("type") == "hidden":
            return False
        return not _HIDDEN_STYLE.search(self.attributes.get("style", ""))

    def is_visible(self) -> bool:
        """Visible when this node and every ancestor element render."""
        node: Optional[Node] = self
        while node is not None and node.tag != DOCUMENT_TAG:
            if not node.is_text and not node._renders():
                return False
            node = node.parent
        return True

    def is_enabled(self) -> bool:
        if "disabled" in self.attributes:
            return False
        return self.attributes.get("aria-disabled") != "true"

    def is_checked(self) -> bool:
        if self.checked is not None:
            return self.checked
        if "aria-checked" in self.attributes:
            return self.attributes["aria-checked"] == "true"
        return "checked" in self.attributes

    def input_value(self) -> str:
        if self.value is not None:
            return self.value
        if self.tag == "textarea":
            return self.text_content()
        return self.attributes.get("value", "")

    def describe(self) -> str:
        """Short label used in diagnostics, e.g. ``<button> "Save changes"``."""
        text = self.normalized_text()
        if len(text) > 60:
            text = text[:57] + "..."
        testid = self.attributes.get("data-testid")
        marker = f"[data-testid={testid}]" if testid else ""
        return f'<{self.tag}{marker}> "{text}"'

    # -------------------------------------------------------------------------
    # Mutation (used by in-process drivers to simulate re-renders)
    # -------------------------------------------------------------------------

    def append(self, child: "Node") -> "Node":
        child.parent = self
        self.children.append(child)
        return child

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.children = [c for c in self.parent.children if c is not self]
            self.parent = None

    def set_text(self, text: str) -> None:
        self.children = []
        self.append(Node(TEXT_TAG, data=text))

    def set_attribute(self, name: str, value: str = "") -> None:
        self.attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)


# =============================================================================
# Annotation
# =============================================================================

def implicit_role(node: Node) -> Optional[str]:
    explicit = node.attributes.get("role")
    if explicit:
        return explicit.split()[0]
    tag = node.tag
    if tag in ("h1", "h2", "h3", "h4", "h5", "h6"):
        return "heading"
    if tag == "a":
        return "link" if "href" in node.attributes else None
    if tag == "input":
        return INPUT_ROLES.get(node.attributes.get("type", "text").lower(), "textbox")
    return IMPLICIT_ROLES.get(tag)


def _heading_level(node: Node) -> Optional[int]:
    if "aria-level" in node.attributes:
        try:
            return int(node.attributes["aria-level"])
        except ValueError:
            return None
    if re.fullmatch(r"h[1-6]", node.tag):
        return int(node.tag[1])
    return None


def _accessible_name(
    node: Node,
    by_id: Dict[str, Node],
    labels_for: Dict[str, str],
) -> str:
    attrs = node.attributes
    if attrs.get("aria-label", "").strip():
        return normalize_whitespace(attrs["aria-label"])
    if attrs.get("aria-labelledby"):
        parts = [
            by_id[ref].normalized_text()
            for ref in attrs["aria-labelledby"].split()
            if ref in by_id
        ]
        if parts:
            return normalize_whitespace(" ".join(parts))
    if node.tag in FORM_CONTROL_TAGS:
        element_id = attrs.get("id")
        if element_id and element_id in labels_for:
            return labels_for[element_id]
        wrapping = node.parent
        while wrapping is not None and wrapping.tag != "label":
            wrapping = wrapping.parent
        if wrapping is not None:
            return wrapping.normalized_text()
        return normalize_whitespace(attrs.get("placeholder") or attrs.get("title", ""))
    if node.tag == "img":
        return normalize_whitespace(attrs.get("alt", ""))
    if node.role in NAME_FROM_CONTENT_ROLES:
        return node.normalized_text()
    return normalize_whitespace(attrs.get("title", ""))


def annotate(root: Node) -> Node:
    """
    Derive parent links, document order, refs, roles and names in place.

    Safe to call repeatedly; every derived field is recomputed.
    """
    root.parent = None
    elements: List[Node] = []
    order = 0
    stack: List[Node] = [root]
    while stack:
        node = stack.pop()
        node.order = order
        order += 1
        if node.is_element:
            elements.append(node)
        seen: Dict[str, int] = {}
        for child in node.children:
            child.parent = node
            if child.is_element:
                seen[child.tag] = seen.get(child.tag, 0) + 1
                base = node.ref if node.is_element else ""
                child.ref = f"{base}/{child.tag}[{seen[child.tag]}]"
        stack.extend(reversed(node.children))

    by_id: Dict[str, Node] = {}
    labels_for: Dict[str, str] = {}
    for node in elements:
        if "id" in node.attributes:
            by_id.setdefault(node.attributes["id"], node)
        if node.tag == "label" and node.attributes.get("for"):
            labels_for.setdefault(node.attributes["for"], node.normalized_text())

    for node in elements:
        node.role = implicit_role(node)
        node.level = _heading_level(node) if node.role == "heading" else None
    for node in elements:
        node.name = _accessible_name(node, by_id, labels_for)
    return root


def document_title(root: Node) -> str:
    title = root.find(lambda n: n.tag == "title")
    if title is None:
        return ""
    return normalize_whitespace("".join(child.data for child in title.children if child.is_text))


__all__ = [
    "DOCUMENT_TAG",
    "TEXT_TAG",
    "Node",
    "annotate",
    "document_title",
    "implicit_role",
    "normalize_whitespace",
]
