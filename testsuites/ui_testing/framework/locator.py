"""
================================================================================
Locator and Query Combinators
================================================================================

Immutable, composable descriptions of "which node(s)".

A Locator is an ordered tuple of selection steps. It holds no reference to
any node: resolving it against a snapshot yields the matches *at that
instant*, and every combinator returns a new Locator with one more step.

Locator priority (most to least stable):
    1. data-testid           -> by_test_id
    2. role + accessible name -> by_role
    3. label / placeholder   -> by_label, by_placeholder
    4. visible text          -> by_text, .filter(has_text=...)
    5. tag + attributes      -> locator("tbody tr")-style descend steps
    6. structural ascend     -> .ascend(levels), last resort

Order matters: ``rows.filter(has_text="x").nth(0)`` is the first row that
contains "x", while ``rows.nth(0).filter(has_text="x")`` is the first row
only if it contains "x".

Usage:
    >>> rows = by_role("table").locator("tbody").locator("tr")
    >>> alex = rows.filter(has_text="Alex Smith")
    >>> first_cell = alex.locator("td").first()

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Pattern, Tuple, Union

from .dom import FORM_CONTROL_TAGS, Node, normalize_whitespace

TextPattern = Union[str, Pattern[str]]

TEST_ID_ATTRIBUTE = "data-testid"


# =============================================================================
# Text Matching
# =============================================================================

def text_matches(actual: str, pattern: TextPattern, exact: bool = False) -> bool:
    """
    Match rendered text against a string or regular expression.

    Strings match as case-insensitive substrings of the whitespace-normalised
    text, or as case-sensitive whole-string equality when ``exact`` is set.
    Regular expressions are searched against the normalised text.
    """
    text = normalize_whitespace(actual)
    if isinstance(pattern, re.Pattern):
        return pattern.search(text) is not None
    expected = normalize_whitespace(pattern)
    if exact:
        return text == expected
    return expected.lower() in text.lower()


def describe_pattern(pattern: TextPattern) -> str:
    if isinstance(pattern, re.Pattern):
        return f"/{pattern.pattern}/"
    return repr(pattern)


def _search(nodes: Iterable[Node], match: Callable[[Node], bool]) -> List[Node]:
    """Collect matching descendants of every node, de-duplicated, in document order."""
    found: Dict[int, Node] = {}
    for node in nodes:
        for candidate in node.iter_descendants():
            if id(candidate) not in found and match(candidate):
                found[id(candidate)] = candidate
    return sorted(found.values(), key=lambda n: n.order)


# =============================================================================
# Steps
# =============================================================================

class Step:
    """One selection step. Subclasses are frozen dataclasses."""

    kind: str = "step"

    def apply(self, nodes: List[Node]) -> List[Node]:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Role(Step):
    role: str
    name: Optional[TextPattern] = None
    exact: bool = False
    level: Optional[int] = None
    include_hidden: bool = False

    kind = "role"

    def _match(self, node: Node) -> bool:
        if node.role != self.role:
            return False
        if self.level is not None and node.level != self.level:
            return False
        if self.name is not None and not text_matches(node.name, self.name, self.exact):
            return False
        return self.include_hidden or node.is_visible()

    def apply(self, nodes: List[Node]) -> List[Node]:
        return _search(nodes, self._match)

    def describe(self) -> str:
        parts = [self.role]
        if self.name is not None:
            parts.append(f"name={describe_pattern(self.name)}")
        if self.exact:
            parts.append("exact")
        if self.level is not None:
            parts.append(f"level={self.level}")
        return f"role({', '.join(parts)})"


@dataclass(frozen=True)
class Text(Step):
    pattern: TextPattern
    exact: bool = False

    kind = "text"

    def _match(self, node: Node) -> bool:
        if not text_matches(node.text_content(), self.pattern, self.exact):
            return False
        # Innermost match only: skip wrappers whose child already matches
        return not any(
            text_matches(child.text_content(), self.pattern, self.exact)
            for child in node.element_children()
        )

    def apply(self, nodes: List[Node]) -> List[Node]:
        return _search(nodes, self._match)

    def describe(self) -> str:
        suffix = ", exact" if self.exact else ""
        return f"text({describe_pattern(self.pattern)}{suffix})"


@dataclass(frozen=True)
class TestId(Step):
    test_id: TextPattern

    kind = "test_id"
    __test__ = False

    def _match(self, node: Node) -> bool:
        value = node.attributes.get(TEST_ID_ATTRIBUTE)
        if value is None:
            return False
        if isinstance(self.test_id, re.Pattern):
            return self.test_id.search(value) is not None
        return value == self.test_id

    def apply(self, nodes: List[Node]) -> List[Node]:
        return _search(nodes, self._match)

    def describe(self) -> str:
        return f"test_id({describe_pattern(self.test_id)})"


@dataclass(frozen=True)
class Attribute(Step):
    name: str
    value: Optional[TextPattern] = None
    exact: bool = False

    kind = "attribute"

    def _match(self, node: Node) -> bool:
        if self.name not in node.attributes:
            return False
        if self.value is None:
            return True
        return text_matches(node.attributes[self.name], self.value, self.exact)

    def apply(self, nodes: List[Node]) -> List[Node]:
        return _search(nodes, self._match)

    def describe(self) -> str:
        if self.value is None:
            return f"attr({self.name})"
        return f"attr({self.name}={describe_pattern(self.value)})"


@dataclass(frozen=True)
class Label(Step):
    pattern: TextPattern
    exact: bool = False

    kind = "label"

    def _match(self, node: Node) -> bool:
        return node.tag in FORM_CONTROL_TAGS and text_matches(node.name, self.pattern, self.exact)

    def apply(self, nodes: List[Node]) -> List[Node]:
        return _search(nodes, self._match)

    def describe(self) -> str:
        return f"label({describe_pattern(self.pattern)})"


@dataclass(frozen=True)
class Descend(Step):
    tag: str = "*"
    attrs: Tuple[Tuple[str, str], ...] = ()

    kind = "descend"

    def _match(self, node: Node) -> bool:
        if self.tag != "*" and node.tag != self.tag:
            return False
        return all(node.attributes.get(key) == value for key, value in self.attrs)

    def apply(self, nodes: List[Node]) -> List[Node]:
        return _search(nodes, self._match)

    def describe(self) -> str:
        selector = self.tag + "".join(f'[{k}="{v}"]' for k, v in self.attrs)
        return f"locator({selector})"


@dataclass(frozen=True)
class Ascend(Step):
    levels: int = 1

    kind = "ascend"

    def apply(self, nodes: List[Node]) -> List[Node]:
        found: Dict[int, Node] = {}
        for node in nodes:
            ancestor = node.ancestor(self.levels)
            if ancestor is not None:
                found.setdefault(id(ancestor), ancestor)
        return sorted(found.values(), key=lambda n: n.order)

    def describe(self) -> str:
        return f"ascend({self.levels})"


@dataclass(frozen=True)
class Filter(Step):
    has_text: Optional[TextPattern] = None
    has_not_text: Optional[TextPattern] = None
    exact: bool = False
    has: Optional["Locator"] = None
    has_not: Optional["Locator"] = None

    kind = "filter"

    def _keep(self, node: Node) -> bool:
        text = node.text_content()
        if self.has_text is not None and not text_matches(text, self.has_text, self.exact):
            return False
        if self.has_not_text is not None and text_matches(text, self.has_not_text, self.exact):
            return False
        # Inner locators are evaluated relative to the candidate node
        if self.has is not None and not self.has.evaluate(node):
            return False
        if self.has_not is not None and self.has_not.evaluate(node):
            return False
        return True

    def apply(self, nodes: List[Node]) -> List[Node]:
        return [node for node in nodes if self._keep(node)]

    def describe(self) -> str:
        parts = []
        if self.has_text is not None:
            parts.append(f"has_text={describe_pattern(self.has_text)}")
        if self.has_not_text is not None:
            parts.append(f"has_not_text={describe_pattern(self.has_not_text)}")
        if self.exact:
            parts.append("exact")
        if self.has is not None:
            parts.append(f"has=<{self.has.describe()}>")
        if self.has_not is not None:
            parts.append(f"has_not=<{self.has_not.describe()}>")
        return f"filter({', '.join(parts)})"


@dataclass(frozen=True)
class Index(Step):
    n: int

    kind = "index"

    def apply(self, nodes: List[Node]) -> List[Node]:
        if -len(nodes) <= self.n < len(nodes):
            return [nodes[self.n]]
        return []

    def describe(self) -> str:
        return f"nth({self.n})"


@dataclass(frozen=True)
class First(Step):
    kind = "first"

    def apply(self, nodes: List[Node]) -> List[Node]:
        return nodes[:1]

    def describe(self) -> str:
        return "first"


@dataclass(frozen=True)
class Last(Step):
    kind = "last"

    def apply(self, nodes: List[Node]) -> List[Node]:
        return nodes[-1:]

    def describe(self) -> str:
        return "last"


# =============================================================================
# Locator
# =============================================================================

@dataclass(frozen=True)
class Locator:
    """
    Immutable chain of selection steps.

    The empty locator denotes the document itself; selection combinators
    search the descendants of whatever the chain has matched so far.
    """

    steps: Tuple[Step, ...] = ()

    def _then(self, step: Step) -> "Locator":
        return Locator(self.steps + (step,))

    # -- selection -----------------------------------------------------------

    def get_by_role(
        self,
        role: str,
        name: Optional[TextPattern] = None,
        exact: bool = False,
        level: Optional[int] = None,
        include_hidden: bool = False,
    ) -> "Locator":
        return self._then(Role(role, name, exact, level, include_hidden))

    def get_by_text(self, pattern: TextPattern, exact: bool = False) -> "Locator":
        return self._then(Text(pattern, exact))

    def get_by_test_id(self, test_id: TextPattern) -> "Locator":
        return self._then(TestId(test_id))

    def get_by_placeholder(self, text: TextPattern, exact: bool = False) -> "Locator":
        return self._then(Attribute("placeholder", text, exact))

    def get_by_alt_text(self, text: TextPattern, exact: bool = False) -> "Locator":
        return self._then(Attribute("alt", text, exact))

    def get_by_label(self, text: TextPattern, exact: bool = False) -> "Locator":
        return self._then(Label(text, exact))

    def locator(
        self,
        selector: str = "*",
        attrs: Optional[Dict[str, str]] = None,
        **kwargs: str,
    ) -> "Locator":
        """
        Descend by tag name, optionally requiring attribute values.

        ``selector`` may hold several space-separated tags
        (``"tbody tr"``), each becoming its own descend step. Keyword
        attributes use underscores for hyphens (``aria_selected="true"``).
        """
        pairs = dict(attrs or {})
        pairs.update({key.replace("_", "-"): value for key, value in kwargs.items()})
        tags = selector.split() or ["*"]
        result = self
        for tag in tags[:-1]:
            result = result._then(Descend(tag))
        return result._then(Descend(tags[-1], tuple(sorted(pairs.items()))))

    # -- narrowing -----------------------------------------------------------

    def filter(
        self,
        has_text: Optional[TextPattern] = None,
        has_not_text: Optional[TextPattern] = None,
        exact: bool = False,
        has: Optional["Locator"] = None,
        has_not: Optional["Locator"] = None,
    ) -> "Locator":
        """
        Keep matches by their text or by what they contain.

        ``has``/``has_not`` are evaluated relative to each match, so
        ``rows.filter(has=locate("td").nth(1).filter(has_text="1", exact=True))``
        keeps rows whose second cell reads exactly "1".
        """
        return self._then(Filter(has_text, has_not_text, exact, has, has_not))

    def nth(self, index: int) -> "Locator":
        return self._then(Index(index))

    def first(self) -> "Locator":
        return self._then(First())

    def last(self) -> "Locator":
        return self._then(Last())

    # -- structure -----------------------------------------------------------

    def ascend(self, levels: int = 1) -> "Locator":
        """
        Walk up ``levels`` ancestors.

        Couples the locator to markup depth; wrap each use in a named page
        object property so a layout change is a single edit.
        """
        if levels < 1:
            raise ValueError("ascend levels must be >= 1")
        return self._then(Ascend(levels))

    def parent(self) -> "Locator":
        return self.ascend(1)

    def chain(self, relative: "Locator") -> "Locator":
        """Append another locator's steps, scoping it inside this one."""
        return Locator(self.steps + relative.steps)

    # -- evaluation ----------------------------------------------------------

    def evaluate(self, root: Node) -> List[Node]:
        nodes = [root]
        for step in self.steps:
            nodes = step.apply(nodes)
        return nodes

    def describe(self) -> str:
        if not self.steps:
            return "document"
        return " >> ".join(step.describe() for step in self.steps)

    def __str__(self) -> str:
        return self.describe()


# =============================================================================
# Root Constructors
# =============================================================================

def document() -> Locator:
    return Locator()


def by_role(
    role: str,
    name: Optional[TextPattern] = None,
    exact: bool = False,
    level: Optional[int] = None,
    include_hidden: bool = False,
) -> Locator:
    return Locator().get_by_role(role, name, exact, level, include_hidden)


def by_text(pattern: TextPattern, exact: bool = False) -> Locator:
    return Locator().get_by_text(pattern, exact)


def by_test_id(test_id: TextPattern) -> Locator:
    return Locator().get_by_test_id(test_id)


def by_placeholder(text: TextPattern, exact: bool = False) -> Locator:
    return Locator().get_by_placeholder(text, exact)


def by_alt_text(text: TextPattern, exact: bool = False) -> Locator:
    return Locator().get_by_alt_text(text, exact)


def by_label(text: TextPattern, exact: bool = False) -> Locator:
    return Locator().get_by_label(text, exact)


def locate(selector: str = "*", attrs: Optional[Dict[str, str]] = None, **kwargs: str) -> Locator:
    return Locator().locator(selector, attrs, **kwargs)


__all__ = [
    "Locator",
    "Step",
    "Role",
    "Text",
    "TestId",
    "Attribute",
    "Label",
    "Descend",
    "Ascend",
    "Filter",
    "Index",
    "First",
    "Last",
    "TextPattern",
    "TEST_ID_ATTRIBUTE",
    "text_matches",
    "describe_pattern",
    "document",
    "by_role",
    "by_text",
    "by_test_id",
    "by_placeholder",
    "by_alt_text",
    "by_label",
    "locate",
]
