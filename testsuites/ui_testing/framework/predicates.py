"""
================================================================================
Predicates
================================================================================

Pure checks over a ResolvedSet, evaluated by the retry engine on every poll.

Each predicate returns an ``Outcome``: whether it holds plus a short rendering
of what was observed, so a timeout can report expected vs. observed.

Absence policy:
    - zero elements satisfies ``is_hidden`` and ``not is_visible``
    - zero elements is "not yet satisfied" for everything else, including
      the negated forms (an element must exist to assert on its text)

Element-scoped predicates expect at most one element; the retry engine
raises ``AmbiguousMatch`` when several resolve. ``count_equals`` is
set-scoped and accepts any size.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from .dom import Node, normalize_whitespace
from .locator import TextPattern, describe_pattern
from .snapshot import ResolvedSet

ELEMENT_SCOPE = "element"
SET_SCOPE = "set"

NodeCheck = Callable[[Node], Tuple[bool, str]]


@dataclass(frozen=True)
class Outcome:
    """Result of one predicate evaluation."""
    passed: bool
    observed: str


@dataclass(frozen=True)
class Predicate:
    """
    A named check over a ResolvedSet.

    Attributes:
        description: Human-readable expectation, e.g. ``to be visible``
        evaluate_fn: Function computing the Outcome
        scope: ``element`` (single node expected) or ``set``
    """

    description: str
    evaluate_fn: Callable[[ResolvedSet], Outcome] = field(compare=False)
    scope: str = ELEMENT_SCOPE
    negation: Optional[Callable[[], "Predicate"]] = field(default=None, compare=False, repr=False)

    def evaluate(self, resolved: ResolvedSet) -> Outcome:
        return self.evaluate_fn(resolved)

    def negate(self) -> "Predicate":
        if self.negation is None:
            raise ValueError(f"Predicate '{self.description}' cannot be negated")
        return self.negation()


def element_predicate(
    description: str,
    check: NodeCheck,
    empty_passes: bool = False,
    negated_empty_passes: bool = False,
) -> Predicate:
    """Build an element-scoped predicate from a per-node check."""

    def evaluate(resolved: ResolvedSet) -> Outcome:
        if resolved.is_empty:
            return Outcome(empty_passes, "empty")
        passed, observed = check(resolved[0])
        return Outcome(passed, observed)

    def negated_check(node: Node) -> Tuple[bool, str]:
        passed, observed = check(node)
        return not passed, observed

    def negation() -> Predicate:
        return element_predicate(
            f"not {description}",
            negated_check,
            empty_passes=negated_empty_passes,
            negated_empty_passes=empty_passes,
        )

    return Predicate(description, evaluate, ELEMENT_SCOPE, negation)


def _quote(text: str) -> str:
    if len(text) > 80:
        text = text[:77] + "..."
    return f'"{text}"'


def _contains(actual: str, pattern: TextPattern, exact: bool) -> bool:
    text = normalize_whitespace(actual)
    if isinstance(pattern, re.Pattern):
        return pattern.search(text) is not None
    expected = normalize_whitespace(pattern)
    return text == expected if exact else expected in text


# =============================================================================
# Standard Predicates
# =============================================================================

def _visibility(node: Node) -> Tuple[bool, str]:
    visible = node.is_visible()
    return visible, "visible" if visible else "hidden"


def is_visible() -> Predicate:
    return element_predicate(
        "to be visible", _visibility, empty_passes=False, negated_empty_passes=True
    )


def is_hidden() -> Predicate:
    def check(node: Node) -> Tuple[bool, str]:
        visible, observed = _visibility(node)
        return not visible, observed

    return element_predicate(
        "to be hidden", check, empty_passes=True, negated_empty_passes=False
    )


def contains_text(pattern: TextPattern, exact: bool = False) -> Predicate:
    """Case-sensitive containment; whole-text equality when ``exact``."""

    def check(node: Node) -> Tuple[bool, str]:
        text = node.normalized_text()
        return _contains(text, pattern, exact), f"text {_quote(text)}"

    verb = "to have text" if exact else "to contain text"
    return element_predicate(f"{verb} {describe_pattern(pattern)}", check)


def has_text(pattern: TextPattern) -> Predicate:
    return contains_text(pattern, exact=True)


def has_attribute(name: str, value: Optional[TextPattern] = None) -> Predicate:
    def check(node: Node) -> Tuple[bool, str]:
        if name not in node.attributes:
            return False, f"attribute {name} absent"
        actual = node.attributes[name]
        observed = f"{name}={_quote(actual)}"
        if value is None:
            return True, observed
        if isinstance(value, re.Pattern):
            return value.search(actual) is not None, observed
        return actual == value, observed

    expected = name if value is None else f"{name}={describe_pattern(value)}"
    return element_predicate(f"to have attribute {expected}", check)


def is_checked(checked: bool = True) -> Predicate:
    def check(node: Node) -> Tuple[bool, str]:
        state = node.is_checked()
        return state == checked, "checked" if state else "unchecked"

    return element_predicate("to be checked" if checked else "to be unchecked", check)


def is_enabled() -> Predicate:
    def check(node: Node) -> Tuple[bool, str]:
        enabled = node.is_enabled()
        return enabled, "enabled" if enabled else "disabled"

    return element_predicate("to be enabled", check)


def is_disabled() -> Predicate:
    def check(node: Node) -> Tuple[bool, str]:
        enabled = node.is_enabled()
        return not enabled, "enabled" if enabled else "disabled"

    return element_predicate("to be disabled", check)


def has_value(value: TextPattern) -> Predicate:
    def check(node: Node) -> Tuple[bool, str]:
        actual = node.input_value()
        if isinstance(value, re.Pattern):
            passed = value.search(actual) is not None
        else:
            passed = actual == value
        return passed, f"value {_quote(actual)}"

    return element_predicate(f"to have value {describe_pattern(value)}", check)


def count_equals(expected: int) -> Predicate:
    def evaluate(resolved: ResolvedSet) -> Outcome:
        return Outcome(len(resolved) == expected, f"count {len(resolved)}")

    def negation() -> Predicate:
        def negated(resolved: ResolvedSet) -> Outcome:
            return Outcome(len(resolved) != expected, f"count {len(resolved)}")
        return Predicate(f"not to have count {expected}", negated, SET_SCOPE, lambda: count_equals(expected))

    return Predicate(f"to have count {expected}", evaluate, SET_SCOPE, negation)


def is_actionable() -> Predicate:
    """Visible and enabled: the state an input action waits for."""

    def check(node: Node) -> Tuple[bool, str]:
        visible, visibility = _visibility(node)
        enabled = node.is_enabled()
        return visible and enabled, f"{visibility}, {'enabled' if enabled else 'disabled'}"

    return element_predicate("to be visible and enabled", check)


def is_attached() -> Predicate:
    def check(node: Node) -> Tuple[bool, str]:
        return True, node.describe()

    return element_predicate("to be attached", check, negated_empty_passes=True)


__all__ = [
    "ELEMENT_SCOPE",
    "SET_SCOPE",
    "Outcome",
    "Predicate",
    "element_predicate",
    "is_visible",
    "is_hidden",
    "contains_text",
    "has_text",
    "has_attribute",
    "is_checked",
    "is_enabled",
    "is_disabled",
    "has_value",
    "count_equals",
    "is_actionable",
    "is_attached",
]
