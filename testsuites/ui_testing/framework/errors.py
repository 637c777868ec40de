"""
================================================================================
UI Framework Errors
================================================================================

Failure taxonomy for the query and verification layer.

Failures (subclasses of ``AssertionError``) are reported by pytest as test
failures:
    - ResolutionEmpty: a locator resolved to nothing where an element was needed
    - TargetDetached: the node picked from a snapshot left the live page
      before the input reached it
    - TimeoutFailure: a predicate never held within the retry policy window
    - AmbiguousMatch: a single-element operation matched several elements

Errors:
    - DriverUnavailable: the browser session is gone; fatal, never retried
    - ConfigurationError: invalid framework configuration

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Optional


class UIAssertionError(AssertionError):
    """Base class for every failure raised by the verification layer."""
    pass


class ResolutionEmpty(UIAssertionError):
    """Raised when a locator resolves to zero elements but one is required."""

    def __init__(self, locator: str, operation: str = "read"):
        self.locator = locator
        self.operation = operation
        super().__init__(
            f"No element found for {operation}: {locator}"
        )


class TargetDetached(ResolutionEmpty):
    """Raised by a driver when the node chosen from a snapshot is no longer attached."""
    pass


class AmbiguousMatch(UIAssertionError):
    """Raised when a single-element operation matches several elements."""

    def __init__(self, locator: str, count: int, operation: str = "read"):
        self.locator = locator
        self.count = count
        self.operation = operation
        super().__init__(
            f"Expected exactly one element for {operation}, "
            f"but {count} matched: {locator}"
        )


class TimeoutFailure(UIAssertionError):
    """
    Raised when a condition never became true within the timeout.

    Attributes:
        locator: Step chain of the locator under test (or the page probe name)
        expected: Human-readable predicate description
        last_observed: Last observed state, e.g. ``empty`` or ``1 element: ...``
        elapsed_ms: Time spent polling before giving up
        attempts: Number of evaluations performed
    """

    def __init__(
        self,
        locator: str,
        expected: str,
        last_observed: str,
        elapsed_ms: float,
        attempts: int = 0,
        message: Optional[str] = None,
    ):
        self.locator = locator
        self.expected = expected
        self.last_observed = last_observed
        self.elapsed_ms = elapsed_ms
        self.attempts = attempts
        super().__init__(
            message or (
                f"Timed out after {elapsed_ms:.0f}ms ({attempts} attempts)\n"
                f"  Locator:  {locator}\n"
                f"  Expected: {expected}\n"
                f"  Observed: {last_observed}"
            )
        )

    def to_dict(self) -> dict:
        """Structured form used for report attachments."""
        return {
            "locator": self.locator,
            "expected": self.expected,
            "last_observed": self.last_observed,
            "elapsed_ms": round(self.elapsed_ms, 1),
            "attempts": self.attempts,
        }


class DriverUnavailable(RuntimeError):
    """Raised when the underlying browser session can no longer be queried."""
    pass


class ConfigurationError(Exception):
    """Raised when framework configuration is invalid."""
    pass


__all__ = [
    "UIAssertionError",
    "ResolutionEmpty",
    "TargetDetached",
    "AmbiguousMatch",
    "TimeoutFailure",
    "DriverUnavailable",
    "ConfigurationError",
]
