"""
================================================================================
UI Testing Framework
================================================================================

Resilient query-and-verification layer for the dashboard UI suite.

Components:
    - locator: immutable, composable element descriptions
    - snapshot: rendered-tree model and fresh-per-call resolution
    - predicates / retry_engine / assertions: auto-retrying expectations
    - session: per-test context (actions, reads, expect)
    - extraction: named row fields behind a declared schema
    - navigation / page_base: shared navigation and the base page object
    - playwright_driver / memory_driver / browser_manager: drivers

Author: Automation Team
License: MIT
================================================================================
"""

from .errors import (
    AmbiguousMatch,
    ConfigurationError,
    DriverUnavailable,
    ResolutionEmpty,
    TargetDetached,
    TimeoutFailure,
    UIAssertionError,
)
from .locator import (
    Locator,
    by_alt_text,
    by_label,
    by_placeholder,
    by_role,
    by_test_id,
    by_text,
    document,
    locate,
)
from .retry_engine import RetryEngine, RetryPolicy
from .session import Session
from .page_base import BasePage

__all__ = [
    "AmbiguousMatch",
    "BasePage",
    "ConfigurationError",
    "DriverUnavailable",
    "Locator",
    "ResolutionEmpty",
    "RetryEngine",
    "RetryPolicy",
    "Session",
    "TargetDetached",
    "TimeoutFailure",
    "UIAssertionError",
    "by_alt_text",
    "by_label",
    "by_placeholder",
    "by_role",
    "by_test_id",
    "by_text",
    "document",
    "locate",
]
