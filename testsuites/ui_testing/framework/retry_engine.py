"""
================================================================================
Retry-Assertion Engine
================================================================================

Polls a condition until it holds or the retry policy's timeout elapses.

Algorithm (per call):
    1. Resolve the locator from a fresh snapshot and evaluate the predicate
    2. Success -> return immediately, no extra delay
    3. Failure -> if elapsed >= timeout raise TimeoutFailure, otherwise sleep
       min(poll interval, remaining time) and go to 1

The resolved set is never reused across polls. Driver errors
(DriverUnavailable) and ambiguous matches propagate on the spot; only
"not yet satisfied" is retried.

Usage:
    engine = RetryEngine(accessor, clock)
    await engine.wait_for(by_role("tab", name="All"), has_attribute("aria-selected", "true"))
    await engine.wait_for(rows, count_equals(4), RetryPolicy(timeout_ms=2000))

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Awaitable, Callable, List, Optional

from loguru import logger

from dashboard_tools.common.global_config import get_config

from .clock import Clock
from .dom import Node
from .errors import AmbiguousMatch, ConfigurationError, ResolutionEmpty, TimeoutFailure
from .locator import Locator
from .predicates import ELEMENT_SCOPE, Outcome, Predicate
from .snapshot import SnapshotAccessor

Probe = Callable[[], Awaitable[Outcome]]

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_POLL_INTERVAL_MS = 100


@dataclass(frozen=True)
class RetryPolicy:
    """
    How long an assertion waits and how often it re-checks.

    Attributes:
        timeout_ms: Total time allowed, in milliseconds
        poll_interval_ms: Delay between evaluations in milliseconds
    """

    timeout_ms: int = DEFAULT_TIMEOUT_MS
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS

    def __post_init__(self) -> None:
        if self.timeout_ms < 0:
            raise ConfigurationError(f"timeout_ms must be >= 0, got {self.timeout_ms}")
        if self.poll_interval_ms <= 0:
            raise ConfigurationError(
                f"poll_interval_ms must be > 0, got {self.poll_interval_ms}"
            )

    def with_timeout(self, timeout_ms: int) -> "RetryPolicy":
        return replace(self, timeout_ms=timeout_ms)

    @classmethod
    def from_config(cls) -> "RetryPolicy":
        """Build the policy from ``retry.timeout_ms`` / ``retry.poll_interval_ms``."""
        try:
            return cls(
                timeout_ms=int(get_config("retry.timeout_ms", DEFAULT_TIMEOUT_MS)),
                poll_interval_ms=int(
                    get_config("retry.poll_interval_ms", DEFAULT_POLL_INTERVAL_MS)
                ),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid retry configuration: {e}") from e


# Process-wide default, loaded lazily from configuration
_default_policy: Optional[RetryPolicy] = None


def get_default_policy() -> RetryPolicy:
    global _default_policy
    if _default_policy is None:
        _default_policy = RetryPolicy.from_config()
    return _default_policy


def set_default_policy(policy: RetryPolicy) -> None:
    global _default_policy
    _default_policy = policy


def reset_default_policy() -> None:
    """Forget the cached default so the next call re-reads configuration."""
    global _default_policy
    _default_policy = None


def resolve_policy(
    policy: Optional[RetryPolicy] = None,
    timeout_ms: Optional[int] = None,
) -> RetryPolicy:
    """Pick the explicit policy (or the default) and apply a timeout override."""
    chosen = policy or get_default_policy()
    if timeout_ms is not None:
        chosen = chosen.with_timeout(timeout_ms)
    return chosen


class RetryEngine:
    """
    Cooperative poll loop over a snapshot accessor.

    One engine belongs to one session; nothing is shared across sessions.
    """

    def __init__(self, accessor: SnapshotAccessor, clock: Clock):
        self.accessor = accessor
        self.clock = clock

    async def wait_until(
        self,
        probe: Probe,
        subject: str,
        expected: str,
        policy: Optional[RetryPolicy] = None,
    ) -> Outcome:
        """
        Poll ``probe`` until its Outcome passes.

        Args:
            probe: Async callable evaluated fresh on every attempt
            subject: What is being checked (locator chain or page property)
            expected: Human-readable expectation
            policy: Retry policy, defaults to the process-wide default

        Returns:
            The passing Outcome

        Raises:
            TimeoutFailure: Condition still false once the timeout elapsed
        """
        policy = policy or get_default_policy()
        start = self.clock.now_ms()
        attempts = 0

        while True:
            attempts += 1
            outcome = await probe()
            elapsed = self.clock.now_ms() - start

            if outcome.passed:
                if attempts > 1:
                    logger.info(
                        f"Condition met after {attempts} attempts ({elapsed:.0f}ms): "
                        f"{subject} {expected}"
                    )
                return outcome

            if elapsed >= policy.timeout_ms:
                failure = TimeoutFailure(
                    locator=subject,
                    expected=expected,
                    last_observed=outcome.observed,
                    elapsed_ms=elapsed,
                    attempts=attempts,
                )
                logger.error(f"❌ {failure}")
                raise failure

            logger.debug(
                f"Attempt {attempts}: {subject} {expected} not met "
                f"(observed: {outcome.observed})"
            )
            await self.clock.sleep(min(policy.poll_interval_ms, policy.timeout_ms - elapsed))

    async def wait_for(
        self,
        locator: Locator,
        predicate: Predicate,
        policy: Optional[RetryPolicy] = None,
    ) -> Outcome:
        """Re-resolve ``locator`` and re-evaluate ``predicate`` until it holds."""

        async def probe() -> Outcome:
            resolved = await self.accessor.resolve(locator)
            if predicate.scope == ELEMENT_SCOPE and len(resolved) > 1:
                raise AmbiguousMatch(
                    locator.describe(),
                    len(resolved),
                    operation=f"expect {predicate.description}",
                )
            return predicate.evaluate(resolved)

        return await self.wait_until(probe, locator.describe(), predicate.description, policy)

    async def wait_for_element(
        self,
        locator: Locator,
        predicate: Predicate,
        policy: Optional[RetryPolicy] = None,
        operation: str = "read",
    ) -> Node:
        """
        Wait until exactly one node resolves and satisfies ``predicate``.

        Returns:
            The node from the passing snapshot

        Raises:
            AmbiguousMatch: More than one node resolved (raised on the spot)
            ResolutionEmpty: Nothing resolved by the deadline
            TimeoutFailure: A node resolved but never satisfied ``predicate``
        """
        matched: List[Node] = []

        async def probe() -> Outcome:
            resolved = await self.accessor.resolve(locator)
            if len(resolved) > 1:
                raise AmbiguousMatch(locator.describe(), len(resolved), operation=operation)
            outcome = predicate.evaluate(resolved)
            if outcome.passed and not resolved.is_empty:
                matched[:] = [resolved[0]]
            elif outcome.passed:
                outcome = Outcome(False, "empty")
            return outcome

        try:
            await self.wait_until(probe, locator.describe(), predicate.description, policy)
        except TimeoutFailure as failure:
            if failure.last_observed == "empty":
                raise ResolutionEmpty(locator.describe(), operation=operation) from failure
            raise
        return matched[0]


__all__ = [
    "RetryPolicy",
    "RetryEngine",
    "get_default_policy",
    "set_default_policy",
    "reset_default_policy",
    "resolve_policy",
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_POLL_INTERVAL_MS",
]
