"""
Fixtures for the framework unit tests.

Everything runs on a VirtualClock through InMemoryDriver, so timing
assertions are exact.
"""

from typing import Awaitable, Callable

import pytest

from testsuites.ui_testing.framework.clock import VirtualClock
from testsuites.ui_testing.framework.memory_driver import InMemoryDriver
from testsuites.ui_testing.framework.retry_engine import RetryEngine, RetryPolicy
from testsuites.ui_testing.framework.session import Session
from testsuites.ui_testing.framework.snapshot import SnapshotAccessor

BASE_URL = "http://dashboard.local"


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def driver(clock: VirtualClock) -> InMemoryDriver:
    return InMemoryDriver(base_url=BASE_URL, clock=clock)


@pytest.fixture
def engine(driver: InMemoryDriver, clock: VirtualClock) -> RetryEngine:
    return RetryEngine(SnapshotAccessor(driver), clock)


@pytest.fixture
def session(driver: InMemoryDriver) -> Session:
    return Session(driver, base_url=BASE_URL, policy=RetryPolicy(timeout_ms=1000, poll_interval_ms=50))


@pytest.fixture
def load(driver: InMemoryDriver) -> Callable[[str], Awaitable[None]]:
    """Serve ``markup`` at ``/`` and navigate there."""

    async def _load(markup: str, path: str = "/") -> None:
        driver.routes[path] = markup
        await driver.navigate(path)

    return _load
