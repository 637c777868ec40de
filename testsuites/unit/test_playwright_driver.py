"""
PlaywrightDriver against a stand-in page object.

The fake page records calls and raises the same Playwright error types a
real page raises, so error translation is checked without a browser.
"""

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from testsuites.ui_testing.framework.clock import MonotonicClock
from testsuites.ui_testing.framework.dom import Node
from testsuites.ui_testing.framework.driver import InputAction
from testsuites.ui_testing.framework.errors import DriverUnavailable, ResolutionEmpty, TargetDetached
from testsuites.ui_testing.framework.locator import by_role
from testsuites.ui_testing.framework.playwright_driver import (
    SNAPSHOT_JS,
    PlaywrightDriver,
    is_session_gone,
)


PAYLOAD = {
    "tag": "#document",
    "children": [{
        "tag": "html", "attrs": {}, "children": [{
            "tag": "body", "attrs": {}, "children": [
                {"tag": "button", "attrs": {}, "shown": True, "key": "t0k3n:4",
                 "children": [{"text": "Send"}]},
            ],
        }],
    }],
}


class FakeElement:
    def __init__(self, page, selector):
        self.page = page
        self.selector = selector

    async def dispose(self):
        self.page.disposed.append(self.selector)

    def __getattr__(self, name):
        async def call(*args, **kwargs):
            self.page.calls.append((name, self.selector, args, kwargs))
            if self.page.action_error is not None:
                raise self.page.action_error
        return call


class FakeHandle:
    """evaluate_handle result: the keyed element, or a null handle."""

    def __init__(self, page, element):
        self.page = page
        self.element = element

    def as_element(self):
        return self.element

    async def dispose(self):
        self.page.disposed.append("null")


class FakePage:
    def __init__(self):
        self.url = "about:blank"
        self.calls = []
        self.disposed = []
        # Snapshot keys whose element is still attached
        self.attached = set()
        self.closed = False
        self.action_error = None
        self.evaluate_error = None

    def is_closed(self):
        return self.closed

    async def goto(self, url, wait_until=None):
        self.calls.append(("goto", url, wait_until))
        self.url = url

    async def title(self):
        return "Nuxt Dashboard Template"

    async def evaluate(self, script):
        self.calls.append(("evaluate", script))
        if self.evaluate_error is not None:
            raise self.evaluate_error
        return PAYLOAD

    def locator(self, selector):
        return FakeElement(self, selector)

    async def evaluate_handle(self, script, key):
        self.calls.append(("evaluate_handle", key))
        if key in self.attached:
            return FakeHandle(self, FakeElement(self, f"key={key}"))
        return FakeHandle(self, None)

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_page():
    return FakePage()


@pytest.fixture
def pw_driver(fake_page):
    return PlaywrightDriver(fake_page, action_timeout_ms=1234, wait_until="load")


def _button() -> Node:
    return Node("button", ref="/html[1]/body[1]/button[1]")


def test_session_gone_markers():
    assert is_session_gone(PlaywrightError("Target closed"))
    assert is_session_gone(PlaywrightError("Target page, context or browser has been closed"))
    assert is_session_gone(PlaywrightError("Execution context was destroyed, most likely because of a navigation"))
    assert not is_session_gone(PlaywrightError("strict mode violation"))


def test_driver_uses_real_clock(pw_driver):
    assert isinstance(pw_driver.clock, MonotonicClock)


@pytest.mark.asyncio
async def test_navigate_and_title(pw_driver, fake_page):
    await pw_driver.navigate("https://dashboard-template.nuxt.dev/inbox")

    assert fake_page.calls == [("goto", "https://dashboard-template.nuxt.dev/inbox", "load")]
    assert pw_driver.url == "https://dashboard-template.nuxt.dev/inbox"
    assert await pw_driver.title() == "Nuxt Dashboard Template"


@pytest.mark.asyncio
async def test_snapshot_builds_tree_from_payload(pw_driver, fake_page):
    root = await pw_driver.snapshot()

    assert fake_page.calls == [("evaluate", SNAPSHOT_JS)]
    button = by_role("button", name="Send").evaluate(root)[0]
    assert button.ref == "/html[1]/body[1]/button[1]"
    assert button.key == "t0k3n:4"


@pytest.mark.asyncio
async def test_snapshot_of_closed_page_is_unavailable(pw_driver, fake_page):
    await pw_driver.close()

    with pytest.raises(DriverUnavailable):
        await pw_driver.snapshot()
    assert fake_page.calls == []


@pytest.mark.asyncio
async def test_snapshot_translates_session_errors(pw_driver, fake_page):
    fake_page.evaluate_error = PlaywrightError("Target closed")

    with pytest.raises(DriverUnavailable):
        await pw_driver.snapshot()


@pytest.mark.asyncio
async def test_snapshot_keeps_other_errors(pw_driver, fake_page):
    fake_page.evaluate_error = PlaywrightError("SyntaxError: Unexpected token")

    with pytest.raises(PlaywrightError):
        await pw_driver.snapshot()


@pytest.mark.asyncio
@pytest.mark.parametrize("action,payload,method,args", [
    (InputAction.CLICK, None, "click", ()),
    (InputAction.FILL, "alex", "fill", ("alex",)),
    (InputAction.CLEAR, None, "fill", ("",)),
    (InputAction.CHECK, None, "check", ()),
    (InputAction.UNCHECK, None, "uncheck", ()),
    (InputAction.PRESS, "Enter", "press", ("Enter",)),
    (InputAction.HOVER, None, "hover", ()),
    (InputAction.SCROLL_INTO_VIEW, None, "scroll_into_view_if_needed", ()),
])
async def test_dispatch_without_key_targets_node_by_xpath(pw_driver, fake_page, action, payload, method, args):
    await pw_driver.dispatch_input(action, _button(), payload)

    assert fake_page.calls == [
        (method, "xpath=/html[1]/body[1]/button[1]", args, {"timeout": 1234}),
    ]


@pytest.mark.asyncio
async def test_dispatch_timeout_means_element_detached(pw_driver, fake_page):
    fake_page.action_error = PlaywrightTimeoutError("Timeout 1234ms exceeded")

    with pytest.raises(ResolutionEmpty) as info:
        await pw_driver.dispatch_input(InputAction.CLICK, _button())

    assert "click" in info.value.operation


@pytest.mark.asyncio
async def test_dispatch_on_closed_browser_is_unavailable(pw_driver, fake_page):
    fake_page.action_error = PlaywrightError("Browser closed")

    with pytest.raises(DriverUnavailable):
        await pw_driver.dispatch_input(InputAction.FILL, _button(), "alex")


# =============================================================================
# Keyed dispatch
# =============================================================================

async def _snapshot_button(pw_driver) -> Node:
    return by_role("button", name="Send").evaluate(await pw_driver.snapshot())[0]


@pytest.mark.asyncio
async def test_dispatch_acts_on_element_behind_snapshot_key(pw_driver, fake_page):
    fake_page.attached.add("t0k3n:4")
    button = await _snapshot_button(pw_driver)

    await pw_driver.dispatch_input(InputAction.CHECK, button)

    assert fake_page.calls[1:] == [
        ("evaluate_handle", "t0k3n:4"),
        ("check", "key=t0k3n:4", (), {"timeout": 1234}),
    ]
    assert fake_page.disposed == ["key=t0k3n:4"]


@pytest.mark.asyncio
async def test_dispatch_after_rerender_never_reaches_the_new_occupant(pw_driver, fake_page):
    # Same position, different element: the keyed node is gone
    button = await _snapshot_button(pw_driver)

    with pytest.raises(TargetDetached) as info:
        await pw_driver.dispatch_input(InputAction.CLICK, button)

    assert isinstance(info.value, ResolutionEmpty)
    assert fake_page.calls[1:] == [("evaluate_handle", "t0k3n:4")]
    assert fake_page.disposed == ["null"]


@pytest.mark.asyncio
async def test_element_detached_mid_action(pw_driver, fake_page):
    fake_page.attached.add("t0k3n:4")
    fake_page.action_error = PlaywrightError("Element is not attached to the DOM")
    button = await _snapshot_button(pw_driver)

    with pytest.raises(TargetDetached):
        await pw_driver.dispatch_input(InputAction.FILL, button, "alex")

    assert fake_page.disposed == ["key=t0k3n:4"]
