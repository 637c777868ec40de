"""
Browser-driver surface consumed by the framework.

A driver navigates, reports the current rendered tree and dispatches input
to a node identified by its ``ref``. Writes are fire-and-forget: their effect
is observed only through later snapshots.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol

from .clock import Clock
from .dom import Node


class InputAction(str, Enum):
    """Input events a driver can dispatch to a node."""
    CLICK = "click"
    FILL = "fill"
    CLEAR = "clear"
    CHECK = "check"
    UNCHECK = "uncheck"
    PRESS = "press"
    HOVER = "hover"
    SCROLL_INTO_VIEW = "scroll_into_view"


class Driver(Protocol):
    """What a browser session must provide."""

    clock: Clock

    @property
    def url(self) -> str:
        ...

    async def navigate(self, url: str) -> None:
        ...

    async def title(self) -> str:
        ...

    async def wait_for_load_state(self, state: str = "networkidle", timeout_ms: int = 15000) -> None:
        ...

    async def snapshot(self) -> Node:
        """Return an annotated tree of the current render state."""
        ...

    async def dispatch_input(
        self,
        action: InputAction,
        target: Node,
        payload: Optional[str] = None,
    ) -> None:
        """
        Deliver one input to the live element ``target`` was read from.

        Raises TargetDetached when that element is no longer on the page,
        rather than acting on whatever now occupies its position.
        """
        ...

    async def close(self) -> None:
        ...


__all__ = [
    "Driver",
    "InputAction",
]
