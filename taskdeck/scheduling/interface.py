from __future__ import annotations

from collections.abc import Callable
from typing import Protocol


class ScheduledCall(Protocol):
    """Handle for one delayed callback."""

    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""

    def cancelled(self) -> bool:
        """True once cancel() has been called."""


class Scheduler(Protocol):
    """Minimal delayed-callback interface.

    Keep this tiny so the store can run on an asyncio loop in production and
    on a virtual clock in tests. Callbacks run on the scheduler's own thread
    of control, one at a time.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """Run callback once after `delay` seconds unless cancelled first."""


__all__ = ["ScheduledCall", "Scheduler"]
