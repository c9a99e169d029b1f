from __future__ import annotations

import asyncio
from collections.abc import Callable

from .interface import ScheduledCall


class LoopScheduler:
    """Scheduler backed by an asyncio event loop (`loop.call_later`).

    When no loop is given, the running loop is looked up on each call, so the
    scheduler must then be used from inside that loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        return self._get_loop().call_later(max(0.0, delay), callback)


__all__ = ["LoopScheduler"]
