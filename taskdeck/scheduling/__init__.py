from __future__ import annotations

from .interface import ScheduledCall, Scheduler
from .loop import LoopScheduler

__all__ = [
    "LoopScheduler",
    "ScheduledCall",
    "Scheduler",
]
