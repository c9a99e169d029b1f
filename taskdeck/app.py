from __future__ import annotations

import time
from collections.abc import Callable

from taskdeck.config import StoreConfig, load_config
from taskdeck.models.task import Priority, Task
from taskdeck.notices import NoticeSink
from taskdeck.scheduling import LoopScheduler, Scheduler
from taskdeck.store import ShareTarget, TaskStore


def demo_tasks(now_ms: int) -> list[Task]:
    """The two tasks a fresh session starts with, most recent first."""
    return [
        Task(title="Finish project report", priority=Priority.HIGH, created_at=now_ms),
        Task(title="Buy groceries", priority=Priority.MEDIUM, created_at=max(0, now_ms - 1)),
    ]


def create_store(
    config: StoreConfig | None = None,
    *,
    scheduler: Scheduler | None = None,
    notice_sink: NoticeSink | None = None,
    share_target: ShareTarget | None = None,
    clock: Callable[[], float] = time.time,
) -> TaskStore:
    """Build the session's store.

    The presentation layer holds the returned instance and passes it down;
    there is no module-level store.
    """
    cfg = config or load_config()
    seeds = demo_tasks(int(clock() * 1000)) if cfg.seed_demo_tasks else []
    return TaskStore(
        scheduler=scheduler or LoopScheduler(),
        config=cfg,
        tasks=seeds,
        notice_sink=notice_sink,
        share_target=share_target,
        clock=clock,
    )


__all__ = ["create_store", "demo_tasks"]
