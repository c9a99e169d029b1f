from __future__ import annotations

from collections.abc import Generator

import pytest

from taskdeck.config import StoreConfig
from taskdeck.observability import reset_metrics
from taskdeck.store import TaskStore
from tests.helpers.fakes import FakeScheduler, RecordingShareTarget, RecordingSink


@pytest.fixture(autouse=True)
def _fresh_metrics() -> None:
    reset_metrics()


@pytest.fixture()
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def share_target() -> RecordingShareTarget:
    return RecordingShareTarget()


@pytest.fixture()
def store(
    scheduler: FakeScheduler, sink: RecordingSink, share_target: RecordingShareTarget
) -> Generator[TaskStore, None, None]:
    """Empty store on a virtual clock; seeds are covered by the app factory tests."""
    s = TaskStore(
        scheduler=scheduler,
        config=StoreConfig(seed_demo_tasks=False),
        notice_sink=sink,
        share_target=share_target,
    )
    yield s
    s.dispose()
