from __future__ import annotations

import datetime as _dt
from collections.abc import Iterable

from taskdeck.models.task import FilterMode, SortMode, Task


def filter_tasks(tasks: Iterable[Task], mode: FilterMode) -> list[Task]:
    if mode == FilterMode.ACTIVE:
        return [t for t in tasks if not t.completed]
    if mode == FilterMode.COMPLETED:
        return [t for t in tasks if t.completed]
    return list(tasks)


def search_tasks(tasks: Iterable[Task], query: str) -> list[Task]:
    needle = query.strip().casefold()
    if not needle:
        return list(tasks)
    return [t for t in tasks if needle in t.title.casefold()]


def sort_tasks(tasks: Iterable[Task], mode: SortMode) -> list[Task]:
    # sorted() is stable, including with reverse=True
    if mode == SortMode.NEWEST:
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)
    if mode == SortMode.OLDEST:
        return sorted(tasks, key=lambda t: t.created_at)
    return sorted(tasks, key=lambda t: t.priority.rank, reverse=True)


def derive_view(
    tasks: Iterable[Task],
    filter_mode: FilterMode,
    query: str,
    sort_mode: SortMode,
) -> list[Task]:
    """Project the collection into what the list screen shows.

    Fixed order: completion filter, then title search, then sort. The input
    is never mutated.
    """
    filtered = filter_tasks(tasks, filter_mode)
    matched = search_tasks(filtered, query)
    return sort_tasks(matched, sort_mode)


def count_overdue(tasks: Iterable[Task], now: _dt.datetime) -> int:
    return sum(1 for t in tasks if t.is_overdue(now))


__all__ = [
    "count_overdue",
    "derive_view",
    "filter_tasks",
    "search_tasks",
    "sort_tasks",
]
