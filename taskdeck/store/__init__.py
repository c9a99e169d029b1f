from __future__ import annotations

from .search import DebouncedSearch
from .task_store import Listener, TaskStore
from .transfer import LoggingShareTarget, ShareTarget, dump_tasks, normalize_record, parse_records
from .view import count_overdue, derive_view

__all__ = [
    "DebouncedSearch",
    "Listener",
    "LoggingShareTarget",
    "ShareTarget",
    "TaskStore",
    "count_overdue",
    "derive_view",
    "dump_tasks",
    "normalize_record",
    "parse_records",
]
