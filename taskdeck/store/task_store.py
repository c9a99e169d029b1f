from __future__ import annotations

import datetime as _dt
import time
from collections.abc import Callable, Iterable
from typing import Any

import pydantic

from taskdeck.config import StoreConfig
from taskdeck.errors import (
    ExportError,
    NotFoundError,
    ParseError,
    StoreDisposedError,
    TaskStoreError,
    ValidationError,
)
from taskdeck.models.task import FilterMode, Priority, SortMode, Task, new_task_id
from taskdeck.notices import Notice, NoticeLevel, NoticeSink, discard_notice
from taskdeck.observability import get_json_logger, get_metrics
from taskdeck.scheduling import ScheduledCall, Scheduler

from .search import DebouncedSearch
from .transfer import LoggingShareTarget, ShareTarget, dump_tasks, normalize_records, parse_records
from .view import count_overdue, derive_view

Listener = Callable[[], None]

_ViewKey = tuple[int, FilterMode, str, SortMode]


class TaskStore:
    """In-memory task collection with a derived view, debounced search and undo.

    - `tasks` is ordered head-first: new and imported tasks are prepended
    - one deleted task is kept for `undo_delete`; the next deletion replaces it
    - the derived view is filter -> search -> sort over `tasks`, memoized
      until the collection or one of its inputs changes
    - all operations are synchronous; timers (search debounce, simulated
      refresh/sync) go through the injected Scheduler and are cancelled by
      `dispose`
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        config: StoreConfig | None = None,
        tasks: Iterable[Task] | None = None,
        notice_sink: NoticeSink | None = None,
        share_target: ShareTarget | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or StoreConfig()
        self._scheduler = scheduler
        self._notice_sink = notice_sink or discard_notice
        self._share_target = share_target or LoggingShareTarget()
        self._clock = clock
        self._logger = get_json_logger("taskdeck.store")
        self._metrics = get_metrics()

        self._tasks: list[Task] = []
        self._last_deleted: Task | None = None
        self._filter_mode = FilterMode.ALL
        self._sort_mode = SortMode.NEWEST
        self._debounced_query = ""
        self._pending_actions: dict[str, ScheduledCall] = {}
        self._listeners: list[Listener] = []
        self._version = 0
        self._view_cache: tuple[_ViewKey, tuple[Task, ...]] | None = None
        self._last_created_ms = 0
        self._disposed = False

        self._search = DebouncedSearch(
            scheduler,
            self._commit_search,
            delay=self._config.search_debounce_s,
        )

        for task in tasks or ():
            if any(t.id == task.id for t in self._tasks):
                raise ValidationError(f"duplicate task id {task.id!r}")
            self._tasks.append(task)
        if self._tasks:
            self._last_created_ms = max(t.created_at for t in self._tasks)
        self._logger.info(
            "TaskStore ready", extra={"event": "store_ready", "count": len(self._tasks)}
        )

    # ----------------------------
    # Read side
    # ----------------------------
    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def total_count(self) -> int:
        return len(self._tasks)

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self._tasks if t.completed)

    @property
    def active_count(self) -> int:
        return sum(1 for t in self._tasks if not t.completed)

    @property
    def last_deleted(self) -> Task | None:
        return self._last_deleted

    @property
    def has_undo(self) -> bool:
        return self._last_deleted is not None

    @property
    def filter_mode(self) -> FilterMode:
        return self._filter_mode

    @property
    def sort_mode(self) -> SortMode:
        return self._sort_mode

    @property
    def search_input(self) -> str:
        return self._search.raw

    @property
    def debounced_search_query(self) -> str:
        return self._debounced_query

    @property
    def pending_actions(self) -> frozenset[str]:
        return frozenset(self._pending_actions)

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def derived_view(self) -> tuple[Task, ...]:
        key: _ViewKey = (self._version, self._filter_mode, self._debounced_query, self._sort_mode)
        if self._view_cache is not None and self._view_cache[0] == key:
            return self._view_cache[1]
        view = tuple(
            derive_view(self._tasks, self._filter_mode, self._debounced_query, self._sort_mode)
        )
        self._view_cache = (key, view)
        return view

    @property
    def derived_count(self) -> int:
        return len(self.derived_view)

    @property
    def overdue_count(self) -> int:
        return count_overdue(self._tasks, self._now())

    def get_task(self, task_id: str) -> Task | None:
        index = self._index_of(task_id)
        return self._tasks[index] if index is not None else None

    def require_task(self, task_id: str) -> Task:
        task = self.get_task(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    # ----------------------------
    # Mutations
    # ----------------------------
    def add_task(
        self,
        title: str,
        *,
        priority: Priority | str | None = None,
        due_date: _dt.datetime | str | None = None,
        description: str | None = None,
    ) -> Task:
        self._ensure_open("add_task")
        self._count("add_task")
        if not isinstance(title, str) or not title.strip():
            raise self._reject(
                "add_task", ValidationError("empty title"), "Task title cannot be empty"
            )
        fields: dict[str, Any] = {"id": self._new_id(), "title": title}
        if priority is not None:
            fields["priority"] = priority
        if due_date is not None:
            fields["due_date"] = due_date
        if description is not None:
            fields["description"] = description
        try:
            task = Task.model_validate(fields)
        except pydantic.ValidationError as e:
            raise self._reject(
                "add_task", ValidationError(_first_error(e)), "Task could not be added"
            ) from e
        # stamped after validation; rejected input must not advance created_at
        task = task.model_copy(update={"created_at": self._next_created_ms()})
        self._tasks.insert(0, task)
        self._logger.info("task added", extra={"event": "task_added", "task_id": task.id})
        self._touch()
        self._notify("Task added")
        return task

    def delete_task(self, task_id: str) -> Task | None:
        """Remove a task and park a copy in the undo slot.

        Unknown ids are a no-op returning None, so stale references from the
        UI never fail.
        """
        self._ensure_open("delete_task")
        self._count("delete_task")
        index = self._index_of(task_id)
        if index is None:
            self._logger.info(
                "delete of unknown task", extra={"event": "task_missing", "task_id": task_id}
            )
            self._notify("Task not found", level="warning")
            return None
        task = self._tasks.pop(index)
        self._last_deleted = task.model_copy()
        self._logger.info("task deleted", extra={"event": "task_deleted", "task_id": task.id})
        self._touch()
        self._notify("Task deleted. Undo?", undo_available=True)
        return task

    def undo_delete(self) -> Task | None:
        self._ensure_open("undo_delete")
        self._count("undo_delete")
        task = self._last_deleted
        if task is None:
            self._notify("Nothing to undo")
            return None
        if self._index_of(task.id) is not None:
            task = task.model_copy(update={"id": self._new_id()})
        self._last_deleted = None
        self._tasks.insert(0, task)
        self._logger.info("task restored", extra={"event": "task_restored", "task_id": task.id})
        self._touch()
        self._notify("Task restored")
        return task

    def toggle_complete(self, task_id: str) -> Task | None:
        self._ensure_open("toggle_complete")
        self._count("toggle_complete")
        index = self._index_of(task_id)
        if index is None:
            return None
        current = self._tasks[index]
        task = current.model_copy(update={"completed": not current.completed})
        self._tasks[index] = task
        self._logger.debug(
            "task toggled",
            extra={
                "event": "task_toggled",
                "task_id": task.id,
                "attributes": {"completed": task.completed},
            },
        )
        self._touch()
        return task

    def set_filter_mode(self, mode: FilterMode | str) -> FilterMode:
        self._ensure_open("set_filter_mode")
        try:
            value = FilterMode(mode)
        except ValueError as e:
            err = ValidationError(f"unknown filter mode {mode!r}")
            raise self._reject("set_filter_mode", err, None) from e
        if value != self._filter_mode:
            self._filter_mode = value
            self._emit_change()
        return value

    def set_sort_mode(self, mode: SortMode | str) -> SortMode:
        self._ensure_open("set_sort_mode")
        try:
            value = SortMode(mode)
        except ValueError as e:
            err = ValidationError(f"unknown sort mode {mode!r}")
            raise self._reject("set_sort_mode", err, None) from e
        if value != self._sort_mode:
            self._sort_mode = value
            self._emit_change()
        return value

    def set_search_input(self, text: str) -> None:
        self._ensure_open("set_search_input")
        self._search.set_input(text)
        self._emit_change()

    def flush_search(self) -> None:
        self._ensure_open("flush_search")
        self._search.flush()

    # ----------------------------
    # Import / export
    # ----------------------------
    def export_tasks(self) -> str:
        self._count("export_tasks")
        payload = dump_tasks(self._tasks, indent=self._config.export_indent or None)
        try:
            self._share_target.share(payload)
        except Exception as e:  # noqa: BLE001
            err = ExportError(str(e) or type(e).__name__)
            raise self._reject("export_tasks", err, "Export failed") from e
        self._logger.info(
            "tasks exported", extra={"event": "tasks_exported", "count": len(self._tasks)}
        )
        self._notify("Tasks exported")
        return payload

    def import_tasks(self, raw_text: str) -> int:
        self._ensure_open("import_tasks")
        self._count("import_tasks")
        try:
            records = parse_records(raw_text)
        except ParseError as e:
            raise self._reject("import_tasks", e, "Import failed: invalid task data")
        taken = {t.id for t in self._tasks}
        if self._last_deleted is not None:
            taken.add(self._last_deleted.id)
        imported = normalize_records(records, taken_ids=taken, now_ms=self._now_ms())
        if imported:
            self._tasks[0:0] = imported
            self._touch()
        n = len(imported)
        self._logger.info("tasks imported", extra={"event": "tasks_imported", "count": n})
        self._notify(f"{n} task imported" if n == 1 else f"{n} tasks imported")
        return n

    # ----------------------------
    # Simulated-delay actions
    # ----------------------------
    def refresh(self) -> bool:
        return self._start_action("refresh", self._config.refresh_delay_s, "Tasks refreshed")

    def sync(self) -> bool:
        return self._start_action("sync", self._config.sync_delay_s, "Sync complete")

    def _start_action(self, name: str, delay: float, done_message: str) -> bool:
        self._ensure_open(name)
        if name in self._pending_actions:
            return False
        self._count(name)
        self._pending_actions[name] = self._scheduler.call_later(
            delay, lambda: self._finish_action(name, done_message)
        )
        self._emit_change()
        return True

    def _finish_action(self, name: str, done_message: str) -> None:
        if self._disposed or self._pending_actions.pop(name, None) is None:
            return
        self._logger.info("action finished", extra={"event": "action_finished", "op": name})
        self._emit_change()
        self._notify(done_message)

    # ----------------------------
    # Listeners / lifecycle
    # ----------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def dispose(self) -> None:
        if self._disposed:
            return
        self._search.dispose()
        for handle in self._pending_actions.values():
            handle.cancel()
        self._pending_actions.clear()
        self._listeners.clear()
        self._disposed = True
        self._logger.info("TaskStore disposed", extra={"event": "store_disposed"})

    # ----------------------------
    # Internals
    # ----------------------------
    def _commit_search(self, query: str) -> None:
        if self._disposed or query == self._debounced_query:
            return
        self._debounced_query = query
        self._emit_change()

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _new_id(self) -> str:
        taken = {t.id for t in self._tasks}
        tid = new_task_id()
        while tid in taken:
            tid = new_task_id()
        return tid

    def _now(self) -> _dt.datetime:
        return _dt.datetime.fromtimestamp(self._clock(), _dt.UTC)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _next_created_ms(self) -> int:
        # Never go backwards even if the wall clock does
        self._last_created_ms = max(self._now_ms(), self._last_created_ms)
        return self._last_created_ms

    def _touch(self) -> None:
        self._version += 1
        self._emit_change()

    def _emit_change(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:  # noqa: BLE001
                self._logger.exception("listener failed", extra={"event": "listener_error"})

    def _notify(
        self, message: str, *, level: NoticeLevel = "info", undo_available: bool = False
    ) -> None:
        notice = Notice(message=message, level=level, undo_available=undo_available)
        try:
            self._notice_sink(notice)
        except Exception:  # noqa: BLE001
            self._logger.exception("notice sink failed", extra={"event": "notice_error"})

    def _ensure_open(self, op: str) -> None:
        if self._disposed:
            err = StoreDisposedError(f"{op} called on a disposed store")
            raise self._reject(op, err, None)

    def _count(self, op: str) -> None:
        self._metrics.increment("store_ops", {"op": op})

    def _reject(self, op: str, err: TaskStoreError, message: str | None) -> TaskStoreError:
        self._metrics.increment("store_errors", {"op": op})
        self._logger.warning(
            "operation rejected",
            extra={"event": "op_rejected", "op": op, "attributes": {"error": str(err)[:200]}},
        )
        if message is not None:
            self._notify(message, level="error")
        return err


def _first_error(e: pydantic.ValidationError) -> str:
    errors = e.errors()
    if not errors:
        return str(e)
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()))
    return f"{loc}: {first.get('msg', 'invalid value')}" if loc else str(first.get("msg", e))


__all__ = ["Listener", "TaskStore"]
