from __future__ import annotations

import datetime as _dt
import json
import math
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

import pydantic
from pydantic import TypeAdapter

from taskdeck.errors import ParseError
from taskdeck.models.task import Priority, Task, new_task_id
from taskdeck.observability import get_json_logger

UNTITLED = "Untitled"

_DATETIME = TypeAdapter(_dt.datetime)


class ShareTarget(Protocol):
    """Outbound collaborator that receives exported text (share sheet, clipboard...)."""

    def share(self, text: str) -> None:
        """Hand the text over. Raise on failure."""


class LoggingShareTarget:
    """Default share target: records the export in the log and nothing else."""

    def share(self, text: str) -> None:
        get_json_logger("taskdeck.transfer").info(
            "export shared",
            extra={"event": "export_shared", "attributes": {"bytes": len(text.encode("utf-8"))}},
        )


def dump_tasks(tasks: Iterable[Task], *, indent: int | None = 2) -> str:
    data = [t.model_dump(mode="json", by_alias=True) for t in tasks]
    return json.dumps(data, indent=indent, ensure_ascii=False)


def parse_records(raw_text: str) -> list[Any]:
    """Decode an import payload into its raw records.

    Raises ParseError unless the text is a JSON array. Individual records are
    not inspected here.
    """
    if not isinstance(raw_text, str | bytes | bytearray):
        raise ParseError("import payload must be text")
    try:
        data = json.loads(raw_text)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        raise ParseError(f"invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise ParseError("import payload must be a JSON array")
    return data


def _pick(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    return None


def _coerce_id(value: Any, taken: set[str]) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if isinstance(value, str):
        v = value.strip()
        if v and v not in taken:
            return v
    tid = new_task_id()
    while tid in taken:
        tid = new_task_id()
    return tid


def _coerce_title(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return UNTITLED


def _coerce_priority(value: Any) -> Priority:
    if isinstance(value, str):
        try:
            return Priority(value.strip().lower())
        except ValueError:
            return Priority.LOW
    return Priority.LOW


def _coerce_created_at(value: Any, now_ms: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return now_ms
    if not math.isfinite(value) or value < 0:
        return now_ms
    return int(value)


def _coerce_due_date(value: Any) -> _dt.datetime | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return _DATETIME.validate_python(value)
    except pydantic.ValidationError:
        return None


def normalize_record(record: Any, *, taken_ids: set[str], now_ms: int) -> Task:
    """Build a Task from one import record, substituting defaults for bad fields.

    Never raises. Non-object records count as empty objects. The chosen id is
    added to `taken_ids`.
    """
    if not isinstance(record, Mapping):
        record = {}
    description = _pick(record, "description")
    task = Task(
        id=_coerce_id(_pick(record, "id"), taken_ids),
        title=_coerce_title(_pick(record, "title")),
        completed=_pick(record, "completed") is True,
        priority=_coerce_priority(_pick(record, "priority")),
        due_date=_coerce_due_date(_pick(record, "dueDate", "due_date")),
        created_at=_coerce_created_at(_pick(record, "createdAt", "created_at"), now_ms),
        description=description if isinstance(description, str) else None,
    )
    taken_ids.add(task.id)
    return task


def normalize_records(records: Iterable[Any], *, taken_ids: set[str], now_ms: int) -> list[Task]:
    return [normalize_record(r, taken_ids=taken_ids, now_ms=now_ms) for r in records]


__all__ = [
    "UNTITLED",
    "LoggingShareTarget",
    "ShareTarget",
    "dump_tasks",
    "normalize_record",
    "normalize_records",
    "parse_records",
]
