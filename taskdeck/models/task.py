from __future__ import annotations

import datetime as _dt
import time
import uuid
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    return int(time.time() * 1000)


def new_task_id() -> str:
    return str(uuid.uuid4())


def _clean_text(value: str) -> str:
    # lone surrogates cannot be encoded as UTF-8
    return value.encode("utf-8", "replace").decode("utf-8")


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK: dict[Priority, int] = {Priority.LOW: 0, Priority.MEDIUM: 1, Priority.HIGH: 2}


class FilterMode(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


class SortMode(StrEnum):
    NEWEST = "newest"
    OLDEST = "oldest"
    PRIORITY = "priority"


class Task(BaseModel):
    """A single to-do item held by the task store.

    - instances are immutable; the store swaps in updated copies
    - `created_at` is epoch milliseconds; `due_date` is always timezone-aware
    - Wire format uses camelCase keys (`dueDate`, `createdAt`)
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(default_factory=new_task_id, min_length=1)
    title: str
    completed: bool = False
    priority: Priority = Priority.LOW
    due_date: _dt.datetime | None = None
    created_at: int = Field(default_factory=now_ms, ge=0)
    description: str | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def _replace_lone_surrogates(cls, value: Any) -> Any:
        return _clean_text(value) if isinstance(value, str) else value

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        v = value.strip()
        if not v:
            raise ValueError("empty title")
        return v

    @field_validator("due_date")
    @classmethod
    def _due_date_aware(cls, value: _dt.datetime | None) -> _dt.datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=_dt.UTC)
        return value

    def is_overdue(self, now: _dt.datetime) -> bool:
        return self.due_date is not None and not self.completed and self.due_date < now


__all__ = [
    "FilterMode",
    "Priority",
    "SortMode",
    "Task",
    "new_task_id",
    "now_ms",
]
