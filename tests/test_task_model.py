from __future__ import annotations

import datetime as dt

import pydantic
import pytest

from taskdeck.models.task import Priority, Task


def test_task_defaults() -> None:
    t = Task(title="  Write tests  ")

    assert t.id
    assert t.title == "Write tests"
    assert t.completed is False
    assert t.priority is Priority.LOW
    assert t.due_date is None
    assert t.description is None
    assert isinstance(t.created_at, int) and t.created_at > 0


@pytest.mark.parametrize("title", ["", "   ", "\t\n"])
def test_blank_title_rejected(title: str) -> None:
    with pytest.raises(pydantic.ValidationError):
        Task(title=title)


def test_task_fields_are_immutable() -> None:
    t = Task(title="x")
    with pytest.raises(pydantic.ValidationError):
        t.completed = True
    with pytest.raises(pydantic.ValidationError):
        t.id = "other"
    with pytest.raises(pydantic.ValidationError):
        t.created_at = 1


def test_lone_surrogates_are_replaced() -> None:
    t = Task(title="a\ud800b", description="x\udfffy")

    assert t.title == "a?b"
    assert t.description == "x?y"
    t.model_dump_json().encode("utf-8")


def test_naive_due_date_is_treated_as_utc() -> None:
    t = Task(title="x", due_date=dt.datetime(2030, 1, 1, 12, 0))
    assert t.due_date is not None
    assert t.due_date.tzinfo is not None
    assert t.due_date.utcoffset() == dt.timedelta(0)


def test_wire_format_uses_camel_case_aliases() -> None:
    t = Task.model_validate({"title": "x", "dueDate": "2030-01-01T00:00:00Z", "createdAt": 5})
    data = t.model_dump(mode="json", by_alias=True)

    assert data["createdAt"] == 5
    assert data["dueDate"].startswith("2030-01-01T00:00:00")
    assert "created_at" not in data


def test_is_overdue() -> None:
    now = dt.datetime.now(dt.UTC)
    past = now - dt.timedelta(hours=1)

    assert Task(title="x", due_date=past).is_overdue(now) is True
    assert Task(title="x", due_date=past, completed=True).is_overdue(now) is False
    assert Task(title="x", due_date=now + dt.timedelta(hours=1)).is_overdue(now) is False
    assert Task(title="x").is_overdue(now) is False


def test_priority_rank_orders_levels() -> None:
    assert Priority.HIGH.rank > Priority.MEDIUM.rank > Priority.LOW.rank
