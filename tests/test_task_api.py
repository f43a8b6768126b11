# tests/test_task_api.py

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, date, datetime

from daylist.tasks.task_api import (
    format_task,
    group_tasks,
    is_overdue,
    normalize_new_task,
    normalize_note,
    subtask_progress,
)
from daylist.tasks.task_models import Subtask, Task, TaskNote, TaskStatus

TODAY = date(2026, 3, 14)


def _task(task_id: str, **kw) -> Task:
    base = Task(
        id=task_id,
        title=f"task {task_id}",
        completed=False,
        due_date=TODAY,
        status=TaskStatus.TODAY,
        user_id="user-1",
    )
    return replace(base, **kw)


def test_group_tasks_buckets_and_orders_completed() -> None:
    early = datetime(2026, 3, 13, 8, 0, tzinfo=UTC)
    late = datetime(2026, 3, 14, 8, 0, tzinfo=UTC)
    tasks = [
        _task("a"),
        _task("b", status=TaskStatus.LATER),
        _task("c", completed=True, completed_at=early, status=TaskStatus.COMPLETED),
        _task("d", completed=True, completed_at=late, status=TaskStatus.COMPLETED),
        _task("e"),
    ]

    groups = group_tasks(tasks)

    assert [t.id for t in groups.today] == ["a", "e"]
    assert [t.id for t in groups.later] == ["b"]
    assert [t.id for t in groups.completed] == ["d", "c"]


def test_completed_flag_decides_bucket_even_with_today_status() -> None:
    groups = group_tasks([_task("x", completed=True, status=TaskStatus.TODAY)])

    assert groups.today == []
    assert [t.id for t in groups.completed] == ["x"]


def test_open_task_with_completed_status_is_listed_under_today() -> None:
    groups = group_tasks([_task("x", completed=False, status=TaskStatus.COMPLETED)])

    assert [t.id for t in groups.today] == ["x"]
    assert groups.later == [] and groups.completed == []


def test_subtask_progress() -> None:
    task = _task(
        "a",
        subtasks=(
            Subtask(id="s1", task_id="a", title="one", completed=True),
            Subtask(id="s2", task_id="a", title="two", completed=False),
        ),
    )

    assert subtask_progress(task) == (1, 2)
    assert subtask_progress(_task("b")) == (0, 0)


def test_is_overdue_ignores_completed() -> None:
    past = date(2026, 3, 10)

    assert is_overdue(_task("a", due_date=past), TODAY)
    assert not is_overdue(_task("b", due_date=past, completed=True), TODAY)
    assert not is_overdue(_task("c"), TODAY)


def test_normalize_new_task() -> None:
    assert normalize_new_task("  Buy milk ", "  ") == ("Buy milk", None)
    assert normalize_new_task("Buy milk", " 2 litres ") == ("Buy milk", "2 litres")
    assert normalize_new_task("   ") is None


def test_normalize_note() -> None:
    assert normalize_note("  hi ") == "hi"
    assert normalize_note("   ") is None


def test_format_task_open_with_children() -> None:
    task = _task(
        "a",
        title="Plan trip",
        due_date=date(2026, 3, 15),
        subtasks=(
            Subtask(id="s1", task_id="a", title="book", completed=True),
            Subtask(id="s2", task_id="a", title="pack", completed=False),
        ),
        notes=(TaskNote(id="n1", task_id="a", content="passport"),),
    )

    assert format_task(task, TODAY) == "[ ] Plan trip | due tomorrow | 1/2 subtasks | 1 note"


def test_format_task_overdue() -> None:
    task = _task("a", title="Taxes", due_date=date(2026, 3, 1))

    assert format_task(task, TODAY) == "[ ] Taxes | OVERDUE 2026-03-01"
