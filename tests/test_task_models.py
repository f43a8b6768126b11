# tests/test_task_models.py

from __future__ import annotations

from datetime import UTC, date, datetime

from daylist.tasks.task_models import (
    Completed,
    Later,
    Task,
    TaskStatus,
    Today,
    schedule_fields,
    to_payload,
)


def _row(**overrides):
    row = {
        "id": "t1",
        "title": "Water plants",
        "description": None,
        "completed": False,
        "completed_at": None,
        "due_date": "2026-03-14",
        "status": "today",
        "user_id": "user-1",
        "created_at": "2026-03-14T08:00:00+00:00",
        "updated_at": "2026-03-14T08:00:00+00:00",
    }
    row.update(overrides)
    return row


def test_from_row_defaults_missing_relations_to_empty() -> None:
    task = Task.from_row(_row())

    assert task.subtasks == ()
    assert task.notes == ()
    assert task.due_date == date(2026, 3, 14)
    assert task.status is TaskStatus.TODAY


def test_from_row_maps_task_notes_relation() -> None:
    task = Task.from_row(
        _row(
            subtasks=[{"id": "s1", "task_id": "t1", "title": "step", "completed": True}],
            task_notes=[{"id": "n1", "task_id": "t1", "content": "remember"}],
        )
    )

    assert [s.title for s in task.subtasks] == ["step"]
    assert task.subtasks[0].completed is True
    assert [n.content for n in task.notes] == ["remember"]


def test_unknown_status_falls_back_to_today() -> None:
    task = Task.from_row(_row(status="someday"))

    assert task.status is TaskStatus.TODAY
    assert isinstance(task.schedule, Today)


def test_missing_due_date_uses_created_date() -> None:
    task = Task.from_row(_row(due_date=None, created_at="2026-02-02T23:00:00+00:00"))

    assert task.due_date == date(2026, 2, 2)


def test_missing_dates_fall_back_to_given_today() -> None:
    task = Task.from_row(_row(due_date=None, created_at=None), today=date(2026, 1, 5))

    assert task.due_date == date(2026, 1, 5)


def test_completion_flag_wins_over_status_column() -> None:
    at = "2026-03-14T10:00:00+00:00"
    task = Task.from_row(_row(completed=True, completed_at=at, status="later"))

    assert task.schedule == Completed(at=datetime(2026, 3, 14, 10, 0, tzinfo=UTC))


def test_later_schedule() -> None:
    assert isinstance(Task.from_row(_row(status="later")).schedule, Later)


def test_schedule_fields_keep_columns_consistent() -> None:
    at = datetime(2026, 3, 14, 10, 0, tzinfo=UTC)

    assert schedule_fields(Completed(at=at)) == {
        "completed": True,
        "completed_at": at,
        "status": TaskStatus.COMPLETED,
    }
    assert schedule_fields(Later()) == {"completed": False, "completed_at": None, "status": TaskStatus.LATER}
    assert schedule_fields(Today()) == {"completed": False, "completed_at": None, "status": TaskStatus.TODAY}


def test_to_payload_serializes_dates_and_enums() -> None:
    payload = to_payload(
        {
            "due_date": date(2026, 3, 15),
            "completed_at": datetime(2026, 3, 14, 10, 0, tzinfo=UTC),
            "status": TaskStatus.LATER,
            "title": "x",
        }
    )

    assert payload == {
        "due_date": "2026-03-15",
        "completed_at": "2026-03-14T10:00:00+00:00",
        "status": "later",
        "title": "x",
    }
