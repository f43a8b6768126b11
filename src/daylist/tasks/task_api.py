# src/daylist/tasks/task_api.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from .task_models import Completed, Later, Task


@dataclass(slots=True, frozen=True)
class TaskGroups:
    today: list[Task]
    later: list[Task]
    completed: list[Task]


def _completed_sort_key(task: Task) -> float:
    if task.completed_at is None:
        return float("-inf")
    return task.completed_at.timestamp()


def group_tasks(tasks: Iterable[Task]) -> TaskGroups:
    """
    Split tasks into the three buckets the UI shows, by `Task.schedule`.
    An open task whose status column says "completed" lands in today.

    Open tasks keep their incoming order (newest first from fetch); completed
    tasks are ordered by completion time, most recent first.
    """
    today: list[Task] = []
    later: list[Task] = []
    completed: list[Task] = []
    for task in tasks:
        schedule = task.schedule
        if isinstance(schedule, Completed):
            completed.append(task)
        elif isinstance(schedule, Later):
            later.append(task)
        else:
            today.append(task)
    completed.sort(key=_completed_sort_key, reverse=True)
    return TaskGroups(today=today, later=later, completed=completed)


def subtask_progress(task: Task) -> tuple[int, int]:
    """(completed, total) subtasks."""
    return sum(1 for s in task.subtasks if s.completed), len(task.subtasks)


def note_count(task: Task) -> int:
    return len(task.notes)


def is_due_today(task: Task, today: date) -> bool:
    return task.due_date == today


def is_overdue(task: Task, today: date) -> bool:
    return not task.completed and task.due_date < today


def normalize_new_task(title: str, description: str | None = None) -> tuple[str, str | None] | None:
    """Trim add-task form input. Returns None when the title is blank."""
    clean_title = (title or "").strip()
    if not clean_title:
        return None
    clean_desc = (description or "").strip() or None
    return clean_title, clean_desc


def normalize_note(content: str) -> str | None:
    clean = (content or "").strip()
    return clean or None


def _fmt_day(d: date, today: date) -> str:
    if d == today:
        return "today"
    if (d - today).days == 1:
        return "tomorrow"
    return d.isoformat()


def format_task(task: Task, today: date) -> str:
    """One-line rendering used by the console front end."""
    mark = "x" if task.completed else " "
    parts = [f"[{mark}] {task.title}"]

    if task.completed and task.completed_at is not None:
        parts.append(f"done {task.completed_at.astimezone().strftime('%Y-%m-%d')}")
    else:
        due = _fmt_day(task.due_date, today)
        parts.append(f"OVERDUE {due}" if is_overdue(task, today) else f"due {due}")

    done, total = subtask_progress(task)
    if total:
        parts.append(f"{done}/{total} subtasks")
    n = note_count(task)
    if n:
        parts.append(f"{n} note{'s' if n != 1 else ''}")

    return " | ".join(parts)
