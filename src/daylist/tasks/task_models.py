# src/daylist/tasks/task_models.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)

# Columns a caller may change through TaskSync.update / update_subtask.
TASK_MUTABLE_FIELDS = frozenset(
    {"title", "description", "completed", "completed_at", "due_date", "status"}
)
SUBTASK_MUTABLE_FIELDS = frozenset({"title", "completed"})

# Relation names as the row store embeds them.
TASK_SELECT = "*,subtasks(*),task_notes(*)"


class TaskStatus(StrEnum):
    """Scheduling bucket of a task."""

    TODAY = "today"
    LATER = "later"
    COMPLETED = "completed"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.TODAY
        try:
            return cls(raw)
        except ValueError:
            logger.warning("Unknown task status %r, treating as today", raw)
            return cls.TODAY


# ---- schedule variant ----


@dataclass(slots=True, frozen=True)
class Today:
    pass


@dataclass(slots=True, frozen=True)
class Later:
    pass


@dataclass(slots=True, frozen=True)
class Completed:
    at: datetime


Schedule = Today | Later | Completed


def schedule_fields(schedule: Schedule) -> dict[str, Any]:
    """
    Column values for a schedule.

    Always writes completed, completed_at and status together so a stored row
    can never be completed while sitting in today/later (or the reverse).
    """
    if isinstance(schedule, Completed):
        return {
            "completed": True,
            "completed_at": schedule.at,
            "status": TaskStatus.COMPLETED,
        }
    status = TaskStatus.LATER if isinstance(schedule, Later) else TaskStatus.TODAY
    return {"completed": False, "completed_at": None, "status": status}


# ---- row parsing ----


def parse_datetime(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError:
        logger.debug("Unparseable timestamp %r", raw)
        return None


def parse_date(raw: Any) -> date | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        # Tolerate timestamps where a plain date is expected.
        return date.fromisoformat(str(raw)[:10])
    except ValueError:
        logger.debug("Unparseable date %r", raw)
        return None


def to_payload(values: Mapping[str, Any]) -> dict[str, Any]:
    """JSON-ready copy of column values (dates/timestamps as ISO strings)."""
    out: dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, datetime | date):
            out[key] = value.isoformat()
        elif isinstance(value, StrEnum):
            out[key] = value.value
        else:
            out[key] = value
    return out


@dataclass(slots=True, frozen=True)
class Subtask:
    id: str
    task_id: str
    title: str
    completed: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Subtask:
        return cls(
            id=str(row["id"]),
            task_id=str(row["task_id"]),
            title=str(row.get("title") or ""),
            completed=bool(row.get("completed")),
            created_at=parse_datetime(row.get("created_at")),
            updated_at=parse_datetime(row.get("updated_at")),
        )


@dataclass(slots=True, frozen=True)
class TaskNote:
    id: str
    task_id: str
    content: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> TaskNote:
        return cls(
            id=str(row["id"]),
            task_id=str(row["task_id"]),
            content=str(row.get("content") or ""),
            created_at=parse_datetime(row.get("created_at")),
            updated_at=parse_datetime(row.get("updated_at")),
        )


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    title: str
    completed: bool
    due_date: date
    status: TaskStatus
    user_id: str
    description: str | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    subtasks: tuple[Subtask, ...] = field(default_factory=tuple)
    notes: tuple[TaskNote, ...] = field(default_factory=tuple)

    @property
    def schedule(self) -> Schedule:
        # The completion flag wins over a stale status column.
        if self.completed:
            at = self.completed_at or self.updated_at or self.created_at
            if at is None:
                at = datetime.combine(self.due_date, datetime.min.time())
            return Completed(at=at)
        if self.status == TaskStatus.LATER:
            return Later()
        return Today()

    @classmethod
    def from_row(cls, row: Mapping[str, Any], *, today: date | None = None) -> Task:
        """
        Build a Task from a store row.

        Nested relations that the row does not carry become empty tuples; the
        store names the notes relation "task_notes". A row without a due date
        falls back to its creation date, then to `today`.
        """
        due = parse_date(row.get("due_date"))
        if due is None:
            created = parse_datetime(row.get("created_at"))
            due = created.date() if created else (today or date.today())

        subtask_rows = row.get("subtasks") or []
        note_rows = row.get("task_notes")
        if note_rows is None:
            note_rows = row.get("notes") or []

        return cls(
            id=str(row["id"]),
            title=str(row.get("title") or ""),
            description=row.get("description"),
            completed=bool(row.get("completed")),
            due_date=due,
            completed_at=parse_datetime(row.get("completed_at")),
            created_at=parse_datetime(row.get("created_at")),
            updated_at=parse_datetime(row.get("updated_at")),
            user_id=str(row.get("user_id") or ""),
            status=TaskStatus.from_db(row.get("status")),
            subtasks=tuple(Subtask.from_row(r) for r in subtask_rows),
            notes=tuple(TaskNote.from_row(r) for r in note_rows),
        )
