# src/daylist/tasks/task_sync.py

from __future__ import annotations

"""
Task synchronization core.

Holds the signed-in user's task list (with nested subtasks and notes) in
memory and keeps it consistent with the row store:
- every operation issues one store request,
- local state is merged from the exact row the store returned,
- on failure local state is left untouched and a failed SyncResult is returned.

Nothing here notifies the user; see task_board.py for that.

Ordering: each request takes a ticket from a monotonic counter. A response is
applied only if no newer response for the same entity was applied already, so
the most recently issued mutation wins regardless of arrival order.
"""

import itertools
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Any, Generic, Literal, TypeVar

from ..core.ports import RowStore, SessionProvider
from ..errors import DaylistError, NotSignedInError
from .task_models import (
    SUBTASK_MUTABLE_FIELDS,
    TASK_MUTABLE_FIELDS,
    TASK_SELECT,
    Completed,
    Later,
    Subtask,
    Task,
    TaskNote,
    Today,
    schedule_fields,
    to_payload,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

ChildKind = Literal["subtasks", "notes"]
EntityKey = tuple[str, str]

_CHILD_TABLES: dict[ChildKind, str] = {"subtasks": "subtasks", "notes": "task_notes"}


@dataclass(slots=True, frozen=True)
class SyncResult(Generic[T]):
    """
    Outcome of one TaskSync operation.

    `applied` is False when the store accepted the request but a newer
    response for the same entity had already been merged locally.
    """

    action: str
    value: T | None = None
    error: str | None = None
    applied: bool = True

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, action: str, value: T | None = None, *, applied: bool = True) -> SyncResult[T]:
        return cls(action=action, value=value, applied=applied)

    @classmethod
    def failure(cls, action: str, error: str) -> SyncResult[T]:
        return cls(action=action, error=error, applied=False)


def _local_now() -> datetime:
    return datetime.now().astimezone()


class TaskSync:
    def __init__(
        self,
        store: RowStore,
        session: SessionProvider,
        *,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self._store = store
        self._session = session
        self._clock = clock

        self._tasks: list[Task] = []
        self.loading = True

        # child id -> owning task id
        self._owners: dict[ChildKind, dict[str, str]] = {"subtasks": {}, "notes": {}}

        self._tickets = itertools.count(1)
        self._applied: dict[EntityKey, int] = {}
        # task id -> newest ticket of a subtask/note mutation applied to it
        self._child_applied: dict[str, int] = {}
        self._fetch_applied = 0

    # ---- read side ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def get_task(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def owner_of(self, kind: ChildKind, child_id: str) -> str | None:
        return self._owners[kind].get(child_id)

    def today(self) -> date:
        return self._clock().date()

    def clear(self) -> None:
        """Forget everything (used on sign-out)."""
        self._tasks = []
        self._owners = {"subtasks": {}, "notes": {}}
        self._applied.clear()
        self._child_applied.clear()
        self._fetch_applied = next(self._tickets)
        self.loading = True

    # ---- tasks ----

    async def fetch(self, due_date: date | None = None) -> SyncResult[list[Task]]:
        """Reload every task of the current user, optionally only those due on `due_date`."""
        action = "fetch tasks"
        user = self._session.user
        if user is None:
            return self._fail(action, NotSignedInError())

        filters: dict[str, Any] = {"user_id": user.id}
        if due_date is not None:
            filters["due_date"] = due_date.isoformat()

        ticket = next(self._tickets)
        try:
            rows = await self._store.select(
                "tasks",
                columns=TASK_SELECT,
                filters=filters,
                order="created_at",
                descending=True,
            )
            fetched = [Task.from_row(r, today=self.today()) for r in rows]
        except Exception as e:
            return self._fail(action, e)
        finally:
            self.loading = False

        if ticket < self._fetch_applied:
            logger.info("Dropping stale fetch result ticket=%s", ticket)
            return SyncResult.success(action, fetched, applied=False)
        self._fetch_applied = ticket

        fetched_ids = {t.id for t in fetched}
        merged: list[Task] = [
            t for t in self._tasks if t.id not in fetched_ids and self._changed_since(t.id, ticket)
        ]
        for task in fetched:
            if not self._changed_since(task.id, ticket):
                merged.append(task)
                continue
            local = self.get_task(task.id)
            if local is not None:
                merged.append(local)

        self._tasks = merged
        self._rebuild_index()
        logger.debug("Fetched %d tasks (kept %d)", len(fetched), len(merged))
        return SyncResult.success(action, list(merged))

    async def create(
        self,
        title: str,
        description: str | None = None,
        due_date: date | None = None,
    ) -> SyncResult[Task]:
        action = "create task"
        user = self._session.user
        if user is None:
            return self._fail(action, NotSignedInError())
        if not title or not title.strip():
            return self._fail(action, ValueError("title is required"))

        values = {
            "title": title,
            "description": description,
            "due_date": due_date or self.today(),
            "user_id": user.id,
        }
        ticket = next(self._tickets)
        try:
            row = await self._store.insert("tasks", to_payload(values), columns=TASK_SELECT)
            task = Task.from_row(row, today=self.today())
        except Exception as e:
            return self._fail(action, e)

        self._applied[("task", task.id)] = ticket
        self._tasks.insert(0, task)
        self._index_task(task)
        logger.info("Task created id=%s due=%s", task.id, task.due_date)
        return SyncResult.success(action, task)

    async def update(self, task_id: str, fields: Mapping[str, Any]) -> SyncResult[Task]:
        """Single write path for tasks: every higher-level task mutation ends here."""
        action = "update task"
        unknown = set(fields) - TASK_MUTABLE_FIELDS
        if unknown:
            return self._fail(action, ValueError(f"unknown task fields: {sorted(unknown)}"))
        if not fields:
            return self._fail(action, ValueError("nothing to update"))

        ticket = next(self._tickets)
        try:
            row = await self._store.update("tasks", task_id, to_payload(fields), columns=TASK_SELECT)
            task = Task.from_row(row, today=self.today())
        except Exception as e:
            return self._fail(action, e)

        key = ("task", task.id)
        if self._newer_than(key, ticket):
            logger.info("Dropping stale update for task %s ticket=%s", task.id, ticket)
            return SyncResult.success(action, task, applied=False)

        self._applied[key] = ticket
        self._replace_task(task)
        return SyncResult.success(action, task)

    async def toggle(self, task_id: str, completed: bool) -> SyncResult[Task]:
        schedule = Completed(at=self._clock()) if completed else Today()
        return await self.update(task_id, schedule_fields(schedule))

    async def move_to_tomorrow(self, task_id: str) -> SyncResult[Task]:
        current = self.get_task(task_id)
        base = current.due_date if current is not None else self.today()
        return await self.update(task_id, {"due_date": base + timedelta(days=1)})

    async def move_to_later(self, task_id: str) -> SyncResult[Task]:
        return await self.update(task_id, schedule_fields(Later()))

    async def move_to_today(self, task_id: str) -> SyncResult[Task]:
        return await self.update(task_id, schedule_fields(Today()))

    async def delete(self, task_id: str) -> SyncResult[bool]:
        action = "delete task"
        ticket = next(self._tickets)
        try:
            await self._store.delete("tasks", task_id)
        except Exception as e:
            return self._fail(action, e)

        key = ("task", task_id)
        if self._newer_than(key, ticket):
            return SyncResult.success(action, True, applied=False)
        self._applied[key] = ticket

        kept: list[Task] = []
        for task in self._tasks:
            if task.id == task_id:
                self._unindex_task(task)
            else:
                kept.append(task)
        self._tasks = kept
        logger.info("Task deleted id=%s", task_id)
        return SyncResult.success(action, True)

    # ---- subtasks ----

    async def create_subtask(self, task_id: str, title: str) -> SyncResult[Subtask]:
        action = "create subtask"
        if not title or not title.strip():
            return self._fail(action, ValueError("title is required"))
        ticket = next(self._tickets)
        try:
            row = await self._store.insert("subtasks", {"task_id": task_id, "title": title})
            subtask = Subtask.from_row(row)
        except Exception as e:
            return self._fail(action, e)

        self._applied[("subtasks", subtask.id)] = ticket
        self._touch(subtask.task_id, ticket)
        self._append_child("subtasks", subtask.task_id, subtask)
        return SyncResult.success(action, subtask)

    async def update_subtask(self, subtask_id: str, fields: Mapping[str, Any]) -> SyncResult[Subtask]:
        action = "update subtask"
        unknown = set(fields) - SUBTASK_MUTABLE_FIELDS
        if unknown:
            return self._fail(action, ValueError(f"unknown subtask fields: {sorted(unknown)}"))
        if not fields:
            return self._fail(action, ValueError("nothing to update"))

        ticket = next(self._tickets)
        try:
            row = await self._store.update("subtasks", subtask_id, to_payload(fields))
            subtask = Subtask.from_row(row)
        except Exception as e:
            return self._fail(action, e)

        return self._apply_child_update("subtasks", subtask, ticket, action)

    async def toggle_subtask(self, subtask_id: str, completed: bool) -> SyncResult[Subtask]:
        return await self.update_subtask(subtask_id, {"completed": completed})

    async def delete_subtask(self, subtask_id: str, task_id: str | None = None) -> SyncResult[bool]:
        return await self._delete_child("subtasks", "delete subtask", subtask_id, task_id)

    # ---- notes ----

    async def create_note(self, task_id: str, content: str) -> SyncResult[TaskNote]:
        action = "create note"
        ticket = next(self._tickets)
        try:
            row = await self._store.insert("task_notes", {"task_id": task_id, "content": content})
            note = TaskNote.from_row(row)
        except Exception as e:
            return self._fail(action, e)

        self._applied[("notes", note.id)] = ticket
        self._touch(note.task_id, ticket)
        self._append_child("notes", note.task_id, note)
        return SyncResult.success(action, note)

    async def update_note(self, note_id: str, content: str) -> SyncResult[TaskNote]:
        action = "update note"
        ticket = next(self._tickets)
        try:
            row = await self._store.update("task_notes", note_id, {"content": content})
            note = TaskNote.from_row(row)
        except Exception as e:
            return self._fail(action, e)

        return self._apply_child_update("notes", note, ticket, action)

    async def delete_note(self, note_id: str, task_id: str | None = None) -> SyncResult[bool]:
        return await self._delete_child("notes", "delete note", note_id, task_id)

    # ---- merge helpers ----

    def _newer_than(self, key: EntityKey, ticket: int) -> bool:
        return self._applied.get(key, 0) > ticket

    def _changed_since(self, task_id: str, ticket: int) -> bool:
        """True if the task or one of its children was changed by a request newer than `ticket`."""
        return self._newer_than(("task", task_id), ticket) or self._child_applied.get(task_id, 0) > ticket

    def _touch(self, task_id: str | None, ticket: int) -> None:
        if task_id and ticket > self._child_applied.get(task_id, 0):
            self._child_applied[task_id] = ticket

    def _fail(self, action: str, exc: BaseException) -> SyncResult[Any]:
        if isinstance(exc, DaylistError | ValueError):
            logger.warning("Error during %s: %s", action, exc)
        else:
            logger.exception("Error during %s", action, exc_info=exc)
        return SyncResult.failure(action, str(exc) or exc.__class__.__name__)

    def _index_task(self, task: Task) -> None:
        for s in task.subtasks:
            self._owners["subtasks"][s.id] = task.id
        for n in task.notes:
            self._owners["notes"][n.id] = task.id

    def _unindex_task(self, task: Task) -> None:
        for s in task.subtasks:
            self._owners["subtasks"].pop(s.id, None)
        for n in task.notes:
            self._owners["notes"].pop(n.id, None)

    def _rebuild_index(self) -> None:
        self._owners = {"subtasks": {}, "notes": {}}
        for task in self._tasks:
            self._index_task(task)

    def _replace_task(self, task: Task) -> bool:
        for i, existing in enumerate(self._tasks):
            if existing.id == task.id:
                self._unindex_task(existing)
                self._tasks[i] = task
                self._index_task(task)
                return True
        return False

    def _owner_for(self, kind: ChildKind, child_id: str, fallback: str | None) -> str | None:
        return self._owners[kind].get(child_id) or fallback

    def _append_child(self, kind: ChildKind, owner_id: str, child: Subtask | TaskNote) -> None:
        task = self.get_task(owner_id)
        if task is None:
            return
        children = getattr(task, kind)
        self._replace_task(replace(task, **{kind: (*children, child)}))

    def _apply_child_update(
        self,
        kind: ChildKind,
        child: Subtask | TaskNote,
        ticket: int,
        action: str,
    ) -> SyncResult[Any]:
        key = (kind, child.id)
        if self._newer_than(key, ticket):
            logger.info("Dropping stale %s update id=%s ticket=%s", kind, child.id, ticket)
            return SyncResult.success(action, child, applied=False)
        self._applied[key] = ticket

        owner_id = self._owner_for(kind, child.id, child.task_id)
        self._touch(owner_id, ticket)
        task = self.get_task(owner_id) if owner_id else None
        if task is not None:
            children = tuple(child if c.id == child.id else c for c in getattr(task, kind))
            self._replace_task(replace(task, **{kind: children}))
        return SyncResult.success(action, child)

    async def _delete_child(
        self,
        kind: ChildKind,
        action: str,
        child_id: str,
        task_id: str | None,
    ) -> SyncResult[bool]:
        ticket = next(self._tickets)
        try:
            await self._store.delete(_CHILD_TABLES[kind], child_id)
        except Exception as e:
            return self._fail(action, e)

        key = (kind, child_id)
        if self._newer_than(key, ticket):
            return SyncResult.success(action, True, applied=False)
        self._applied[key] = ticket

        owner_id = self._owner_for(kind, child_id, task_id)
        self._touch(owner_id, ticket)
        task = self.get_task(owner_id) if owner_id else None
        if task is not None:
            children = tuple(c for c in getattr(task, kind) if c.id != child_id)
            self._replace_task(replace(task, **{kind: children}))
        self._owners[kind].pop(child_id, None)
        return SyncResult.success(action, True)
