# src/daylist/tasks/task_board.py

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any, TypeVar

from ..core.ports import Notifier
from .task_models import Subtask, Task, TaskNote
from .task_sync import SyncResult, TaskSync

T = TypeVar("T")

# Success messages, keyed by SyncResult.action. Actions not listed succeed silently.
_SUCCESS_MESSAGES = {
    "create task": "Task created successfully",
    "delete task": "Task deleted successfully",
    "create subtask": "Subtask created successfully",
    "delete subtask": "Subtask deleted successfully",
    "create note": "Note added successfully",
    "update note": "Note updated successfully",
    "delete note": "Note deleted successfully",
}


class TaskBoard:
    """
    Presentation-facing surface over TaskSync.

    Translates SyncResults into notifications and hands callers the plain value
    (None on failure; deletes return a bool). Never raises for backend errors.
    """

    def __init__(self, sync: TaskSync, notifier: Notifier) -> None:
        self.sync = sync
        self._notifier = notifier

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self.sync.tasks

    @property
    def loading(self) -> bool:
        return self.sync.loading

    def _report(self, result: SyncResult[T]) -> T | None:
        if not result.ok:
            self._notifier.notify("Error", f"Failed to {result.action}", variant="destructive")
            return None
        message = _SUCCESS_MESSAGES.get(result.action)
        if message:
            self._notifier.notify("Success", message)
        return result.value

    async def fetch_tasks(self, due_date: date | None = None) -> list[Task] | None:
        return self._report(await self.sync.fetch(due_date))

    async def create_task(
        self,
        title: str,
        description: str | None = None,
        due_date: date | None = None,
    ) -> Task | None:
        return self._report(await self.sync.create(title, description, due_date))

    async def update_task(self, task_id: str, fields: Mapping[str, Any]) -> Task | None:
        return self._report(await self.sync.update(task_id, fields))

    async def toggle_task(self, task_id: str, completed: bool) -> Task | None:
        return self._report(await self.sync.toggle(task_id, completed))

    async def move_task_to_tomorrow(self, task_id: str) -> Task | None:
        return self._report(await self.sync.move_to_tomorrow(task_id))

    async def move_task_to_later(self, task_id: str) -> Task | None:
        return self._report(await self.sync.move_to_later(task_id))

    async def move_task_to_today(self, task_id: str) -> Task | None:
        return self._report(await self.sync.move_to_today(task_id))

    async def delete_task(self, task_id: str) -> bool:
        return bool(self._report(await self.sync.delete(task_id)))

    async def create_subtask(self, task_id: str, title: str) -> Subtask | None:
        return self._report(await self.sync.create_subtask(task_id, title))

    async def update_subtask(self, subtask_id: str, fields: Mapping[str, Any]) -> Subtask | None:
        return self._report(await self.sync.update_subtask(subtask_id, fields))

    async def toggle_subtask(self, subtask_id: str, completed: bool) -> Subtask | None:
        return self._report(await self.sync.toggle_subtask(subtask_id, completed))

    async def delete_subtask(self, subtask_id: str, task_id: str | None = None) -> bool:
        return bool(self._report(await self.sync.delete_subtask(subtask_id, task_id)))

    async def create_note(self, task_id: str, content: str) -> TaskNote | None:
        return self._report(await self.sync.create_note(task_id, content))

    async def update_note(self, note_id: str, content: str) -> TaskNote | None:
        return self._report(await self.sync.update_note(note_id, content))

    async def delete_note(self, note_id: str, task_id: str | None = None) -> bool:
        return bool(self._report(await self.sync.delete_note(note_id, task_id)))
