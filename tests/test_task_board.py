# tests/test_task_board.py

from __future__ import annotations

import pytest

from daylist.tasks.task_board import TaskBoard

from .fakes import FakeNotifier, FakeRowStore


@pytest.mark.asyncio
async def test_create_notifies_success_and_returns_task(board: TaskBoard, notifier: FakeNotifier) -> None:
    task = await board.create_task("Buy milk")

    assert task is not None
    assert board.tasks[0].id == task.id
    assert [(n.title, n.description, n.variant) for n in notifier.sent] == [
        ("Success", "Task created successfully", "default")
    ]


@pytest.mark.asyncio
async def test_failure_notifies_destructive_and_returns_none(
    board: TaskBoard, store: FakeRowStore, notifier: FakeNotifier
) -> None:
    store.fail_next("insert")

    assert await board.create_task("Buy milk") is None
    assert notifier.errors == ["Failed to create task"]
    assert notifier.sent[0].title == "Error"
    assert board.tasks == ()


@pytest.mark.asyncio
async def test_fetch_failure_notifies_once(board: TaskBoard, store: FakeRowStore, notifier: FakeNotifier) -> None:
    store.fail_next("select")

    assert await board.fetch_tasks() is None
    assert notifier.errors == ["Failed to fetch tasks"]
    assert board.loading is False


@pytest.mark.asyncio
async def test_task_updates_are_silent_on_success(board: TaskBoard, notifier: FakeNotifier) -> None:
    task = await board.create_task("Walk dog")
    assert task is not None
    notifier.sent.clear()

    assert await board.toggle_task(task.id, True) is not None
    assert await board.move_task_to_later(task.id) is not None
    assert await board.move_task_to_tomorrow(task.id) is not None
    assert await board.move_task_to_today(task.id) is not None

    assert notifier.sent == []


@pytest.mark.asyncio
async def test_update_failure_label(board: TaskBoard, store: FakeRowStore, notifier: FakeNotifier) -> None:
    task = await board.create_task("Walk dog")
    assert task is not None
    store.fail_next("update")

    assert await board.toggle_task(task.id, True) is None
    assert notifier.errors == ["Failed to update task"]


@pytest.mark.asyncio
async def test_delete_returns_bool(board: TaskBoard, store: FakeRowStore, notifier: FakeNotifier) -> None:
    task = await board.create_task("Walk dog")
    assert task is not None

    store.fail_next("delete")
    assert await board.delete_task(task.id) is False
    assert notifier.errors == ["Failed to delete task"]

    assert await board.delete_task(task.id) is True
    assert notifier.sent[-1].description == "Task deleted successfully"
    assert board.tasks == ()


@pytest.mark.asyncio
async def test_subtask_and_note_messages(board: TaskBoard, notifier: FakeNotifier) -> None:
    task = await board.create_task("Move flat")
    assert task is not None
    notifier.sent.clear()

    sub = await board.create_subtask(task.id, "boxes")
    assert sub is not None
    assert await board.toggle_subtask(sub.id, True) is not None
    assert await board.delete_subtask(sub.id, task.id) is True
    note = await board.create_note(task.id, "call landlord")
    assert note is not None
    assert await board.update_note(note.id, "call landlord on Monday") is not None
    assert await board.delete_note(note.id) is True

    assert [n.description for n in notifier.sent] == [
        "Subtask created successfully",
        "Subtask deleted successfully",
        "Note added successfully",
        "Note updated successfully",
        "Note deleted successfully",
    ]


@pytest.mark.asyncio
async def test_child_failure_labels(board: TaskBoard, store: FakeRowStore, notifier: FakeNotifier) -> None:
    assert await board.create_subtask("missing", "orphan") is None
    assert await board.create_note("missing", "orphan") is None

    assert notifier.errors == ["Failed to create subtask", "Failed to create note"]
