# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from daylist.core.ports import User
from daylist.core.state import AppState
from daylist.tasks.task_board import TaskBoard
from daylist.tasks.task_sync import TaskSync

from .fakes import FakeNotifier, FakeRowStore, FakeSession

NOW = datetime(2026, 3, 14, 9, 30, tzinfo=UTC)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="daylist-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        supabase_url="https://example.supabase.co",
        supabase_anon_key="anon-key",
        request_timeout=5.0,
    )


@pytest.fixture()
def store() -> FakeRowStore:
    return FakeRowStore()


@pytest.fixture()
def session() -> FakeSession:
    return FakeSession(
        user=User(id="user-1", email="ada@example.com"),
        accounts={"ada@example.com": "secret"},
    )


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def sync(store: FakeRowStore, session: FakeSession) -> TaskSync:
    return TaskSync(store, session, clock=lambda: NOW)


@pytest.fixture()
def board(sync: TaskSync, notifier: FakeNotifier) -> TaskBoard:
    return TaskBoard(sync, notifier)


@pytest.fixture()
def state(settings: SimpleNamespace, session: FakeSession, board: TaskBoard) -> AppState:
    """AppState wired with deterministic fakes (no network)."""
    return AppState(settings=settings, session=session, board=board)
