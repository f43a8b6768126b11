# src/daylist/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..tasks.task_board import TaskBoard
from .ports import SessionProvider


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    session: SessionProvider
    board: TaskBoard

    # Due-date filter picked in the front end (None = all dates).
    selected_date: date | None = None
    # Task ids in the order of the last listing, so commands can use 1-based numbers.
    last_listing: list[str] = field(default_factory=list)

    # Adapters with an async close() (HTTP sessions), closed on shutdown.
    resources: list[Any] = field(default_factory=list)
