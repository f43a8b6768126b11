# src/daylist/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the backend adapters, TaskSync and TaskBoard into AppState.
"""

from __future__ import annotations

import logging

from ..backend.auth import GoTrueSession
from ..backend.postgrest import PostgrestRowStore
from ..config import get_settings
from ..core.ports import Notifier
from ..core.state import AppState
from ..tasks.task_board import TaskBoard
from ..tasks.task_sync import TaskSync

logger = logging.getLogger(__name__)


def create_initial_state(*, notifier: Notifier, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Must be called from inside a running event loop (the adapters open aiohttp
    sessions). If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    session = GoTrueSession(
        base_url=settings.supabase_url,
        api_key=settings.supabase_anon_key,
        timeout=settings.request_timeout,
    )
    store = PostgrestRowStore(
        base_url=settings.supabase_url,
        api_key=settings.supabase_anon_key,
        token_provider=lambda: session.access_token,
        timeout=settings.request_timeout,
    )
    board = TaskBoard(TaskSync(store, session), notifier)
    logger.info("Backend configured url=%s", settings.supabase_url)

    return AppState(
        settings=settings,
        session=session,
        board=board,
        resources=[session, store],
    )


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    for resource in state.resources:
        try:
            await resource.close()
        except Exception:
            logger.debug("Close failed for %r.", resource, exc_info=True)
    state.resources.clear()
