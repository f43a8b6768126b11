# src/daylist/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.ports import NotifyVariant
from ..core.state import AppState
from ..tasks.task_api import format_task, group_tasks

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotifier:
    """Notifier that prints one line per notification."""

    def notify(self, title: str, description: str, *, variant: NotifyVariant = "default") -> None:
        marker = "!!" if variant == "destructive" else "--"
        _print_ts(f"{marker} {title}: {description}")


def _greeting(state: AppState) -> str:
    groups = group_tasks(state.board.tasks)
    today = state.board.sync.today()
    lines = [f"Today ({len(groups.today)}):"]
    lines.extend(f"  - {format_task(t, today)}" for t in groups.today[:10])
    return "\n".join(lines)


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands, /login to sign in, /exit to quit.\n")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        was_signed_in = state.session.user is not None
        try:
            cmd_response = await command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is None:
            _print_ts("Commands start with '/'. Use /help to list them.")
            continue

        _print_ts(cmd_response)
        if not was_signed_in and state.session.user is not None:
            _print_ts(_greeting(state))

    logger.info("Console connector finished.")
