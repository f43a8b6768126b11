# src/daylist/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState inside the event loop, then runs the
console REPL until /exit, EOF or Ctrl+C.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import Settings, get_settings
from ..connectors.console_connector import ConsoleNotifier, run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(settings: Settings) -> None:
    state = create_initial_state(notifier=ConsoleNotifier(), settings=settings)
    try:
        await run_console_loop(state)
    finally:
        if state.session.user is not None:
            await state.session.sign_out()
        await shutdown_state(state)


def main() -> int:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    if not settings.backend_configured:
        logger.error("Backend not configured: set DAYLIST_SUPABASE_URL and DAYLIST_SUPABASE_ANON_KEY.")
        return 2

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt, exiting.")
        print()

    logger.info("Bye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
