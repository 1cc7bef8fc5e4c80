# src/todo_tracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, opens the task store, then runs the console REPL in the
main thread. Store and log locations come from TT_DB_FILENAME / TT_LOG_FILENAME.
"""

from __future__ import annotations

import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.errors import StorageError

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    console_level = getattr(logging, settings.log_level, logging.WARNING)
    setup_logging(log_file=settings.log_path, console_level=console_level)

    logger.info("Starting %s (db=%s)...", settings.app_name, settings.db_path)

    try:
        state = create_initial_state(settings=settings)
    except StorageError as e:
        logger.error("Cannot open task store: %s", e)
        sys.exit(1)

    try:
        run_console_loop(state)
    finally:
        try:
            state.store.close()
        except StorageError:
            logger.exception("Failed to close task store.")
        logger.info("Bye.")


if __name__ == "__main__":
    main()
