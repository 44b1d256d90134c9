# src/minithings/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then serves the JSON API (and the static
UI) with uvicorn until interrupted.
"""

from __future__ import annotations

import logging

import uvicorn

from ..api.server import create_app
from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)
    app = create_app(state)

    logger.info("Tasks directory: %s", settings.tasks_dir)
    logger.info("Logbook file: %s", settings.logbook_path)
    logger.info("Log file: %s", log_file)
    logger.info("Listening on http://%s:%s", settings.host, settings.port)

    try:
        # log_config=None: uvicorn loggers propagate to the root handlers set up above.
        uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
