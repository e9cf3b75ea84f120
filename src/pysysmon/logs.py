"""Logging setup for pysysmon."""

import logging

from textual.logging import TextualHandler

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str | int = "INFO") -> None:
    """
    Route the root logger through Textual.

    While the app runs, records go to the Textual devtools console instead
    of the terminal the dashboard is drawn on; otherwise they go to stderr.
    """
    log_level = getattr(logging, level.upper(), logging.INFO) if isinstance(level, str) else level
    handler = TextualHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    logging.basicConfig(level=log_level, handlers=[handler], force=True)
