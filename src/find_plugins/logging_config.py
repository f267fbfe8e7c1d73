"""
Logging setup for the find-plugins command line.

Library modules only create loggers; handlers are installed here, by the CLI,
so applications embedding discover_plugins keep control of their own logging.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from find_plugins.config import Settings

LOGGER_NAME = "find_plugins"


def setup_logging(
    level: Optional[str] = None, settings: Optional[Settings] = None
) -> None:
    """
    Send find_plugins log records to stderr through Rich.

    Args:
        level: Log level name; defaults to ``settings.log_level``
        settings: Environment settings (read from the environment when None)
    """
    settings = settings or Settings()
    level_name = (level or settings.log_level).upper()

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level_name)
