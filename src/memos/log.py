"""Opt-in logging setup for applications embedding :mod:`memos`.

Library modules only create module loggers; nothing is configured until an
application calls :func:`configure_logging`.
"""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from memos.config import Settings

ROOT_LOGGER_NAME = "memos"


def configure_logging(settings: Settings | None = None, *, level: str | None = None) -> logging.Logger:
    """Attach a single RichHandler to the ``memos`` logger.

    Safe to call repeatedly; previously attached handlers are replaced.
    """
    settings = settings or Settings.from_env()
    level_name = (level or settings.log_level).upper()

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(getattr(logging, level_name, logging.WARNING))
    root_logger.addHandler(
        RichHandler(show_time=True, show_path=False, rich_tracebacks=True, markup=False)
    )
    return root_logger
