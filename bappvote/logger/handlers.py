"""Logging configuration for bappvote processes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Attach console (and optional file) handlers to the ``bappvote`` logger.

    Calling this again replaces the handlers installed by a previous call, so
    repeated setup does not duplicate output.
    """
    logger = logging.getLogger("bappvote")
    logger.setLevel(level.upper())

    for handler in list(logger.handlers):
        if getattr(handler, "_bappvote", False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler._bappvote = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
