"""Logging setup.

The terminal belongs to the TUI while it runs, so records go to a rotating
file in the user log directory instead of the console.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from platformdirs import user_log_dir

from ytrss.config import APP_NAME

LOGGER_NAME = "ytrss"


def log_path() -> Path:
    log_dir = Path(user_log_dir(APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "ytrss.log"


def configure_logging(
    *,
    debug: bool = False,
    path: Optional[Path] = None,
    max_bytes: int = 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # Only configure once
    if logger.handlers:
        return logger

    handler = RotatingFileHandler(
        path or log_path(),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.propagate = False
    return logger
