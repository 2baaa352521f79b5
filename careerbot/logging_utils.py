"""
Logging helpers.

Every module asks for a logger here instead of calling print(), so batch
progress and swallowed retrieval errors end up in one colored stream.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import colorlog

BASE_NAME = "careerbot"


def _configure_base_logger() -> logging.Logger:
    """Attach the handlers once, to the ``careerbot`` logger only."""
    logger = logging.getLogger(BASE_NAME)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(colorlog.ColoredFormatter(
            fmt=(
                "%(log_color)s%(asctime)s [%(levelname)s] "
                "%(name)s:%(lineno)d:%(reset)s %(message)s"
            ),
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        ))
        logger.addHandler(handler)

        log_file = os.getenv("CAREERBOT_LOG_FILE")
        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                filename=str(log_path),
                maxBytes=5 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            ))
            logger.addHandler(file_handler)

        level_name = os.getenv("CAREERBOT_LOG_LEVEL", "INFO").upper()
        logger.setLevel(getattr(logging, level_name, logging.INFO))
        # pytest's caplog listens on the root logger
        logger.propagate = True

    return logger


def _create_logger(full_name: str) -> logging.Logger:
    # Children carry no handlers of their own and reach the console through
    # the base logger, so each record is written once
    _configure_base_logger()
    return logging.getLogger(full_name)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the ``careerbot`` namespace."""
    full_name = f"{BASE_NAME}.{name}" if name else BASE_NAME
    return _create_logger(full_name)


def get_class_logger(cls: type) -> logging.Logger:
    """Return a logger named after a class, e.g. ``careerbot.indexer.Indexer``."""
    module = getattr(cls, "__module__", "unknown_module")
    classname = getattr(cls, "__name__", "UnknownClass")
    if module.startswith(BASE_NAME + "."):
        module = module[len(BASE_NAME) + 1:]
    return _create_logger(f"{BASE_NAME}.{module}.{classname}")
