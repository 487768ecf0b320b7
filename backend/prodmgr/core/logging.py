from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_ROOT_LOGGER = "prodmgr"


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Safe to call more than once; the handler is only installed the first time.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)
    if not any(getattr(h, "_prodmgr_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._prodmgr_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
