from __future__ import annotations

import logging
import os
from logging import Logger
from logging.config import dictConfig
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"

# libraries whose DEBUG output drowns out command tracing
QUIET_LOGGERS = ("asyncio",)


def _resolve_level(level_name: str | int | None) -> int:
    if level_name is None:
        level_name = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level_name, int):
        return level_name
    level = logging.getLevelName(level_name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _logging_dict(level: int) -> dict[str, Any]:
    # command results are printed on stdout, so records go to stderr
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"plain": {"format": LOG_FORMAT}},
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "stream": "ext://sys.stderr",
            }
        },
        "root": {"level": logging.getLevelName(level), "handlers": ["stderr"]},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    }


def configure_logging(level_name: str | int | None = None) -> None:
    """Install the stderr handler and set the root level.

    `level_name` may be a level name, a numeric level, or None to read the
    LOG_LEVEL environment variable. Unknown names fall back to INFO.
    """
    level = _resolve_level(level_name)
    dictConfig(_logging_dict(level))


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)
