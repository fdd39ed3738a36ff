"""Logging configuration for the bot process."""

from __future__ import annotations

import logging
import logging.config
from typing import Any


def setup_logging(level: str = "INFO") -> None:
    """
    Configure console logging for the factkeeper loggers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "level": level,
            },
        },
        "loggers": {
            "factkeeper": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    }
    logging.config.dictConfig(config)
