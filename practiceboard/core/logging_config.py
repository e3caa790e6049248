"""
Logging Configuration Module.

This module provides the central logging configuration dictionary for the
application. Client profile data (names, e-mail addresses) flows through the
assessment listings, so every handler runs the PHI sanitizing filter.
"""

import logging
import logging.config
import os
from typing import Any

# Get log level from environment or default to INFO
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING_CONFIG_BASE: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "[%(asctime)s] [%(levelname)s] [%(name)s] - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "detailed": {
            "format": "[%(asctime)s] [%(levelname)s] [%(name)s:%(lineno)d] - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "filters": {
        "phi_sanitizer": {
            "()": "practiceboard.core.utils.logging.PHISanitizingFilter",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": LOG_LEVEL,
            "formatter": "standard",
            "filters": ["phi_sanitizer"],
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "practiceboard": {
            "level": LOG_LEVEL,
            "handlers": ["console"],
            "propagate": False,
        },
        "uvicorn": {
            "level": LOG_LEVEL,
            "handlers": ["console"],
            "propagate": False,
        },
        "sqlalchemy.engine": {
            "level": "WARNING",  # Set to INFO or DEBUG for SQL query logging
            "handlers": ["console"],
            "propagate": False,
        },
    },
}


def build_logging_config(level: str | None = None) -> dict[str, Any]:
    """Return a copy of the base configuration with ``level`` applied."""
    level = (level or LOG_LEVEL).upper()
    config = {
        **LOGGING_CONFIG_BASE,
        "handlers": {
            name: {**handler, "level": level}
            for name, handler in LOGGING_CONFIG_BASE["handlers"].items()
        },
        "loggers": {
            name: {**logger_cfg, "level": level if name != "sqlalchemy.engine" else "WARNING"}
            for name, logger_cfg in LOGGING_CONFIG_BASE["loggers"].items()
        },
    }
    return config


def setup_logging(config: dict[str, Any] | None = None, level: str | None = None) -> None:
    """
    Configure the logging system with the provided configuration or default.

    Args:
        config: Optional logging configuration dictionary to use instead of the default
        level: Optional level override applied to the default configuration
    """
    if config is None:
        config = build_logging_config(level)

    logging.config.dictConfig(config)

    logger = logging.getLogger(__name__)
    logger.debug("Logging configured successfully")
