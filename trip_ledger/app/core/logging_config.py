"""
Logging configuration.

Console-only dictConfig; log shipping is handled by the deployment.
"""

import logging
import logging.config

from trip_ledger.app.core.config import settings


LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
        "verbose": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - "
            "%(message)s [%(filename)s:%(lineno)s]",
        },
    },
    "handlers": {
        "console": {
            "level": "DEBUG",
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
        "error_console": {
            "level": "ERROR",
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "trip_ledger": {
            "level": settings.log_level,
            "handlers": ["console"],
            "propagate": False,
        },
        "trip_ledger.errors": {
            "level": "ERROR",
            "handlers": ["error_console"],
            "propagate": False,
        },
        "uvicorn": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
    },
    "root": {"level": "WARNING", "handlers": ["console"]},
}


def setup_logging():
    logging.config.dictConfig(LOGGING_CONFIG)
