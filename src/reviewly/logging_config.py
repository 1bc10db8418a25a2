"""
Structured logging configuration.
"""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

PACKAGE_LOGGERS = ("reviewly", "reviewly_api")


def configure_logging(app_name: str, log_level: str = "INFO") -> logging.Logger:
    """
    Configure structured JSON logging for the application.

    One stdout handler is shared by the ``reviewly`` and ``reviewly_api``
    package loggers, so every logger created through ``get_logger(__name__)``
    emits JSON records tagged with ``app_name``. Calling it again only
    updates the level.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger", "asctime": "timestamp"},
            static_fields={"app": app_name},
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )

    for package in PACKAGE_LOGGERS:
        package_logger = logging.getLogger(package)
        package_logger.setLevel(level)
        if not package_logger.handlers:
            package_logger.addHandler(handler)

    return logging.getLogger(PACKAGE_LOGGERS[0])


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    """Merge the adapter's context into the ``extra`` of every record."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple:
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs
