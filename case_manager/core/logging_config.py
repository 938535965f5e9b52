"""Logging configuration.

Module loggers come from ``logging.getLogger(__name__)``. Authorization
denials and tenancy integrity faults go to the ``case_manager.security``
logger so they can be routed separately.

Log records carry roles, entity names and operations only. Bound values
(tenant ids of rows, payload fields) are never logged.
"""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from case_manager.config import settings

SECURITY_LOGGER_NAME = "case_manager.security"

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_security_logger() -> logging.Logger:
    return logging.getLogger(SECURITY_LOGGER_NAME)


def build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger"},
            static_fields={"service": settings.APP_NAME},
        )
    return logging.Formatter(TEXT_FORMAT)


def configure_logging(level: str | None = None, log_format: str | None = None) -> None:
    """
    Install a single stdout handler on the ``case_manager`` logger tree.

    Safe to call more than once; the handler is replaced, not duplicated.
    """
    root = logging.getLogger("case_manager")
    root.setLevel((level or settings.LOG_LEVEL).upper())

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(log_format or settings.LOG_FORMAT))
    root.addHandler(handler)
