"""
Structured JSON logging for logpipe.

Module loggers under the ``logpipe`` namespace propagate to the package
logger, which owns the only handler: one JSON object per line on stderr,
kept apart from the records a pipeline writes to stdout.
"""

import json
import logging
import sys
import time
from typing import Any, TextIO

PACKAGE_LOGGER = "logpipe"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class JSONFormatter(logging.Formatter):
    """
    Render log records as single-line JSON objects.

    Timestamps are UTC. Structured details travel in
    ``extra={"context": {...}}`` and come out under the ``context`` key;
    values JSON cannot encode (bytes from an extracted mapping, for
    instance) are written as their repr.
    """

    converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt or TIMESTAMP_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context is not None:
            payload["context"] = context

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=repr)


def _json_handler(stream: TextIO) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter(datefmt=TIMESTAMP_FORMAT))
    return handler


def _in_package(name: str) -> bool:
    return name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + ".")


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Get a logger that writes JSON to stderr.

    The package logger is set up on first use at INFO. Loggers inside the
    package inherit its handler and level; any other name gets a handler
    of its own.

    Args:
        name: Logger name (typically __name__)
        level: Explicit level for this logger (default: inherited, or INFO
            outside the package)

    Returns:
        Configured logger instance
    """
    package = logging.getLogger(PACKAGE_LOGGER)
    if not package.handlers:
        package.addHandler(_json_handler(sys.stderr))
        package.setLevel(logging.INFO)
        package.propagate = False

    logger = logging.getLogger(name)
    if not _in_package(name) and not logger.handlers:
        logger.addHandler(_json_handler(sys.stderr))
        logger.setLevel(logging.INFO)
        logger.propagate = False

    if level is not None:
        logger.setLevel(level)

    return logger


def set_level(level: int) -> None:
    """Set the level of the package logger, e.g. DEBUG for ``--verbose``."""
    get_logger(PACKAGE_LOGGER).setLevel(level)
