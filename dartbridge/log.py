"""Logging utilities for dartbridge commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "dartbridge"


class DiagnosticFormatter(logging.Formatter):
    """Prefix records that carry a `location` extra with `source:line:column`."""

    def format(self, record: logging.LogRecord) -> str:
        location = getattr(record, "location", None)
        if location is not None:
            source = getattr(record, "source", "<input>")
            message = f"{source}:{location}: {record.getMessage()}"
            record = logging.makeLogRecord({**record.__dict__, "msg": message, "args": None})
        return super().format(record)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the dartbridge hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """Configure the dartbridge logger with console output and an optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(DiagnosticFormatter("[dartbridge] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            DiagnosticFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["DiagnosticFormatter", "configure_logging", "get_logger"]
