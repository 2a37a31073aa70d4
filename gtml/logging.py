"""Logging setup shared by the gtml CLI, watcher and service."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Optional

_LOGGER_NAME = "gtml"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ConsoleFormatter(logging.Formatter):
    """Short console lines: ``[gtml] message`` for INFO, level and stage otherwise.

    The stage is the child logger name (``orchestrator``, ``watcher``,
    ``compiler.resolver``) so debug output from a compile can be traced to
    the pass that produced it.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        if record.levelno == logging.INFO:
            return f"[{_LOGGER_NAME}] {message}"
        stage = record.name[len(_LOGGER_NAME) + 1 :] if record.name != _LOGGER_NAME else ""
        prefix = f"[{_LOGGER_NAME}] {record.levelname}"
        if stage:
            prefix = f"{prefix} {stage}:"
        return f"{prefix} {message}"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``gtml.<name>``, or the package logger when ``name`` is empty."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Route gtml records to the console (stderr by default) and optionally a file.

    ``watch`` rebuilds and tests call this repeatedly; previous handlers are
    closed before new ones are installed.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream)
    console.setLevel(level)
    console.setFormatter(ConsoleFormatter())
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = ["ConsoleFormatter", "configure_logging", "get_logger"]
