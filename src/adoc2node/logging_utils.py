"""Logging setup for the adoc2node command line front end."""

from __future__ import annotations

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "adoc2node"
PARSER_LOGGER = "all2md"

TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
TRACE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PLAIN_FORMAT = "%(levelname)s: %(message)s"


def resolve_log_level(log_level: int | str) -> int:
    """Turn a level name or number into a logging level, INFO when unknown."""
    if isinstance(log_level, int):
        return log_level
    resolved = logging.getLevelName(str(log_level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Send adoc2node and all2md log records to stderr and optionally a file.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or string name (e.g., "INFO").
    log_file : str, optional
        Path of a log file receiving a copy of the output.
    trace_mode : bool, default False
        Emit timestamps and logger names, and let the all2md parser log
        below WARNING.

    Returns
    -------
    logging.Logger
        The ``adoc2node`` package logger.

    """
    level = resolve_log_level(log_level)
    if trace_mode:
        formatter = logging.Formatter(TRACE_FORMAT, datefmt=TRACE_DATE_FORMAT)
    else:
        formatter = logging.Formatter(PLAIN_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error: Optional[OSError] = None
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
        except OSError as exc:
            file_error = exc

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.getLogger(PARSER_LOGGER).setLevel(level if trace_mode else max(level, logging.WARNING))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if file_error is not None:
        package_logger.warning(f"Could not create log file {log_file}: {file_error}")
    elif log_file:
        package_logger.info(f"Logging to file: {log_file}")
    return package_logger


__all__ = ["configure_logging", "resolve_log_level"]
