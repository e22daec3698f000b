"""Logging configuration for Relay with structlog."""

import logging
import sys
from pathlib import Path
from typing import TextIO

import structlog

# Handle opened for --log-file output, closed when logging is reconfigured
_log_file_handle: TextIO | None = None


def setup_logging(
    level: str | None = "INFO",
    log_file: Path | None = None,
    show_timestamps: bool = True,
) -> None:
    """Configure structlog for console and optional file output.

    Console output goes to stderr so command output on stdout stays clean.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR), or None to use INFO
        log_file: Optional file path to write JSON logs to
        show_timestamps: Include timestamps in console output
    """
    global _log_file_handle

    level = level or "INFO"
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
    ]

    if show_timestamps:
        processors.append(structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False))

    if log_file:
        # File output: use JSON for parsing
        log_file.parent.mkdir(parents=True, exist_ok=True)
        processors.extend(
            [
                structlog.processors.dict_tracebacks,
                structlog.processors.JSONRenderer(),
            ]
        )
        handle = log_file.open("a")
        logger_factory = structlog.WriteLoggerFactory(file=handle)
    else:
        processors.extend(
            [
                structlog.dev.set_exc_info,
                structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
            ]
        )
        handle = None
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=False,
    )

    close_log_file()
    _log_file_handle = handle


def close_log_file() -> None:
    """Close the file opened by the last setup_logging(log_file=...) call."""
    global _log_file_handle

    if _log_file_handle is not None:
        _log_file_handle.close()
        _log_file_handle = None


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger for a module.

    Args:
        name: Module name (e.g., "relay.agent.executor")

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)
