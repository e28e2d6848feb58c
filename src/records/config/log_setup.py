"""structlog setup for the CLI process.

Log lines go to stderr, filtered by level, so they never mix with the
tables the interactive shell prints on stdout.
"""

from __future__ import annotations

import logging
import sys

import structlog

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def resolve_level(level: str) -> int:
    """Map a level name to its numeric value (unknown names -> WARNING)."""
    return _LEVELS.get(level.upper(), logging.WARNING)


def configure_logging(level: str = "WARNING") -> None:
    """Configure structlog once for the running process."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(resolve_level(level)),
        # sys.stderr is looked up per logger, not at configure time
        logger_factory=lambda *args: structlog.PrintLogger(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
