"""Logging configuration for the bookstore."""

from __future__ import annotations

import logging
import os
import sys

import structlog


def get_log_level() -> str:
    return os.getenv("BOOKSTORE_LOG_LEVEL", "WARNING").upper()


def setup_stdlib_logging() -> None:
    """Route stdlib records to stderr so CLI output on stdout stays clean."""
    log_level = get_log_level()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    root_logger.addHandler(handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)


def setup_structlog() -> None:
    env = os.getenv("BOOKSTORE_ENV", "development").lower()

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.contextvars.merge_contextvars,
    ]

    if env in ["production", "staging"]:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    """Configure all logging for the application."""
    setup_stdlib_logging()
    setup_structlog()
