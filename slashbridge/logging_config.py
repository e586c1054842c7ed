"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

from slashbridge.config import get_settings

# Third-party loggers that log every poll of the action server at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore", "apscheduler")


def setup_logging(level: Optional[str] = None) -> None:
    """Configure structlog and the stdlib root logger.

    ``level`` overrides ``SLASHBRIDGE_LOG_LEVEL`` (the CLI passes ``--verbose``
    through here).
    """
    settings = get_settings()
    level_name = (level or settings.slashbridge_log_level).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer() if settings.slashbridge_env == "production"
            else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    # The sync job polls every few seconds; keep transport chatter out of INFO.
    chatty_level = log_level if log_level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)

    structlog.contextvars.bind_contextvars(service="slashbridge", plugin_id=settings.plugin_id)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a named structured logger."""
    return structlog.get_logger(name)
