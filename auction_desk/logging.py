"""Structured logging for the auction desk.

Every component logs through ``get_logger(__name__, component=...)`` so events
carry the emitting component. The level and the ``environment`` field come
from :class:`~auction_desk.config.Settings` unless given explicitly.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from auction_desk.config import Settings, get_settings


def get_logger(name: str | None = None, **context: Any) -> structlog.typing.FilteringBoundLogger:
    """Return a logger bound to ``context``, configuring structlog on first use."""

    if not structlog.is_configured():
        configure_logging()

    logger = structlog.get_logger(name)
    return logger.bind(**context) if context else logger


def configure_logging(
    level: str | None = None,
    *,
    json_output: bool = True,
    settings: Settings | None = None,
) -> None:
    """Configure structlog and stdlib logging to stderr.

    ``json_output=False`` renders plain console lines, which the terminal
    dashboard uses so logs stay readable next to the redrawn table.
    """

    settings = settings or get_settings()
    level_name = (level or settings.log_level).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    if json_output:
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(environment=settings.environment)

    logging.basicConfig(level=numeric_level, format="%(message)s", stream=sys.stderr)


__all__ = ["configure_logging", "get_logger"]
