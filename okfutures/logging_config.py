"""structlog setup shared by the process entry points."""

from __future__ import annotations

import logging

import structlog

from okfutures.config import LoggingConfig


def configure_logging(config: LoggingConfig) -> None:
    """Configure structlog from LOG_LEVEL / LOG_FORMAT."""
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer = (
        structlog.dev.ConsoleRenderer()
        if config.log_format == "console"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
