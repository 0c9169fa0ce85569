"""Structured logging setup."""

import logging
import sys

import structlog

from core.config import Settings


def setup_logging(settings: Settings) -> None:
    """Configure structlog and the stdlib root logger.

    Production emits one JSON object per line; every other environment
    gets the coloured console renderer.
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.is_production:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        # Cached loggers ignore later reconfiguration, which log capture relies on.
        cache_logger_on_first_use=settings.is_production,
    )
