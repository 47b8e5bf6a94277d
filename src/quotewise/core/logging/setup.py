"""structlog configuration."""

import logging

import structlog
from structlog.types import Processor

from quotewise.config import settings


def configure_logging() -> None:
    """Configure structlog for the current environment.

    Production emits one JSON object per line; everywhere else gets the
    coloured console renderer. Context bound by the request middleware
    (``request_id``, ``user_id``, ``company_id``) is merged into every event.
    """
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if settings.is_production
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[settings.log_level.upper()]
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
