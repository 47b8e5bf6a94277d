"""Structured logging and request context."""

from quotewise.core.logging.middleware import RequestContextMiddleware, get_client_ip
from quotewise.core.logging.setup import configure_logging


__all__ = [
    "RequestContextMiddleware",
    "configure_logging",
    "get_client_ip",
]
