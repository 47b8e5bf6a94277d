"""Database layer - session management, base models, and mixins."""

from quotewise.core.database.base import Base, CompanyMixin, TimestampMixin, UUIDMixin
from quotewise.core.database.session import (
    async_engine,
    async_session_factory,
    get_db,
)


__all__ = [
    "Base",
    "CompanyMixin",
    "TimestampMixin",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "get_db",
]
