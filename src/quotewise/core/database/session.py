"""Engine, session factory and the request-scoped session dependency."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from quotewise.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.database_echo}
    if not url.startswith("sqlite"):
        options |= {
            "pool_size": settings.database_pool_size,
            "max_overflow": settings.database_max_overflow,
            "pool_pre_ping": True,
        }
    return options


async_engine = create_async_engine(
    settings.async_database_url, **_engine_options(settings.async_database_url)
)

# Rows stay readable after commit; services return them to the routes
async_session_factory = async_sessionmaker(async_engine, expire_on_commit=False, autoflush=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request: committed if the handler returns, rolled back if it raises.

    Services may also commit mid-request when a write has to survive a
    later failure, such as revoking an expired refresh token.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()
