"""Concurrent redemption of one refresh token.

Runs against a file-backed SQLite database with two independent
sessions. ``BEGIN IMMEDIATE`` makes SQLite serialize the writers the way
row locks do on PostgreSQL.
"""

import asyncio

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from quotewise.core.auth.backend import hash_token
from quotewise.core.auth.schemas import TokenPair
from quotewise.core.auth.tokens import RefreshTokenService
from quotewise.core.errors import TokenRevokedError
from quotewise.models import Base
from quotewise.modules.users.repos import RefreshTokenRepository
from tests.factories.user import UserFactory


pytestmark = pytest.mark.integration


@pytest.fixture
async def file_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'tokens.db'}",
        connect_args={"timeout": 30},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, _record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(file_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=file_engine, expire_on_commit=False, autoflush=False)


async def redeem(session_factory, token: str) -> TokenPair | Exception:
    async with session_factory() as session:
        try:
            _, pair = await RefreshTokenService(session).redeem_refresh_token(token, None)
            await session.commit()
            return pair
        except TokenRevokedError as exc:
            await session.rollback()
            return exc


class TestConcurrentRedemption:
    """Only one of several simultaneous redemptions may win."""

    async def test_exactly_one_winner(self, session_factory):
        async with session_factory() as session:
            user = UserFactory.build()
            session.add(user)
            await session.flush()
            raw = await RefreshTokenService(session).issue_refresh_token(user, None)
            await session.commit()

        results = await asyncio.gather(
            redeem(session_factory, raw),
            redeem(session_factory, raw),
        )

        winners = [r for r in results if isinstance(r, TokenPair)]
        losers = [r for r in results if isinstance(r, TokenRevokedError)]
        assert len(winners) == 1
        assert len(losers) == 1

        async with session_factory() as session:
            record = await RefreshTokenRepository(session).get_by_hash(hash_token(raw))
            assert record.is_revoked
            assert record.replaced_by_token == hash_token(winners[0].refresh_token)
