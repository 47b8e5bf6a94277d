"""Integration tests for the refresh token lifecycle at service level."""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from quotewise.config import settings
from quotewise.core.auth.backend import hash_token, verify_access_token
from quotewise.core.auth.tokens import RefreshTokenService
from quotewise.core.errors import (
    TokenExpiredError,
    TokenNotFoundError,
    TokenRevokedError,
    UnauthorizedError,
)
from quotewise.core.utils.time import utcnow
from quotewise.modules.users.models import User
from quotewise.modules.users.repos import RefreshTokenRepository


pytestmark = pytest.mark.integration


@pytest.fixture
def tokens(db: AsyncSession) -> RefreshTokenService:
    return RefreshTokenService(db)


@pytest.fixture
def repo(db: AsyncSession) -> RefreshTokenRepository:
    return RefreshTokenRepository(db)


class TestIssue:
    """Tests for issuing token pairs."""

    async def test_pair_contents(self, tokens: RefreshTokenService, repo, user: User):
        now = utcnow()

        pair = await tokens.issue_token_pair(user, "10.0.0.1", now=now)

        assert pair.token_type == "Bearer"
        assert pair.expires_in == settings.access_token_expire_minutes * 60 * 1000
        assert verify_access_token(pair.access_token).claims.user_id == user.id
        record = await repo.get_by_hash(hash_token(pair.refresh_token))
        assert record.created_by_ip == "10.0.0.1"
        assert not record.is_revoked
        assert record.replaced_by_token is None

    async def test_refresh_tokens_are_opaque(self, tokens: RefreshTokenService, user: User):
        raw = await tokens.issue_refresh_token(user, None)

        assert raw.count(".") == 0
        assert len(raw) >= 40


class TestRedeem:
    """Tests for single-use rotation."""

    async def test_redeem_links_old_to_new(self, tokens: RefreshTokenService, repo, user: User):
        old = await tokens.issue_refresh_token(user, None)

        redeemed_user, pair = await tokens.redeem_refresh_token(old, "10.0.0.2")

        record = await repo.get_by_hash(hash_token(old))
        assert redeemed_user.id == user.id
        assert record.is_revoked
        assert record.revoked_by_ip == "10.0.0.2"
        assert record.replaced_by_token == hash_token(pair.refresh_token)

    async def test_second_redeem_fails(self, tokens: RefreshTokenService, user: User):
        old = await tokens.issue_refresh_token(user, None)
        await tokens.redeem_refresh_token(old, None)

        with pytest.raises(TokenRevokedError):
            await tokens.redeem_refresh_token(old, None)

    async def test_never_issued(self, tokens: RefreshTokenService):
        with pytest.raises(TokenNotFoundError):
            await tokens.redeem_refresh_token("made-up", None)

    async def test_expired_token_is_revoked_as_side_effect(
        self, tokens: RefreshTokenService, repo, user: User
    ):
        issued = utcnow()
        old = await tokens.issue_refresh_token(user, None, now=issued)
        later = issued + timedelta(days=settings.refresh_token_expire_days, seconds=1)

        with pytest.raises(TokenExpiredError):
            await tokens.redeem_refresh_token(old, None, now=later)

        record = await repo.get_by_hash(hash_token(old))
        assert record.is_revoked

    async def test_deactivated_user_loses_token(
        self, db: AsyncSession, tokens: RefreshTokenService, repo, user: User
    ):
        old = await tokens.issue_refresh_token(user, None)
        user.is_active = False
        await db.commit()

        with pytest.raises(UnauthorizedError) as exc_info:
            await tokens.redeem_refresh_token(old, None)

        assert exc_info.value.error_code == "user_invalid"
        assert (await repo.get_by_hash(hash_token(old))).is_revoked

    async def test_chain_is_traceable(self, tokens: RefreshTokenService, repo, user: User):
        raw = [await tokens.issue_refresh_token(user, None)]
        for _ in range(3):
            _, pair = await tokens.redeem_refresh_token(raw[-1], None)
            raw.append(pair.refresh_token)
        hashes = [hash_token(t) for t in raw]

        for current, successor in zip(hashes, hashes[1:], strict=False):
            assert (await repo.get_by_hash(current)).replaced_by_token == successor
        assert await repo.get_chain(hashes[0]) == hashes
        assert await repo.get_chain(hashes[2]) == hashes

    async def test_reuse_revokes_family_when_enabled(
        self, tokens: RefreshTokenService, repo, user: User, monkeypatch
    ):
        monkeypatch.setattr(settings, "revoke_token_family_on_reuse", True)
        first = await tokens.issue_refresh_token(user, None)
        _, second = await tokens.redeem_refresh_token(first, None)

        with pytest.raises(TokenRevokedError):
            await tokens.redeem_refresh_token(first, None)

        assert (await repo.get_by_hash(hash_token(second.refresh_token))).is_revoked

    async def test_reuse_keeps_family_by_default(
        self, tokens: RefreshTokenService, repo, user: User
    ):
        first = await tokens.issue_refresh_token(user, None)
        _, second = await tokens.redeem_refresh_token(first, None)

        with pytest.raises(TokenRevokedError):
            await tokens.redeem_refresh_token(first, None)

        assert not (await repo.get_by_hash(hash_token(second.refresh_token))).is_revoked


class TestRevoke:
    """Tests for explicit revocation."""

    async def test_revoke_once(self, tokens: RefreshTokenService, user: User):
        raw = await tokens.issue_refresh_token(user, None)

        assert await tokens.revoke(raw, None) is True
        assert await tokens.revoke(raw, None) is False

    async def test_revoke_all_only_touches_user(
        self, tokens: RefreshTokenService, user: User, other_user: User
    ):
        mine = [await tokens.issue_refresh_token(user, None) for _ in range(3)]
        theirs = await tokens.issue_refresh_token(other_user, None)
        await tokens.revoke(mine[0], None)

        assert await tokens.revoke_all_for_user(user.id, None) == 2
        _, pair = await tokens.redeem_refresh_token(theirs, None)
        assert pair.refresh_token
