"""Refresh token issuance, rotation and revocation.

A refresh token is single-use: redeeming it revokes it and links it to
the successor issued in exchange. The revocation is a conditional UPDATE
that only matches an active row, so of any number of concurrent
redemptions of one token exactly one can succeed.
"""

from datetime import datetime
from typing import Annotated, NoReturn
from uuid import UUID

import structlog
from fastapi import Depends

from quotewise.api.dependencies import DBSession
from quotewise.config import settings
from quotewise.core.auth.backend import (
    generate_refresh_token,
    get_refresh_expiration,
    hash_token,
    issue_access_token,
)
from quotewise.core.auth.schemas import TokenPair
from quotewise.core.errors import (
    TokenExpiredError,
    TokenNotFoundError,
    TokenRevokedError,
    UnauthorizedError,
)
from quotewise.core.utils.time import utcnow
from quotewise.modules.users.models import RefreshToken, User
from quotewise.modules.users.repos import RefreshTokenRepository, UserRepository


logger = structlog.get_logger()


class RefreshTokenService:
    """Service owning the refresh token lifecycle."""

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.user_repo = UserRepository(db)
        self.token_repo = RefreshTokenRepository(db)

    async def issue_refresh_token(
        self,
        user: User,
        client_ip: str | None,
        now: datetime | None = None,
    ) -> str:
        """Issue and persist a new refresh token for a user.

        Args:
            user: Owner of the token
            client_ip: Address the token is issued to
            now: Issuance time (defaults to the current time)

        Returns:
            The raw opaque token. Only its hash is stored.
        """
        raw_token = generate_refresh_token()
        await self._store(user.id, hash_token(raw_token), client_ip, now or utcnow())
        return raw_token

    async def issue_token_pair(
        self,
        user: User,
        client_ip: str | None,
        now: datetime | None = None,
    ) -> TokenPair:
        """Issue an access token and a fresh refresh token for a user."""
        issued_at = now or utcnow()
        refresh_token = await self.issue_refresh_token(user, client_ip, issued_at)
        return TokenPair(
            access_token=issue_access_token(user, now=issued_at),
            refresh_token=refresh_token,
            expires_in=settings.access_token_expires_in_ms,
            refresh_expires_at=get_refresh_expiration(issued_at),
        )

    async def redeem_refresh_token(
        self,
        old_token: str,
        client_ip: str | None,
        now: datetime | None = None,
    ) -> tuple[User, TokenPair]:
        """Exchange a refresh token for a new access and refresh token.

        Args:
            old_token: The raw refresh token presented by the client
            client_ip: Address of the redeeming client
            now: Reference time (defaults to the current time)

        Returns:
            Tuple of (user, token_pair)

        Raises:
            TokenNotFoundError: If the token was never issued
            TokenExpiredError: If the token is past its expiry
            TokenRevokedError: If the token was already revoked or rotated
            UnauthorizedError: If the owning user is gone or deactivated
        """
        now = now or utcnow()
        old_hash = hash_token(old_token)
        new_token = generate_refresh_token()
        new_hash = hash_token(new_token)

        claimed = await self.token_repo.claim_for_rotation(
            old_hash, replaced_by=new_hash, ip_address=client_ip, now=now
        )
        if not claimed:
            await self._reject_unclaimed(old_hash, client_ip, now)

        record = await self.token_repo.get_by_hash(old_hash)
        user = await self.user_repo.get_by_id(record.user_id) if record else None
        if not user or not user.is_active:
            # The old token stays revoked; keep that even though the call fails
            await self.db.commit()
            logger.warning(
                "refresh_token_user_invalid",
                user_id=str(record.user_id) if record else None,
                client_ip=client_ip,
            )
            raise UnauthorizedError(
                "User not found or inactive",
                error_code="user_invalid",
            )

        await self._store(user.id, new_hash, client_ip, now)

        logger.info("refresh_token_rotated", user_id=str(user.id), client_ip=client_ip)

        return user, TokenPair(
            access_token=issue_access_token(user, now=now),
            refresh_token=new_token,
            expires_in=settings.access_token_expires_in_ms,
            refresh_expires_at=get_refresh_expiration(now),
        )

    async def revoke(self, token: str, client_ip: str | None) -> bool:
        """Revoke a single refresh token.

        Args:
            token: The raw refresh token
            client_ip: Address requesting the revocation

        Returns:
            True if an active token was revoked
        """
        return await self.token_repo.revoke(hash_token(token), client_ip, utcnow())

    async def revoke_all_for_user(self, user_id: UUID, client_ip: str | None) -> int:
        """Revoke every active refresh token of a user.

        Returns:
            Number of tokens revoked
        """
        count = await self.token_repo.revoke_all_for_user(user_id, client_ip, utcnow())
        logger.info("refresh_tokens_revoked", user_id=str(user_id), count=count)
        return count

    async def _store(
        self,
        user_id: UUID,
        token_hash: str,
        client_ip: str | None,
        now: datetime,
    ) -> RefreshToken:
        return await self.token_repo.create(
            RefreshToken(
                token_hash=token_hash,
                user_id=user_id,
                expires_at=get_refresh_expiration(now),
                created_by_ip=client_ip,
                is_revoked=False,
                created_at=now,
            )
        )

    async def _reject_unclaimed(
        self,
        token_hash: str,
        client_ip: str | None,
        now: datetime,
    ) -> NoReturn:
        """Raise the error explaining why a token could not be claimed.

        Side effects (expiry revocation, family revocation) are committed
        before raising so they survive the request's rollback.
        """
        record = await self.token_repo.get_by_hash(token_hash)
        if record is None:
            raise TokenNotFoundError()

        if record.is_expired(now):
            await self.token_repo.revoke(token_hash, client_ip, now)
            await self.db.commit()
            raise TokenExpiredError()

        logger.warning(
            "refresh_token_reuse_detected",
            user_id=str(record.user_id),
            client_ip=client_ip,
            replaced_by_present=record.replaced_by_token is not None,
        )
        if settings.revoke_token_family_on_reuse:
            chain = await self.token_repo.get_chain(token_hash)
            revoked = await self.token_repo.revoke_many(chain, client_ip, now)
            await self.db.commit()
            logger.warning(
                "refresh_token_family_revoked",
                user_id=str(record.user_id),
                chain_length=len(chain),
                revoked=revoked,
            )
        raise TokenRevokedError()


# Type alias for dependency injection
RefreshTokenSvc = Annotated[RefreshTokenService, Depends(RefreshTokenService)]
