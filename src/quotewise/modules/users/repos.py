"""User and refresh token repositories."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, or_, select, update

from quotewise.api.dependencies import DBSession
from quotewise.modules.users.models import RefreshToken, User


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, user: User) -> User:
        """Create a new user.

        Args:
            user: User instance to create

        Returns:
            The created user with ID populated
        """
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: UUID, company_id: UUID | None = None) -> User | None:
        """Get a user by ID.

        Args:
            user_id: The user's UUID
            company_id: Optional company ID for scoping

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(User.id == user_id)
        if company_id:
            stmt = stmt.where(User.company_id == company_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_login(self, identifier: str) -> User | None:
        """Get a user by username or email, case-insensitively.

        Args:
            identifier: Username or email address

        Returns:
            User if found, None otherwise
        """
        lowered = identifier.strip().lower()
        stmt = select(User).where(
            or_(func.lower(User.username) == lowered, func.lower(User.email) == lowered)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def username_or_email_taken(self, username: str, email: str) -> bool:
        stmt = select(func.count()).select_from(User).where(
            or_(
                func.lower(User.username) == username.lower(),
                func.lower(User.email) == email.lower(),
            )
        )
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    async def list_by_company(self, company_id: UUID) -> list[User]:
        """List the users of a company, oldest first."""
        stmt = (
            select(User)
            .where(User.company_id == company_id)
            .order_by(User.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, user: User) -> User:
        """Flush pending changes on a user and reload it."""
        await self.session.flush()
        await self.session.refresh(user)
        return user


class RefreshTokenRepository:
    """Repository for RefreshToken database operations.

    State changes are issued as conditional UPDATE statements so that two
    concurrent writers can never both move the same token out of the
    active state.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, token: RefreshToken) -> RefreshToken:
        """Persist a new refresh token record."""
        self.session.add(token)
        await self.session.flush()
        return token

    async def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        """Get a refresh token by its hash, whatever its state.

        Args:
            token_hash: SHA-256 hash of the token

        Returns:
            RefreshToken if found, None otherwise
        """
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def claim_for_rotation(
        self,
        token_hash: str,
        replaced_by: str,
        ip_address: str | None,
        now: datetime,
    ) -> bool:
        """Atomically revoke an active token and link it to its successor.

        Args:
            token_hash: Hash of the token being redeemed
            replaced_by: Hash of the successor token
            ip_address: Address of the redeeming client
            now: Reference time for the expiry check

        Returns:
            True if this call won the token, False if it was missing,
            expired or already revoked
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.token_hash == token_hash,
                RefreshToken.is_revoked.is_(False),
                RefreshToken.expires_at > now,
            )
            .values(
                is_revoked=True,
                revoked_at=now,
                revoked_by_ip=ip_address,
                replaced_by_token=replaced_by,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def revoke(
        self,
        token_hash: str,
        ip_address: str | None,
        now: datetime,
    ) -> bool:
        """Revoke a single token if it is not revoked yet.

        Returns:
            True if the token changed state
        """
        return await self.revoke_many([token_hash], ip_address, now) == 1

    async def revoke_many(
        self,
        token_hashes: list[str],
        ip_address: str | None,
        now: datetime,
    ) -> int:
        """Revoke every not-yet-revoked token among the given hashes."""
        if not token_hashes:
            return 0
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.token_hash.in_(token_hashes),
                RefreshToken.is_revoked.is_(False),
            )
            .values(is_revoked=True, revoked_at=now, revoked_by_ip=ip_address)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def revoke_all_for_user(
        self,
        user_id: UUID,
        ip_address: str | None,
        now: datetime,
    ) -> int:
        """Revoke all active refresh tokens for a user.

        Args:
            user_id: The user's UUID
            ip_address: Address requesting the revocation
            now: Revocation timestamp

        Returns:
            Number of tokens revoked
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.is_revoked.is_(False),
                RefreshToken.expires_at > now,
            )
            .values(is_revoked=True, revoked_at=now, revoked_by_ip=ip_address)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def get_chain(self, token_hash: str) -> list[str]:
        """Collect the hashes of a token's whole rotation lineage.

        Walks ``replaced_by_token`` back to the first token of the chain and
        forward to the newest one.

        Args:
            token_hash: Hash of any token in the chain

        Returns:
            Hashes ordered from oldest to newest
        """
        older: list[str] = []
        current = token_hash
        while True:
            stmt = select(RefreshToken.token_hash).where(
                RefreshToken.replaced_by_token == current
            )
            predecessor = (await self.session.execute(stmt)).scalar_one_or_none()
            if predecessor is None or predecessor in older:
                break
            older.append(predecessor)
            current = predecessor

        chain = [*reversed(older), token_hash]
        current = token_hash
        while True:
            stmt = select(RefreshToken.replaced_by_token).where(
                RefreshToken.token_hash == current
            )
            successor = (await self.session.execute(stmt)).scalar_one_or_none()
            if successor is None or successor in chain:
                break
            chain.append(successor)
            current = successor

        return chain


# Type aliases for dependency injection
UserRepo = Annotated[UserRepository, Depends(UserRepository)]
RefreshTokenRepo = Annotated[RefreshTokenRepository, Depends(RefreshTokenRepository)]
