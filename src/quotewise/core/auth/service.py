"""Authentication service for login, registration, and session tokens."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError

from quotewise.api.dependencies import DBSession
from quotewise.core.auth.backend import hash_password, verify_password
from quotewise.core.auth.schemas import TokenPair
from quotewise.core.auth.tokens import RefreshTokenService
from quotewise.core.errors import ConflictError, UnauthorizedError
from quotewise.core.utils.time import utcnow
from quotewise.modules.companies.models import Company
from quotewise.modules.users.models import User, UserRole
from quotewise.modules.users.repos import UserRepository


logger = structlog.get_logger()


class AuthService:
    """Service for authentication operations.

    Handles user registration, login, token refresh, and logout. Refresh
    token bookkeeping is delegated to RefreshTokenService.
    """

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.user_repo = UserRepository(db)
        self.tokens = RefreshTokenService(db)

    async def register(
        self,
        username: str,
        email: str,
        name: str,
        password: str,
        company_name: str | None = None,
        ip_address: str | None = None,
    ) -> tuple[User, TokenPair]:
        """Register a new user.

        When a company name is given a company is created and the user
        becomes its owner. Otherwise the user is a member without company.

        Args:
            username: Desired login name
            email: User's email address
            name: Display name
            password: Plain text password
            company_name: Optional name for a new company
            ip_address: Client IP address

        Returns:
            Tuple of (user, token_pair)

        Raises:
            ConflictError: If the username or email is already taken
        """
        if await self.user_repo.username_or_email_taken(username, email):
            raise ConflictError(
                "Username or email is already registered",
                error_code="registration_conflict",
            )

        company_id: UUID | None = None
        role = UserRole.MEMBER
        if company_name:
            company = Company(name=company_name)
            self.db.add(company)
            await self.db.flush()
            company_id = company.id
            role = UserRole.OWNER

        user = await self.user_repo.create(
            User(
                username=username,
                email=email.lower(),
                name=name,
                password_hash=hash_password(password),
                role=role.value,
                company_id=company_id,
                is_active=True,
                last_login=utcnow(),
            )
        )

        logger.info(
            "user_registered",
            user_id=str(user.id),
            role=user.role,
            company_id=str(company_id) if company_id else None,
        )

        token_pair = await self.tokens.issue_token_pair(user, ip_address)
        return user, token_pair

    async def login(
        self,
        username: str,
        password: str,
        ip_address: str | None = None,
    ) -> tuple[User, TokenPair]:
        """Authenticate a user with username (or email) and password.

        Args:
            username: Username or email address
            password: Plain text password
            ip_address: Client IP address

        Returns:
            Tuple of (user, token_pair)

        Raises:
            UnauthorizedError: If credentials are invalid or the account is inactive
        """
        user = await self.user_repo.get_by_login(username)
        if not user or not verify_password(password, user.password_hash):
            logger.info("login_failed", reason="invalid_credentials")
            raise UnauthorizedError(
                "Invalid username or password",
                error_code="invalid_credentials",
            )

        if not user.is_active:
            raise UnauthorizedError(
                "Account is deactivated",
                error_code="account_inactive",
            )

        user.last_login = utcnow()
        user = await self.user_repo.update(user)

        token_pair = await self.tokens.issue_token_pair(user, ip_address)

        logger.info("login_succeeded", user_id=str(user.id))
        return user, token_pair

    async def refresh_tokens(
        self,
        refresh_token: str | None,
        ip_address: str | None = None,
    ) -> tuple[User, TokenPair]:
        """Rotate a refresh token into a new token pair.

        Raises:
            UnauthorizedError: If no token was presented or it cannot be redeemed
        """
        if not refresh_token:
            raise UnauthorizedError(
                "Refresh token required",
                error_code="missing_refresh_token",
            )
        return await self.tokens.redeem_refresh_token(refresh_token, ip_address)

    async def logout(self, refresh_token: str | None, ip_address: str | None = None) -> bool:
        """Logout by revoking the refresh token.

        Storage failures are logged and swallowed: the client is logged out
        locally whatever happens here.

        Returns:
            True if an active token was revoked
        """
        if not refresh_token:
            return False
        try:
            return await self.tokens.revoke(refresh_token, ip_address)
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("logout_revocation_failed")
            return False

    async def logout_all(self, user_id: UUID, ip_address: str | None = None) -> int:
        """Logout from all devices by revoking all refresh tokens.

        Returns:
            Number of tokens revoked
        """
        return await self.tokens.revoke_all_for_user(user_id, ip_address)


# Type alias for dependency injection
AuthSvc = Annotated[AuthService, Depends(AuthService)]
