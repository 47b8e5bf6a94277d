"""User service for profile management and account status."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from quotewise.api.dependencies import DBSession
from quotewise.core.auth.tokens import RefreshTokenService
from quotewise.core.errors import BadRequestError, ConflictError, NotFoundError
from quotewise.modules.users.models import User
from quotewise.modules.users.repos import UserRepository
from quotewise.modules.users.schemas import UserProfileUpdate


logger = structlog.get_logger()


class UserService:
    """Service for user profile and account operations."""

    def __init__(self, db: DBSession) -> None:
        self.repo = UserRepository(db)
        self.tokens = RefreshTokenService(db)

    async def get_user(self, user_id: UUID, company_id: UUID | None = None) -> User:
        """Get a user by ID, optionally scoped to a company.

        Raises:
            NotFoundError: If user not found
        """
        user = await self.repo.get_by_id(user_id, company_id)
        if not user:
            raise NotFoundError("User not found", resource="user", resource_id=str(user_id))
        return user

    async def list_company_users(self, company_id: UUID) -> list[User]:
        return await self.repo.list_by_company(company_id)

    async def update_profile(self, user: User, data: UserProfileUpdate) -> User:
        """Update the caller's own profile.

        Raises:
            ConflictError: If the new email belongs to another account
        """
        changes = data.model_dump(exclude_unset=True)
        new_email = changes.get("email")
        if new_email:
            new_email = new_email.lower()
            existing = await self.repo.get_by_login(new_email)
            if existing and existing.id != user.id:
                raise ConflictError("Email is already in use", error_code="email_taken")
            changes["email"] = new_email

        for field, value in changes.items():
            setattr(user, field, value)
        return await self.repo.update(user)

    async def set_active(
        self,
        user_id: UUID,
        is_active: bool,
        acting_user: User,
        ip_address: str | None = None,
    ) -> User:
        """Activate or deactivate an account.

        Deactivation also revokes every refresh token of the user, so the
        account cannot mint new access tokens.

        Raises:
            BadRequestError: If an admin tries to deactivate themselves
        """
        if user_id == acting_user.id and not is_active:
            raise BadRequestError(
                "You cannot deactivate your own account",
                error_code="self_deactivation",
            )
        user = await self.get_user(user_id)
        user.is_active = is_active
        user = await self.repo.update(user)
        if not is_active:
            await self.tokens.revoke_all_for_user(user.id, ip_address)
        logger.info(
            "user_status_changed",
            user_id=str(user.id),
            is_active=is_active,
            changed_by=str(acting_user.id),
        )
        return user


UserSvc = Annotated[UserService, Depends(UserService)]
