"""User and refresh token database models."""

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quotewise.core.constants import (
    MAX_EMAIL_LENGTH,
    MAX_IPV6_LENGTH,
    MAX_NAME_LENGTH,
    MAX_URL_LENGTH,
    MAX_USERNAME_LENGTH,
    SHA256_HEX_LENGTH,
)
from quotewise.core.database.base import Base, TimestampMixin, UUIDMixin
from quotewise.core.utils.time import ensure_utc, utcnow


class UserRole(StrEnum):
    """Roles a user can hold."""

    ADMIN = "admin"
    OWNER = "owner"
    MEMBER = "member"


class User(Base, UUIDMixin, TimestampMixin):
    """An authenticated user.

    Users are never physically deleted; ``is_active`` is cleared instead.
    Admins may have no company; owners and members normally belong to one.

    Attributes:
        username: Unique login name
        email: Unique email address
        password_hash: Bcrypt-hashed password
        name: Display name
        role: One of admin, owner, member
        company_id: Owning company (tenant), if any
        is_active: Whether the user can log in
        avatar_url: Optional profile image
        last_login: Time of the last successful login
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(MAX_USERNAME_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    role: Mapped[str] = mapped_column(
        String(20),
        default=UserRole.MEMBER.value,
        nullable=False,
    )
    company_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("companies.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    avatar_url: Mapped[str | None] = mapped_column(
        String(MAX_URL_LENGTH),
        nullable=True,
    )
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"


class RefreshToken(Base, UUIDMixin):
    """One issued refresh credential.

    Only the SHA-256 hash of the opaque token is stored. Records are
    revoked, never deleted, so the rotation chain stays auditable:
    ``replaced_by_token`` holds the hash of the successor issued when
    this token was redeemed.

    Attributes:
        token_hash: SHA-256 hash of the refresh token
        user_id: The user this token belongs to
        expires_at: When the token expires
        created_by_ip: Address the token was issued to
        is_revoked: Whether the token has been revoked
        revoked_at: When the token was revoked
        revoked_by_ip: Address that caused the revocation
        replaced_by_token: Hash of the rotation successor
    """

    __tablename__ = "refresh_tokens"

    token_hash: Mapped[str] = mapped_column(
        String(SHA256_HEX_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    created_by_ip: Mapped[str | None] = mapped_column(
        String(MAX_IPV6_LENGTH),
        nullable=True,
    )
    is_revoked: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    revoked_by_ip: Mapped[str | None] = mapped_column(
        String(MAX_IPV6_LENGTH),
        nullable=True,
    )
    replaced_by_token: Mapped[str | None] = mapped_column(
        String(SHA256_HEX_LENGTH),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        return ensure_utc(self.expires_at) <= (now or utcnow())

    @property
    def is_active(self) -> bool:
        """Not revoked and not expired."""
        return not self.is_revoked and not self.is_expired()

    def __repr__(self) -> str:
        return (
            f"<RefreshToken(id={self.id}, user_id={self.user_id}, "
            f"is_revoked={self.is_revoked})>"
        )
