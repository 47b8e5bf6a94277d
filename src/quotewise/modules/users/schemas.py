"""Pydantic schemas for user and authentication operations."""

import re
from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field, field_validator, model_validator

from quotewise.core.constants import (
    MAX_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MAX_USERNAME_LENGTH,
    MIN_PASSWORD_LENGTH,
)
from quotewise.core.schemas import CamelModel


PASSWORD_RULES = {
    "uppercase letter": re.compile(r"[A-Z]"),
    "lowercase letter": re.compile(r"[a-z]"),
    "digit": re.compile(r"\d"),
}


def validate_password_complexity(password: str) -> str:
    """Require an uppercase letter, a lowercase letter and a digit."""
    missing = [name for name, rule in PASSWORD_RULES.items() if not rule.search(password)]
    if missing:
        raise ValueError(f"Password must contain at least one {' and one '.join(missing)}")
    return password


class UserPublic(CamelModel):
    """Public projection of a user, safe to send to clients."""

    id: UUID
    username: str
    email: str
    name: str
    role: str
    company_id: UUID | None = None
    avatar_url: str | None = None
    is_active: bool
    last_login: datetime | None = None


class UserStatusUpdate(CamelModel):
    """Admin switch for soft (de)activation."""

    is_active: bool


class UserProfileUpdate(CamelModel):
    """Fields a user may change on their own profile."""

    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    email: EmailStr | None = None
    avatar_url: str | None = None


class LoginRequest(CamelModel):
    """Login with username or email."""

    username: str = Field(..., min_length=1, description="Username or email address")
    password: str = Field(..., min_length=1)


class RegisterRequest(CamelModel):
    """Create an account, optionally together with a new company."""

    username: str = Field(..., min_length=3, max_length=MAX_USERNAME_LENGTH)
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )
    confirm_password: str
    company_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        """Validate password complexity."""
        return validate_password_complexity(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class RefreshTokenRequest(CamelModel):
    """Body fallback for the refresh cookie."""

    refresh_token: str | None = None


class AuthResponse(CamelModel):
    """Token envelope returned by login, register and refresh.

    ``expires_in`` is the access token lifetime in milliseconds.
    """

    success: bool = True
    message: str | None = None
    access_token: str
    refresh_token: str | None = None
    token_type: str = "Bearer"
    expires_in: int
    user: UserPublic


class AuthStatusResponse(CamelModel):
    """Whether the bearer token on the request is currently valid."""

    authenticated: bool
    user: UserPublic | None = None


class LogoutAllResponse(CamelModel):
    success: bool = True
    revoked: int
