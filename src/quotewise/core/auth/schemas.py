"""Authentication schemas for token handling."""

from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AccessTokenClaims(BaseModel):
    """Claims carried by a signed access token.

    Attributes:
        sub: The user's UUID
        role: The user's role at issuance
        email: The user's email at issuance
        name: The user's display name at issuance
        company_id: The user's company, if any
        type: Always "access"
        iat: Issued-at, seconds since the epoch
        exp: Expiry, seconds since the epoch
    """

    model_config = ConfigDict(extra="ignore")

    sub: UUID
    role: str
    email: str
    name: str
    company_id: UUID | None = None
    type: str
    iat: int
    exp: int

    @property
    def user_id(self) -> UUID:
        return self.sub

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, tz=UTC)


class TokenStatus(StrEnum):
    """Outcome of verifying an access token."""

    VALID = "valid"
    EXPIRED = "expired"
    INVALID_SIGNATURE = "invalid_signature"
    MALFORMED = "malformed"


class TokenVerification(BaseModel):
    """Result of ``verify_access_token``.

    ``claims`` is only set when the status is VALID.
    """

    status: TokenStatus
    claims: AccessTokenClaims | None = None

    @property
    def is_valid(self) -> bool:
        return self.status is TokenStatus.VALID


class TokenPair(BaseModel):
    """A pair of access and refresh tokens.

    Attributes:
        access_token: Short-lived JWT for API access
        refresh_token: Opaque single-use token for getting new access tokens
        token_type: Always "Bearer"
        expires_in: Access token lifetime in milliseconds
        refresh_expires_at: When the refresh token stops being redeemable
    """

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_expires_at: datetime
