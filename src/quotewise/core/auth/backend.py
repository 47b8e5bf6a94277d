"""Password hashing, access tokens and refresh token material.

Access tokens are signed JWTs verified without a database round trip.
Refresh tokens are opaque random strings; only their SHA-256 digest is
ever stored.
"""

import hashlib
import secrets
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError

from quotewise.config import settings
from quotewise.core.auth.schemas import AccessTokenClaims, TokenStatus, TokenVerification
from quotewise.core.constants import BCRYPT_ROUNDS, REFRESH_TOKEN_BYTES, TOKEN_TYPE_ACCESS
from quotewise.core.utils.time import utcnow


if TYPE_CHECKING:
    from quotewise.modules.users.models import User


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against a stored hash. A corrupt hash never matches."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def issue_access_token(
    user: "User",
    now: datetime | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a short-lived signed access token for a user.

    The token carries no random claims, so the same secret, user and
    clock always produce the same token.

    Args:
        user: The user the token is issued to
        now: Issuance time (defaults to the current time)
        expires_delta: Optional custom lifetime

    Returns:
        Encoded JWT access token
    """
    issued_at = now or utcnow()
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)

    claims: dict[str, Any] = {
        "sub": str(user.id),
        "role": str(user.role),
        "email": user.email,
        "name": user.name,
        "company_id": str(user.company_id) if user.company_id else None,
        "type": TOKEN_TYPE_ACCESS,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + lifetime).timestamp()),
    }

    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str, now: datetime | None = None) -> TokenVerification:
    """Verify an access token's signature and expiry.

    Never raises: every failure is reported through the returned status
    and must be treated as "not authenticated" by the caller.

    Args:
        token: The encoded JWT
        now: Reference time for the expiry check (defaults to now)

    Returns:
        TokenVerification with the status and, when valid, the claims
    """
    try:
        jwt.get_unverified_claims(token)
    except JWTError:
        return TokenVerification(status=TokenStatus.MALFORMED)

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_exp": False},
        )
    except JWTError:
        return TokenVerification(status=TokenStatus.INVALID_SIGNATURE)

    try:
        claims = AccessTokenClaims.model_validate(payload)
    except PydanticValidationError:
        return TokenVerification(status=TokenStatus.MALFORMED)

    if claims.type != TOKEN_TYPE_ACCESS:
        return TokenVerification(status=TokenStatus.MALFORMED)

    if claims.expires_at <= (now or utcnow()):
        return TokenVerification(status=TokenStatus.EXPIRED)

    return TokenVerification(status=TokenStatus.VALID, claims=claims)


def generate_refresh_token() -> str:
    """Generate an opaque refresh token.

    The refresh token is a random string rather than a JWT. Only its
    hash is ever stored.
    """
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Hash a token for secure storage.

    Args:
        token: The token to hash

    Returns:
        Hex SHA-256 digest of the token
    """
    return hashlib.sha256(token.encode()).hexdigest()


def get_refresh_expiration(now: datetime | None = None, days: int | None = None) -> datetime:
    """Get the expiration datetime for a new refresh token.

    Args:
        now: Issuance time (defaults to the current time)
        days: Lifetime in days (defaults to the configured value)

    Returns:
        Expiration datetime
    """
    if days is None:
        days = settings.refresh_token_expire_days
    return (now or utcnow()) + timedelta(days=days)
