"""FastAPI dependencies for the caller's identity, role and company."""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Annotated, Any
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quotewise.api.dependencies import DBSession
from quotewise.core.auth.backend import verify_access_token
from quotewise.core.auth.schemas import AccessTokenClaims, TokenStatus
from quotewise.core.errors import BadRequestError, ForbiddenError, UnauthorizedError


if TYPE_CHECKING:
    from quotewise.modules.users.models import User


bearer_scheme = HTTPBearer(auto_error=False)

BearerCredentials = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]

# Expired tokens get their own code: the client answers it with a refresh
_REJECTIONS = {
    TokenStatus.EXPIRED: ("Access token expired", "token_expired"),
    TokenStatus.MALFORMED: ("Invalid access token", "invalid_token"),
    TokenStatus.INVALID_SIGNATURE: ("Invalid access token", "invalid_token"),
}


async def get_token_claims(credentials: BearerCredentials) -> AccessTokenClaims:
    """Verified claims of the bearer token.

    Raises:
        UnauthorizedError: ``missing_token``, ``token_expired`` or ``invalid_token``
    """
    if credentials is None:
        raise UnauthorizedError("Missing authentication token", error_code="missing_token")

    verification = verify_access_token(credentials.credentials)
    if verification.claims is None:
        message, code = _REJECTIONS.get(verification.status, _REJECTIONS[TokenStatus.MALFORMED])
        raise UnauthorizedError(message, error_code=code)
    return verification.claims


async def _active_user(db: DBSession, user_id: UUID) -> "User | None":
    from quotewise.modules.users.repos import UserRepository  # noqa: PLC0415

    user = await UserRepository(db).get_by_id(user_id)
    return user if user is not None and user.is_active else None


async def get_current_user(
    claims: Annotated[AccessTokenClaims, Depends(get_token_claims)],
    db: DBSession,
) -> Any:  # User; Any keeps the models import lazy
    """The authenticated user, who must still exist and be active.

    A valid token for a deactivated user is rejected here, so
    deactivation takes effect before the token expires.
    """
    user = await _active_user(db, claims.user_id)
    if user is None:
        raise UnauthorizedError("User not found or inactive", error_code="user_invalid")
    return user


async def get_optional_user(credentials: BearerCredentials, db: DBSession) -> Any | None:
    """The authenticated user, or None for anonymous and invalid callers."""
    if credentials is None:
        return None
    claims = verify_access_token(credentials.credentials).claims
    return await _active_user(db, claims.user_id) if claims else None


def require_role(*roles: str, error_code: str) -> Callable[..., Awaitable[Any]]:
    """Build a dependency that admits only users holding one of ``roles``."""
    label = roles[0].capitalize()

    async def dependency(user: Annotated[Any, Depends(get_current_user)]) -> Any:
        if user.role not in roles:
            raise ForbiddenError(f"{label} access required", error_code=error_code)
        return user

    return dependency


async def get_company_id(user: Annotated[Any, Depends(get_current_user)]) -> UUID:
    """The company every tenant-scoped query filters on.

    Raises:
        BadRequestError: ``no_company`` for users outside any company
    """
    if user.company_id is None:
        raise BadRequestError("User is not associated with a company", error_code="no_company")
    return user.company_id


CurrentUser = Annotated[Any, Depends(get_current_user)]
OptionalUser = Annotated[Any | None, Depends(get_optional_user)]
AdminUser = Annotated[Any, Depends(require_role("admin", error_code="admin_required"))]
# Admins pass every owner check
OwnerUser = Annotated[Any, Depends(require_role("owner", "admin", error_code="owner_required"))]
CompanyId = Annotated[UUID, Depends(get_company_id)]
