"""Authentication module for tokens, passwords, and request identity."""

from quotewise.core.auth.backend import (
    generate_refresh_token,
    hash_password,
    hash_token,
    issue_access_token,
    verify_access_token,
    verify_password,
)
from quotewise.core.auth.dependencies import (
    AdminUser,
    CompanyId,
    CurrentUser,
    OptionalUser,
    OwnerUser,
    get_current_user,
)
from quotewise.core.auth.middleware import CompanyContextMiddleware, bearer_claims
from quotewise.core.auth.routes import router as auth_router
from quotewise.core.auth.schemas import (
    AccessTokenClaims,
    TokenPair,
    TokenStatus,
    TokenVerification,
)
from quotewise.core.auth.service import AuthService
from quotewise.core.auth.tokens import RefreshTokenService


__all__ = [
    # Schemas
    "AccessTokenClaims",
    # Dependencies
    "AdminUser",
    # Services
    "AuthService",
    # Middleware
    "CompanyContextMiddleware",
    "CompanyId",
    "CurrentUser",
    "OptionalUser",
    "OwnerUser",
    "RefreshTokenService",
    "TokenPair",
    "TokenStatus",
    "TokenVerification",
    # Routers
    "auth_router",
    "bearer_claims",
    # Token utilities
    "generate_refresh_token",
    "get_current_user",
    # Password utilities
    "hash_password",
    "hash_token",
    "issue_access_token",
    "verify_access_token",
    "verify_password",
]
