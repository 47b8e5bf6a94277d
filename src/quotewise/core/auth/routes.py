"""Authentication API routes.

Provides endpoints for:
- User registration
- Login/logout
- Token refresh (cookie first, JSON body as fallback)
- Session status
"""

from fastapi import APIRouter, Request, Response, status

from quotewise.config import settings
from quotewise.core.auth.dependencies import CurrentUser, OptionalUser
from quotewise.core.auth.schemas import TokenPair
from quotewise.core.auth.service import AuthSvc
from quotewise.core.logging import get_client_ip
from quotewise.core.schemas import SuccessResponse
from quotewise.modules.users.models import User
from quotewise.modules.users.schemas import (
    AuthResponse,
    AuthStatusResponse,
    LoginRequest,
    LogoutAllResponse,
    RefreshTokenRequest,
    RegisterRequest,
    UserPublic,
)


router = APIRouter(prefix="/auth", tags=["auth"])


def _set_refresh_cookie(response: Response, tokens: TokenPair) -> None:
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=tokens.refresh_token,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
        expires=tokens.refresh_expires_at,
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )


def _presented_refresh_token(request: Request, data: RefreshTokenRequest | None) -> str | None:
    """Prefer the HTTP-only cookie and fall back to the request body."""
    cookie_token = request.cookies.get(settings.refresh_cookie_name)
    if cookie_token:
        return cookie_token
    return data.refresh_token if data else None


def _envelope(user: User, tokens: TokenPair, message: str) -> AuthResponse:
    return AuthResponse(
        message=message,
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_type=tokens.token_type,
        expires_in=tokens.expires_in,
        user=UserPublic.model_validate(user),
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Creates a user account. Supplying a company name also creates the company "
    "and makes the user its owner.",
)
async def register(
    data: RegisterRequest,
    service: AuthSvc,
    request: Request,
    response: Response,
) -> AuthResponse:
    """Register a new user and start a session."""
    user, tokens = await service.register(
        username=data.username,
        email=data.email,
        name=data.name,
        password=data.password,
        company_name=data.company_name,
        ip_address=get_client_ip(request),
    )
    _set_refresh_cookie(response, tokens)
    return _envelope(user, tokens, "Registration successful")


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login with username or email",
    description="Authenticate to receive an access token and a refresh token.",
)
async def login(
    data: LoginRequest,
    service: AuthSvc,
    request: Request,
    response: Response,
) -> AuthResponse:
    """Login with username (or email) and password."""
    user, tokens = await service.login(
        username=data.username,
        password=data.password,
        ip_address=get_client_ip(request),
    )
    _set_refresh_cookie(response, tokens)
    return _envelope(user, tokens, "Login successful")


@router.post(
    "/refresh",
    response_model=AuthResponse,
    summary="Refresh access token",
    description="Redeem a refresh token for a new token pair. The presented token is revoked.",
)
async def refresh_token(
    service: AuthSvc,
    request: Request,
    response: Response,
    data: RefreshTokenRequest | None = None,
) -> AuthResponse:
    """Rotate the refresh token and issue a new access token."""
    user, tokens = await service.refresh_tokens(
        _presented_refresh_token(request, data),
        ip_address=get_client_ip(request),
    )
    _set_refresh_cookie(response, tokens)
    return _envelope(user, tokens, "Token refreshed")


@router.post(
    "/logout",
    response_model=SuccessResponse,
    summary="Logout",
    description="Revoke the current refresh token. Always succeeds from the client's view.",
)
async def logout(
    service: AuthSvc,
    request: Request,
    response: Response,
    data: RefreshTokenRequest | None = None,
) -> SuccessResponse:
    """Logout by revoking the refresh token."""
    await service.logout(
        _presented_refresh_token(request, data),
        ip_address=get_client_ip(request),
    )

    _clear_refresh_cookie(response)
    return SuccessResponse(message="Logged out successfully")


@router.post(
    "/logout-all",
    response_model=LogoutAllResponse,
    summary="Logout from all devices",
    description="Revoke every active refresh token of the current user.",
)
async def logout_all(
    current_user: CurrentUser,
    service: AuthSvc,
    request: Request,
    response: Response,
) -> LogoutAllResponse:
    """Logout from all devices."""
    revoked = await service.logout_all(current_user.id, ip_address=get_client_ip(request))
    _clear_refresh_cookie(response)
    return LogoutAllResponse(revoked=revoked)


@router.get(
    "/status",
    response_model=AuthStatusResponse,
    summary="Session status",
    description="Reports whether the bearer token is valid. Invalid or expired tokens "
    "yield authenticated=false rather than an error.",
)
async def auth_status(user: OptionalUser) -> AuthStatusResponse:
    """Report the authentication state of the caller."""
    if user is None:
        return AuthStatusResponse(authenticated=False)
    return AuthStatusResponse(authenticated=True, user=UserPublic.model_validate(user))


@router.get(
    "/me",
    response_model=UserPublic,
    summary="Get current user",
    description="Returns the currently authenticated user's profile.",
)
async def get_me(current_user: CurrentUser) -> UserPublic:
    """Get current user profile."""
    return UserPublic.model_validate(current_user)
