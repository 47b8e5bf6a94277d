"""Caller identity middleware."""

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from quotewise.core.auth.backend import verify_access_token
from quotewise.core.auth.schemas import AccessTokenClaims


def bearer_claims(request: Request) -> AccessTokenClaims | None:
    """Claims of a valid bearer token on the request, if there is one."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return verify_access_token(token).claims


class CompanyContextMiddleware(BaseHTTPMiddleware):
    """Expose who is calling to logs and ``request.state``.

    Sets ``request.state.user_id`` and ``request.state.company_id`` and
    binds both into the structlog context. Nothing is rejected here; an
    invalid or missing token just leaves the context empty and the route
    dependencies decide what that means.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        claims = bearer_claims(request)
        if claims is not None:
            request.state.user_id = claims.user_id
            request.state.company_id = claims.company_id
            structlog.contextvars.bind_contextvars(
                user_id=str(claims.user_id),
                company_id=str(claims.company_id) if claims.company_id else None,
            )
        return await call_next(request)
