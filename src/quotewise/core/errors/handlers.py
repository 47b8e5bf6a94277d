"""RFC 7807 Problem Details exception handlers.

Every error leaving the API has the same shape::

    {
        "type": "https://api.example.com/errors/token_revoked",
        "title": "Token Revoked",
        "status": 401,
        "detail": "Refresh token has been revoked",
        "instance": "/api/auth/refresh",
        "traceId": "..."
    }

Clients branch on the last segment of ``type``; ``detail`` is meant for
humans and may change.

See: https://tools.ietf.org/html/rfc7807
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import IntegrityError

from quotewise.config import settings
from quotewise.core.errors.exceptions import AppException


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()


class FieldError(BaseModel):
    """One offending field, named the way the client sent it."""

    field: str
    message: str
    type: str | None = None


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details body.

    Attributes:
        type: URI whose last segment is the machine-readable error code
        title: Short summary derived from the error code
        status: HTTP status code
        detail: Explanation of this occurrence
        instance: Request path that failed
        errors: Field-level errors, for validation failures only
        trace_id: Request ID, to correlate with server logs
    """

    model_config = ConfigDict(extra="allow")

    type: str
    title: str
    status: int
    detail: str
    instance: str | None = None
    errors: list[FieldError] | None = None
    trace_id: str | None = Field(None, serialization_alias="traceId")


def error_type_uri(error_code: str) -> str:
    return f"{settings.api_docs_base_url}/errors/{error_code}"


def problem_response(
    request: Request,
    status_code: int,
    error_code: str,
    detail: str,
    errors: list[FieldError] | None = None,
    extra: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build a Problem Details response.

    Args:
        request: The failed request
        status_code: HTTP status
        error_code: Machine-readable code, becomes the tail of ``type``
        detail: Human-readable explanation
        errors: Optional field-level errors
        extra: Additional members; never overrides a standard one
    """
    content: dict[str, Any] = ProblemDetail(
        type=error_type_uri(error_code),
        title=error_code.replace("_", " ").title(),
        status=status_code,
        detail=detail,
        instance=request.url.path,
        errors=errors,
        trace_id=getattr(request.state, "request_id", None),
    ).model_dump(by_alias=True, exclude_none=True)

    for key, value in (extra or {}).items():
        content.setdefault(key, value)

    return JSONResponse(status_code=status_code, content=content)


def _log_level(status_code: int) -> str:
    # 401s are routine: the session client refreshes on them
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return "error"
    if status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_404_NOT_FOUND):
        return "info"
    return "warning"


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert AppException subclasses to Problem Details responses.

    A ``ValidationError`` carries its field errors in ``details["errors"]``;
    they are promoted to the typed ``errors`` member.
    """
    extra = dict(exc.details)
    raw_errors = extra.pop("errors", None)
    errors = [FieldError.model_validate(e) for e in raw_errors] if raw_errors else None

    getattr(logger, _log_level(exc.status_code))(
        "app_exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        path=request.url.path,
        details=exc.details or None,
    )
    return problem_response(
        request,
        exc.status_code,
        exc.error_code,
        exc.message,
        errors=errors,
        extra=extra,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert request validation errors to Problem Details with field errors."""
    errors = [
        FieldError(
            # "body" and "query" prefixes say nothing the client does not know
            field=".".join(str(p) for p in e.get("loc", ()) if p not in ("body", "query"))
            or "unknown",
            message=e.get("msg", "Invalid value"),
            type=e.get("type"),
        )
        for e in exc.errors()
    ]

    logger.info(
        "request_validation_failed",
        path=request.url.path,
        fields=[e.field for e in errors],
    )
    return problem_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "validation_error",
        "Request validation failed",
        errors=errors,
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Map a lost race on a unique constraint to 409.

    Services check uniqueness before writing; this only fires when two
    requests pass that check at the same time.
    """
    logger.warning(
        "integrity_conflict",
        path=request.url.path,
        error=str(exc.orig),
    )
    return problem_response(
        request,
        status.HTTP_409_CONFLICT,
        "conflict",
        "The request conflicts with existing data",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return a generic 500. The error itself is only logged."""
    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return problem_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An unexpected error occurred",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(AppException, cast("ExceptionHandler", app_exception_handler))
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(IntegrityError, cast("ExceptionHandler", integrity_error_handler))
    app.add_exception_handler(Exception, generic_exception_handler)
