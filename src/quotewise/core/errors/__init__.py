"""Error handling module with RFC 7807 Problem Details."""

from quotewise.core.errors.exceptions import (
    AppException,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceUnavailableError,
    TokenExpiredError,
    TokenNotFoundError,
    TokenRevokedError,
    UnauthorizedError,
    ValidationError,
)
from quotewise.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    # Exceptions
    "AppException",
    "BadRequestError",
    "ConflictError",
    # Handlers
    "FieldError",
    "ForbiddenError",
    "NotFoundError",
    "ProblemDetail",
    "ServiceUnavailableError",
    "TokenExpiredError",
    "TokenNotFoundError",
    "TokenRevokedError",
    "UnauthorizedError",
    "ValidationError",
    "register_exception_handlers",
]
