"""Domain exceptions.

Services raise these; ``core.errors.handlers`` turns them into Problem
Details responses. The ``error_code`` is what clients branch on, so a new
failure mode gets a new code rather than a new message.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Extra members merged into the response body
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.error_code!r}, {self.message!r})"


# 4xx: the caller can fix the request


class BadRequestError(AppException):
    message = "Bad request"
    error_code = "bad_request"
    status_code = 400


class NotFoundError(AppException):
    """Raised when a record is missing or belongs to another company.

    Both cases look the same to the caller, so nothing leaks across
    companies. Without a message one is derived from ``resource``::

        raise NotFoundError(resource="system_prompt")  # "System prompt not found"
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
            message = message or f"{resource.replace('_', ' ').capitalize()} not found"
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when a write would break a uniqueness rule.

    Use a specific code per rule (``core_prompt_exists``,
    ``quote_number_taken``) so clients can tell them apart.
    """

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class ValidationError(AppException):
    """Raised when a well-formed request breaks a business rule.

    Field errors use the client's camelCase names and end up in the
    response's ``errors`` member.
    """

    message = "Validation error"
    error_code = "validation_error"
    status_code = 422

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)

    @classmethod
    def for_field(cls, field: str, problem: str, message: str | None = None) -> "ValidationError":
        """Shortcut for the common single-field case."""
        return cls(message or problem, errors=[{"field": field, "message": problem}])


# 401 / 403


class UnauthorizedError(AppException):
    message = "Authentication required"
    error_code = "unauthorized"
    status_code = 401


class TokenNotFoundError(UnauthorizedError):
    """The presented refresh token was never issued."""

    message = "Invalid refresh token"
    error_code = "token_not_found"


class TokenExpiredError(UnauthorizedError):
    message = "Refresh token expired"
    error_code = "token_expired"


class TokenRevokedError(UnauthorizedError):
    """The presented refresh token was already revoked or rotated.

    Redeeming one is treated as a possible replay of a stolen credential.
    """

    message = "Refresh token has been revoked"
    error_code = "token_revoked"


class ForbiddenError(AppException):
    """Raised when the caller is known but their role is not enough."""

    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403


# 5xx


class ServiceUnavailableError(AppException):
    """Raised when a downstream dependency (database, AI provider) fails."""

    message = "Service temporarily unavailable"
    error_code = "service_unavailable"
    status_code = 503
