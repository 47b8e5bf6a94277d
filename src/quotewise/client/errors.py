"""Errors raised by the session client."""


class SessionError(Exception):
    """Base class for session client errors."""

    message: str = "Session error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


class AuthenticationError(SessionError):
    """The server rejected credentials or a token.

    Attributes:
        message: The server's human-readable detail, suitable for a form
        status_code: HTTP status of the rejection, if there was a response
        error_code: Machine-readable code from the problem details body
    """

    message = "Authentication failed"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class SessionTimeoutError(SessionError):
    """A login or registration call did not finish in time.

    The server may still complete the request.
    """

    message = "Request timed out"
