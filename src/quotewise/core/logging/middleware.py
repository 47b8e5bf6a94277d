"""Per-request context and access logging."""

import time
import uuid
from typing import TYPE_CHECKING

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


if TYPE_CHECKING:
    from starlette.types import ASGIApp


logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

QUIET_PATHS = ("/health/", "/docs", "/redoc", "/openapi.json")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag every request with an ID and log how it went.

    The ID comes from the caller's ``X-Request-ID`` header when present,
    is echoed back on the response, bound into the structlog context for
    everything logged while handling the request, and stored as
    ``request.state.request_id`` for the error handlers.

    One ``request_completed`` event is written per request, except for
    probes and docs under ``quiet_paths``. The caller's user and company
    are included once ``CompanyContextMiddleware`` has resolved them.
    Bodies are never logged: they carry passwords and refresh tokens.
    """

    def __init__(self, app: "ASGIApp", quiet_paths: tuple[str, ...] = QUIET_PATHS) -> None:
        super().__init__(app)
        self.quiet_paths = quiet_paths

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed",
                method=request.method,
                path=request.url.path,
                duration_ms=_elapsed_ms(started),
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id

        if not request.url.path.startswith(self.quiet_paths):
            _log_completed(request, response, _elapsed_ms(started))
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def _log_completed(request: Request, response: Response, duration_ms: float) -> None:
    fields = {
        "method": request.method,
        "path": request.url.path,
        "status_code": response.status_code,
        "duration_ms": duration_ms,
        "client_ip": get_client_ip(request),
    }
    for attr in ("user_id", "company_id"):
        value = getattr(request.state, attr, None)
        if value is not None:
            fields[attr] = str(value)

    if response.status_code >= 500:
        logger.error("request_completed", **fields)
    elif response.status_code >= 400:
        logger.warning("request_completed", **fields)
    else:
        logger.info("request_completed", **fields)


def get_client_ip(request: Request) -> str | None:
    """Best guess at the caller's address, recorded on audit events.

    Behind a proxy the left-most ``X-Forwarded-For`` entry wins, then
    ``X-Real-IP``, then the socket peer.
    """
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    candidates = (
        forwarded_for.split(",", 1)[0].strip(),
        request.headers.get("X-Real-IP", "").strip(),
        request.client.host if request.client else "",
    )
    return next((ip for ip in candidates if ip), None)
