"""Client-side session management.

``SessionManager`` keeps a consumer of the API logged in: it caches the
access token and its expiry, rotates the refresh token shortly before the
access token runs out, and falls back to the login path when the session
cannot be recovered.

Example:
    async with httpx.AsyncClient(base_url="https://quotes.example.com") as http:
        session = SessionManager(http, FileSessionStorage("~/.quotewise/session.json"))
        await session.init()
        if not session.is_authenticated:
            await session.login("alice", "Secret123")
        response = await session.request("GET", "/api/quotes")
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any
from urllib.parse import quote, urlsplit

import httpx
import structlog

from quotewise.client.constants import (
    ACCESS_TOKEN_KEY,
    LAST_LOGIN_SUCCESS_KEY,
    REDIRECT_URL_KEY,
    REFRESH_TOKEN_KEY,
    SESSION_KEYS,
    TOKEN_EXPIRY_KEY,
)
from quotewise.client.errors import AuthenticationError, SessionTimeoutError
from quotewise.client.navigation import MemoryNavigator, Navigator
from quotewise.client.retry import RetryPolicy
from quotewise.client.storage import MemorySessionStorage, SessionStorage


logger = structlog.get_logger()


class AuthState(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the client's session.

    Times are seconds since the epoch, as returned by the manager's clock.
    """

    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: float | None = None
    last_login_success: float | None = None
    user: dict[str, Any] | None = None
    auth_state: AuthState = AuthState.UNAUTHENTICATED


@dataclass(frozen=True)
class SessionConfig:
    """Tunables of the session manager.

    Attributes:
        refresh_threshold: Refresh when the access token expires within this many seconds
        default_expires_in: Access token lifetime assumed when the server omits ``expiresIn``
        anti_thrash_window: Skip status checks this many seconds after a login
        login_timeout: Seconds before login or registration gives up
        login_path: Where to send the user when the session is lost
        default_redirect: Post-login destination when none was remembered
        public_paths: Paths that do not require a session
        api_prefix: Prefix of the API routes on the server
        retry: Retry policy for authenticated GET requests
    """

    refresh_threshold: float = 60.0
    default_expires_in: float = 15 * 60.0
    anti_thrash_window: float = 2.0
    login_timeout: float = 15.0
    login_path: str = "/auth"
    default_redirect: str = "/quotes"
    public_paths: frozenset[str] = frozenset({"/", "/auth", "/register"})
    api_prefix: str = "/api"
    retry: RetryPolicy = field(default_factory=RetryPolicy)


class SessionManager:
    """Keeps an authenticated session alive across requests.

    Args:
        http: Client pointed at the API server. Its cookie jar carries the
            HTTP-only refresh cookie.
        storage: Where tokens survive restarts
        config: Session tunables
        navigator: Receives redirects to the login path
        clock: Returns the current time in epoch seconds
        sleep: Awaitable delay used between retries
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        storage: SessionStorage | None = None,
        config: SessionConfig | None = None,
        navigator: Navigator | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.http = http
        self.storage = storage or MemorySessionStorage()
        self.config = config or SessionConfig()
        self.navigator = navigator or MemoryNavigator()
        self.clock = clock
        self.sleep = sleep
        self._state = SessionState()
        self._refresh_task: asyncio.Task[bool] | None = None
        # Bumped whenever a session ends; refreshes started under an older
        # generation never write tokens back.
        self._generation = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state.auth_state == AuthState.AUTHENTICATED

    def _url(self, path: str) -> str:
        return f"{self.config.api_prefix}{path}"

    # Lifecycle

    async def init(self) -> SessionState:
        """Restore persisted tokens and try to resume the session silently.

        A failed resume clears the session but never navigates.

        Returns:
            The resulting session state
        """
        expiry = self.storage.get(TOKEN_EXPIRY_KEY)
        last_login = self.storage.get(LAST_LOGIN_SUCCESS_KEY)
        self._state = SessionState(
            access_token=self.storage.get(ACCESS_TOKEN_KEY),
            refresh_token=self.storage.get(REFRESH_TOKEN_KEY),
            expires_at=int(expiry) / 1000 if expiry else None,
            last_login_success=int(last_login) / 1000 if last_login else None,
            auth_state=AuthState.AUTHENTICATING,
        )

        if self._needs_refresh() and not await self._refresh_shared():
            self._clear_session()
            logger.info("session_resume_failed")
            return self._state

        status = await self.check_status(force=True)
        if not status.get("authenticated"):
            self._clear_session()
        logger.info("session_initialized", authenticated=self.is_authenticated)
        return self._state

    def teardown(self) -> None:
        """Forget everything, including the remembered redirect target."""
        self._end_refreshes()
        self.storage.remove(*SESSION_KEYS)
        self.http.cookies.clear()
        self._state = SessionState()

    # Tokens

    def _needs_refresh(self) -> bool:
        if not self._state.access_token or self._state.expires_at is None:
            return True
        return self.clock() + self.config.refresh_threshold >= self._state.expires_at

    async def get_auth_headers(self) -> dict[str, str]:
        """Authorization header for the next request.

        Refreshes first when the access token is missing or about to
        expire. Concurrent callers wait for the same refresh.

        Raises:
            AuthenticationError: If the session could not be refreshed
        """
        if self._needs_refresh():
            generation = self._generation
            if not await self._refresh_shared():
                # Only the first waiter ends the session; the rest just fail.
                if generation == self._generation:
                    self._handle_auth_failure("refresh_failed")
                raise AuthenticationError("Session expired, please log in again", status_code=401)
        return {"Authorization": f"Bearer {self._state.access_token}"}

    async def _refresh_shared(self) -> bool:
        if self._refresh_task is None:
            task = asyncio.ensure_future(self._perform_refresh())
            task.add_done_callback(self._forget_refresh_task)
            self._refresh_task = task
        task = self._refresh_task
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            # The refresh was abandoned by a logout, not this caller.
            if not task.cancelled():
                raise
            return False

    def _forget_refresh_task(self, task: "asyncio.Task[bool]") -> None:
        if self._refresh_task is task:
            self._refresh_task = None

    def _end_refreshes(self) -> None:
        """Abandon any in-flight refresh and invalidate its result."""
        self._generation += 1
        task = self._refresh_task
        if task is not None and not task.done():
            task.cancel()
            logger.debug("token_refresh_abandoned")
        self._refresh_task = None

    async def _perform_refresh(self) -> bool:
        generation = self._generation
        body = {"refreshToken": self._state.refresh_token} if self._state.refresh_token else {}
        try:
            response = await self.http.post(self._url("/auth/refresh"), json=body)
        except httpx.HTTPError as exc:
            logger.warning("token_refresh_unreachable", error=str(exc))
            return False
        if generation != self._generation:
            logger.info("token_refresh_discarded")
            return False
        if response.status_code != httpx.codes.OK:
            logger.info(
                "token_refresh_rejected",
                status_code=response.status_code,
                error_code=_error_code(_problem(response)),
            )
            return False

        data = _json_object(response)
        if not _has_access_token(data):
            logger.warning("token_refresh_malformed", keys=sorted(data))
            return False
        self._store_envelope(data)
        logger.debug("token_refreshed", expires_at=self._state.expires_at)
        return True

    def _store_envelope(self, data: dict[str, Any], login: bool = False) -> None:
        now = self.clock()
        expires_in = data.get("expiresIn")
        expires_in_ms = self.config.default_expires_in * 1000 if expires_in is None else expires_in
        expires_at = now + expires_in_ms / 1000
        refresh_token = data.get("refreshToken") or self._state.refresh_token
        last_login = now if login else self._state.last_login_success

        self.storage.set(ACCESS_TOKEN_KEY, data["accessToken"])
        if refresh_token:
            self.storage.set(REFRESH_TOKEN_KEY, refresh_token)
        self.storage.set(TOKEN_EXPIRY_KEY, str(int(expires_at * 1000)))
        if last_login is not None:
            self.storage.set(LAST_LOGIN_SUCCESS_KEY, str(int(last_login * 1000)))

        self._state = SessionState(
            access_token=data["accessToken"],
            refresh_token=refresh_token,
            expires_at=expires_at,
            last_login_success=last_login,
            user=data.get("user") or self._state.user,
            auth_state=AuthState.AUTHENTICATED,
        )

    def _clear_session(self) -> None:
        self.storage.remove(
            ACCESS_TOKEN_KEY,
            REFRESH_TOKEN_KEY,
            TOKEN_EXPIRY_KEY,
            LAST_LOGIN_SUCCESS_KEY,
        )
        self._state = SessionState()

    def requires_auth(self, path: str) -> bool:
        route = urlsplit(path).path or "/"
        return route not in self.config.public_paths and not route.startswith(
            self.config.login_path
        )

    def _handle_auth_failure(self, reason: str) -> None:
        self._end_refreshes()
        self._clear_session()
        current = self.navigator.current_path
        logger.info("session_ended", reason=reason, path=current)
        if self.requires_auth(current):
            self.storage.set(REDIRECT_URL_KEY, current)
            self.navigator.navigate(f"{self.config.login_path}?redirect={quote(current, safe='/')}")

    def consume_redirect(self, default: str | None = None) -> str:
        """Return the remembered post-login target and forget it."""
        target = self.storage.get(REDIRECT_URL_KEY)
        self.storage.remove(REDIRECT_URL_KEY)
        return target or default or self.config.default_redirect

    # Credentials

    async def login(self, username: str, password: str) -> dict[str, Any]:
        """Log in with a username or email.

        Returns:
            The public user projection

        Raises:
            AuthenticationError: With the server's message when rejected
            SessionTimeoutError: If the server did not answer in time
        """
        return await self._authenticate(
            "/auth/login",
            {"username": username, "password": password},
        )

    async def register(
        self,
        username: str,
        email: str,
        name: str,
        password: str,
        company_name: str | None = None,
    ) -> dict[str, Any]:
        """Create an account and start a session with it.

        Raises:
            AuthenticationError: With the server's message when rejected
            SessionTimeoutError: If the server did not answer in time
        """
        payload = {
            "username": username,
            "email": email,
            "name": name,
            "password": password,
            "confirmPassword": password,
        }
        if company_name:
            payload["companyName"] = company_name
        return await self._authenticate("/auth/register", payload)

    async def _authenticate(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        self._end_refreshes()
        self._state = replace(self._state, auth_state=AuthState.AUTHENTICATING)
        try:
            response = await asyncio.wait_for(
                self.http.post(self._url(path), json=payload),
                timeout=self.config.login_timeout,
            )
        except TimeoutError as exc:
            self._state = replace(self._state, auth_state=AuthState.UNAUTHENTICATED)
            logger.warning("authentication_timeout", path=path)
            raise SessionTimeoutError() from exc
        except httpx.HTTPError as exc:
            self._state = replace(self._state, auth_state=AuthState.UNAUTHENTICATED)
            logger.warning("authentication_unreachable", path=path, error=str(exc))
            raise AuthenticationError("Unable to reach the server") from exc

        if not response.is_success:
            self._state = replace(self._state, auth_state=AuthState.UNAUTHENTICATED)
            problem = _problem(response)
            raise AuthenticationError(
                problem.get("detail") or problem.get("title") or "Authentication failed",
                status_code=response.status_code,
                error_code=_error_code(problem),
            )

        data = _json_object(response)
        if not _has_access_token(data):
            self._state = replace(self._state, auth_state=AuthState.UNAUTHENTICATED)
            logger.warning("authentication_malformed_response", path=path)
            raise AuthenticationError("Unexpected response from the server")
        self._store_envelope(data, login=True)
        logger.info("authenticated", user_id=(self._state.user or {}).get("id"))
        return self._state.user or {}

    async def logout(self) -> None:
        """End the session.

        Local state is cleared before the server is told, so the session
        is gone even if the server call fails or hangs.
        """
        refresh_token = self._state.refresh_token
        access_token = self._state.access_token
        self._end_refreshes()
        self._clear_session()

        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        body = {"refreshToken": refresh_token} if refresh_token else {}
        try:
            response = await self.http.post(self._url("/auth/logout"), json=body, headers=headers)
            if not response.is_success:
                logger.warning("logout_request_failed", status_code=response.status_code)
        except httpx.HTTPError as exc:
            logger.warning("logout_request_failed", error=str(exc))
        finally:
            self.http.cookies.clear()
            self.navigator.navigate(self.config.login_path)

    # Requests

    async def check_status(self, force: bool = False) -> dict[str, Any]:
        """Ask the server whether the session is valid.

        Args:
            force: Ignore the anti-thrash window right after a login

        Returns:
            ``{"authenticated": bool, "user": ...}``
        """
        last_login = self._state.last_login_success
        if (
            not force
            and self.is_authenticated
            and last_login is not None
            and self.clock() - last_login < self.config.anti_thrash_window
        ):
            return {"authenticated": True, "user": self._state.user}

        try:
            headers = await self.get_auth_headers()
        except AuthenticationError:
            return {"authenticated": False}

        try:
            response = await self.config.retry.run(
                lambda: self.http.get(self._url("/auth/status"), headers=headers),
                sleep=self.sleep,
            )
        except httpx.HTTPError as exc:
            logger.warning("status_check_unreachable", error=str(exc))
            return {"authenticated": False}

        if not response.is_success:
            logger.warning("status_check_failed", status_code=response.status_code)
            return {"authenticated": False}

        data = response.json()
        if data.get("authenticated"):
            self._state = replace(
                self._state,
                user=data.get("user"),
                auth_state=AuthState.AUTHENTICATED,
            )
        else:
            self._clear_session()
        return data

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send an authenticated request.

        GET requests follow the retry policy; other methods are sent once.
        A 401 triggers one refresh and one resend; a second 401 ends the
        session.

        Raises:
            AuthenticationError: If the session cannot be kept alive
        """
        response = await self._send(method, url, **kwargs)
        if response.status_code != httpx.codes.UNAUTHORIZED:
            return response

        logger.info("request_unauthorized", method=method, url=url)
        generation = self._generation
        if await self._refresh_shared():
            response = await self._send(method, url, **kwargs)
            if response.status_code != httpx.codes.UNAUTHORIZED:
                return response

        if generation == self._generation:
            self._handle_auth_failure("unauthorized")
        problem = _problem(response)
        raise AuthenticationError(
            problem.get("detail") or "Session expired, please log in again",
            status_code=response.status_code,
            error_code=_error_code(problem),
        )

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = {**kwargs.pop("headers", {}), **await self.get_auth_headers()}

        def send() -> Awaitable[httpx.Response]:
            return self.http.request(method, url, headers=headers, **kwargs)

        if method.upper() == "GET":
            return await self.config.retry.run(send, sleep=self.sleep)
        return await send()


def _json_object(response: httpx.Response) -> dict[str, Any]:
    """JSON object body of a response, or an empty dict."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _problem(response: httpx.Response) -> dict[str, Any]:
    """Problem details of an error response, or an empty dict."""
    return _json_object(response)


def _error_code(problem: dict[str, Any]) -> str | None:
    """Machine-readable code, the last segment of the problem type URI."""
    problem_type = problem.get("type")
    if not isinstance(problem_type, str) or not problem_type:
        return None
    return problem_type.rstrip("/").rsplit("/", 1)[-1]


def _has_access_token(data: dict[str, Any]) -> bool:
    token = data.get("accessToken")
    return isinstance(token, str) and bool(token)
