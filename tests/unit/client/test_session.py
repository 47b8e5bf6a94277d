"""Unit tests for the client session manager against a stubbed server."""

import asyncio
import json

import httpx
import pytest

from quotewise.client import (
    AuthenticationError,
    AuthState,
    FileSessionStorage,
    MemoryNavigator,
    MemorySessionStorage,
    RetryPolicy,
    SessionConfig,
    SessionManager,
    SessionTimeoutError,
)
from quotewise.client.constants import (
    ACCESS_TOKEN_KEY,
    LAST_LOGIN_SUCCESS_KEY,
    REDIRECT_URL_KEY,
    REFRESH_TOKEN_KEY,
    TOKEN_EXPIRY_KEY,
)


START = 1_800_000_000.0
USER = {"id": "0b6f3a3e-6c1e-4b8e-9d6e-3f3c1f0e2a11", "username": "alice"}


class FakeClock:
    def __init__(self, now: float = START) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def no_sleep(_delay: float) -> None:
    return None


def envelope(access: str, refresh: str, expires_in: int = 900_000) -> dict:
    return {
        "success": True,
        "accessToken": access,
        "refreshToken": refresh,
        "tokenType": "Bearer",
        "expiresIn": expires_in,
        "user": USER,
    }


async def refresh_started(server: "FakeServer") -> None:
    while not server.count("/api/auth/refresh"):
        await asyncio.sleep(0)


def problem(status: int, code: str, detail: str) -> httpx.Response:
    return httpx.Response(
        status,
        json={
            "type": f"https://api.example.com/errors/{code}",
            "title": code.replace("_", " ").title(),
            "status": status,
            "detail": detail,
        },
    )


class FakeServer:
    """Minimal stand-in for the auth API.

    Every refresh hands out the next numbered token pair.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.refresh_count = 0
        self.refresh_ok = True
        self.refresh_delay = 0.0
        self.login_delay = 0.0
        self.logout_status = 200
        self.data_statuses: list[int] = []
        self.on_logout = None
        self.refresh_gate: asyncio.Event | None = None
        self.refresh_body: dict | None = None

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))

        if path == "/api/auth/login":
            if self.login_delay:
                await asyncio.sleep(self.login_delay)
            body = json.loads(request.content)
            if body["password"] != "Secret123":
                return problem(401, "invalid_credentials", "Invalid username or password")
            return httpx.Response(200, json=envelope("access-0", "refresh-0"))

        if path == "/api/auth/refresh":
            if self.refresh_delay:
                await asyncio.sleep(self.refresh_delay)
            if self.refresh_gate:
                await self.refresh_gate.wait()
            if not self.refresh_ok:
                return problem(401, "token_revoked", "Refresh token has been revoked")
            self.refresh_count += 1
            n = self.refresh_count
            if self.refresh_body is not None:
                return httpx.Response(200, json=self.refresh_body)
            return httpx.Response(200, json=envelope(f"access-{n}", f"refresh-{n}"))

        if path == "/api/auth/logout":
            if self.on_logout:
                self.on_logout()
            return httpx.Response(self.logout_status, json={"success": True})

        if path == "/api/auth/status":
            token = request.headers.get("Authorization", "")
            authenticated = token.startswith("Bearer access-")
            return httpx.Response(
                200,
                json={"authenticated": authenticated, "user": USER if authenticated else None},
            )

        if path == "/api/quotes":
            status = self.data_statuses.pop(0) if self.data_statuses else 200
            return httpx.Response(status, json=[])

        return httpx.Response(404)

    def count(self, path: str) -> int:
        return sum(1 for _, p in self.calls if p == path)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def navigator() -> MemoryNavigator:
    return MemoryNavigator("/quotes/42")


@pytest.fixture
async def http(server):
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(server),
        base_url="http://test",
    ) as http:
        yield http


@pytest.fixture
def storage() -> MemorySessionStorage:
    return MemorySessionStorage()


@pytest.fixture
def session(http, storage, navigator, clock) -> SessionManager:
    return SessionManager(
        http,
        storage=storage,
        config=SessionConfig(retry=RetryPolicy(max_attempts=3, delay=0.1)),
        navigator=navigator,
        clock=clock,
        sleep=no_sleep,
    )


class TestLogin:
    """Tests for login and registration."""

    async def test_login_stores_session_together(self, session, storage, clock):
        user = await session.login("alice", "Secret123")

        assert user == USER
        assert session.state.auth_state is AuthState.AUTHENTICATED
        assert session.state.expires_at == START + 900
        assert storage.as_dict() == {
            ACCESS_TOKEN_KEY: "access-0",
            REFRESH_TOKEN_KEY: "refresh-0",
            TOKEN_EXPIRY_KEY: str(int((START + 900) * 1000)),
            LAST_LOGIN_SUCCESS_KEY: str(int(START * 1000)),
        }

    async def test_login_failure_carries_server_message(self, session):
        with pytest.raises(AuthenticationError) as exc_info:
            await session.login("alice", "wrong")

        assert exc_info.value.message == "Invalid username or password"
        assert exc_info.value.status_code == 401
        assert exc_info.value.error_code == "invalid_credentials"
        assert session.state.auth_state is AuthState.UNAUTHENTICATED

    async def test_login_timeout(self, http, server):
        server.login_delay = 1.0
        session = SessionManager(http, config=SessionConfig(login_timeout=0.01))

        with pytest.raises(SessionTimeoutError, match="Request timed out"):
            await session.login("alice", "Secret123")

        assert session.state.auth_state is AuthState.UNAUTHENTICATED

    async def test_login_without_access_token(self, storage):
        def answer(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": True, "user": USER})

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(answer), base_url="http://test"
        ) as http:
            session = SessionManager(http, storage=storage)

            with pytest.raises(AuthenticationError, match="Unexpected response"):
                await session.login("alice", "Secret123")

        assert session.state.auth_state is AuthState.UNAUTHENTICATED
        assert storage.as_dict() == {}


class TestAuthHeaders:
    """Tests for get_auth_headers and automatic refresh."""

    async def test_fresh_token_is_used_as_is(self, session, server):
        await session.login("alice", "Secret123")

        headers = await session.get_auth_headers()

        assert headers == {"Authorization": "Bearer access-0"}
        assert server.count("/api/auth/refresh") == 0

    async def test_refreshes_inside_threshold(self, session, server, storage, clock):
        await session.login("alice", "Secret123")
        clock.advance(14 * 60 + 1)

        headers = await session.get_auth_headers()

        assert headers == {"Authorization": "Bearer access-1"}
        assert storage.get(REFRESH_TOKEN_KEY) == "refresh-1"
        assert session.state.expires_at == clock.now + 900

    async def test_concurrent_callers_share_one_refresh(self, session, server, clock):
        await session.login("alice", "Secret123")
        clock.advance(15 * 60)
        server.refresh_delay = 0.01

        results = await asyncio.gather(*(session.get_auth_headers() for _ in range(5)))

        assert server.refresh_count == 1
        assert all(h == {"Authorization": "Bearer access-1"} for h in results)

    async def test_refresh_failure_redirects_to_login(self, session, server, storage, clock):
        await session.login("alice", "Secret123")
        clock.advance(15 * 60)
        server.refresh_ok = False

        with pytest.raises(AuthenticationError):
            await session.get_auth_headers()

        assert session.state.auth_state is AuthState.UNAUTHENTICATED
        assert storage.get(ACCESS_TOKEN_KEY) is None
        assert storage.get(REDIRECT_URL_KEY) == "/quotes/42"
        assert session.navigator.history == ["/auth?redirect=/quotes/42"]

    async def test_failed_refresh_ends_session_once(self, session, server, storage, clock):
        await session.login("alice", "Secret123")
        clock.advance(15 * 60)
        server.refresh_ok = False
        server.refresh_delay = 0.01

        results = await asyncio.gather(
            *(session.get_auth_headers() for _ in range(5)), return_exceptions=True
        )

        assert all(isinstance(r, AuthenticationError) for r in results)
        assert server.count("/api/auth/refresh") == 1
        assert session.navigator.history == ["/auth?redirect=/quotes/42"]
        assert storage.get(REDIRECT_URL_KEY) == "/quotes/42"

    async def test_refresh_without_access_token_is_a_failure(self, session, server, storage, clock):
        await session.login("alice", "Secret123")
        clock.advance(15 * 60)
        server.refresh_body = {"success": True, "refreshToken": "refresh-9"}

        with pytest.raises(AuthenticationError):
            await session.get_auth_headers()

        assert session.state.auth_state is AuthState.UNAUTHENTICATED
        assert storage.get(REFRESH_TOKEN_KEY) is None

    async def test_zero_expires_in_is_honoured(self, session, server, clock):
        await session.login("alice", "Secret123")
        clock.advance(15 * 60)
        server.refresh_body = envelope("access-short", "refresh-short", expires_in=0)

        headers = await session.get_auth_headers()

        assert headers == {"Authorization": "Bearer access-short"}
        assert session.state.expires_at == clock.now
        await session.get_auth_headers()
        assert server.refresh_count == 2

    async def test_refresh_failure_on_public_path_stays_put(self, http, server, clock):
        navigator = MemoryNavigator("/")
        session = SessionManager(http, navigator=navigator, clock=clock)
        server.refresh_ok = False

        with pytest.raises(AuthenticationError):
            await session.get_auth_headers()

        assert navigator.history == []


class TestStatus:
    """Tests for check_status."""

    async def test_skipped_right_after_login(self, session, server):
        await session.login("alice", "Secret123")

        status = await session.check_status()

        assert status == {"authenticated": True, "user": USER}
        assert server.count("/api/auth/status") == 0

    async def test_asks_server_after_window(self, session, server, clock):
        await session.login("alice", "Secret123")
        clock.advance(5)

        status = await session.check_status()

        assert status["authenticated"] is True
        assert server.count("/api/auth/status") == 1

    async def test_without_session(self, session, server):
        server.refresh_ok = False

        assert await session.check_status() == {"authenticated": False}


class TestRequest:
    """Tests for authenticated requests."""

    async def test_get_is_retried(self, session, server):
        await session.login("alice", "Secret123")
        server.data_statuses = [503, 200]

        response = await session.request("GET", "/api/quotes")

        assert response.status_code == 200
        assert server.count("/api/quotes") == 2

    async def test_post_is_not_retried(self, session, server):
        await session.login("alice", "Secret123")
        server.data_statuses = [503, 200]

        response = await session.request("POST", "/api/quotes", json={})

        assert response.status_code == 503
        assert server.count("/api/quotes") == 1

    async def test_unauthorized_refreshes_and_resends(self, session, server):
        await session.login("alice", "Secret123")
        server.data_statuses = [401, 200]

        response = await session.request("GET", "/api/quotes")

        assert response.status_code == 200
        assert server.refresh_count == 1
        assert session.state.access_token == "access-1"

    async def test_second_unauthorized_ends_session(self, session, server):
        await session.login("alice", "Secret123")
        server.data_statuses = [401, 401]

        with pytest.raises(AuthenticationError):
            await session.request("GET", "/api/quotes")

        assert session.state.auth_state is AuthState.UNAUTHENTICATED
        assert session.navigator.history == ["/auth?redirect=/quotes/42"]


class TestLogout:
    """Tests for logout and redirects."""

    async def test_local_state_cleared_before_server_call(self, session, server, storage):
        await session.login("alice", "Secret123")
        seen: list[dict] = []
        server.on_logout = lambda: seen.append(storage.as_dict())

        await session.logout()

        assert seen == [{}]
        assert session.state.auth_state is AuthState.UNAUTHENTICATED
        assert session.navigator.history == ["/auth"]

    async def test_server_failure_does_not_block(self, session, server):
        await session.login("alice", "Secret123")
        server.logout_status = 500

        await session.logout()

        assert session.navigator.history == ["/auth"]

    async def test_unreachable_server_does_not_block(self, storage, navigator, clock):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(refuse), base_url="http://test"
        ) as http:
            session = SessionManager(http, storage=storage, navigator=navigator, clock=clock)
            storage.set(ACCESS_TOKEN_KEY, "access-0")

            await session.logout()

        assert navigator.history == ["/auth"]

    async def test_logout_during_refresh_stays_logged_out(self, session, server, storage, clock):
        await session.login("alice", "Secret123")
        clock.advance(15 * 60)
        server.refresh_gate = asyncio.Event()
        server.on_logout = server.refresh_gate.set

        pending = asyncio.ensure_future(session.get_auth_headers())
        await refresh_started(server)
        await session.logout()

        with pytest.raises(AuthenticationError):
            await pending
        await asyncio.sleep(0.01)

        assert session.state.auth_state is AuthState.UNAUTHENTICATED
        assert session.state.access_token is None
        assert storage.get(ACCESS_TOKEN_KEY) is None
        assert storage.get(REFRESH_TOKEN_KEY) is None
        assert server.refresh_count == 0
        assert session.navigator.history == ["/auth"]

    def test_consume_redirect(self, session, storage):
        storage.set(REDIRECT_URL_KEY, "/clients/7")

        assert session.consume_redirect() == "/clients/7"
        assert session.consume_redirect() == "/quotes"
        assert session.consume_redirect("/dashboard") == "/dashboard"


class TestLifecycle:
    """Tests for init and teardown."""

    async def test_init_resumes_persisted_session(self, http, server, clock, tmp_path):
        storage = FileSessionStorage(tmp_path / "session.json")
        storage.set(ACCESS_TOKEN_KEY, "access-0")
        storage.set(REFRESH_TOKEN_KEY, "refresh-0")
        storage.set(TOKEN_EXPIRY_KEY, str(int((clock.now + 600) * 1000)))
        session = SessionManager(http, storage=storage, clock=clock)

        state = await session.init()

        assert state.auth_state is AuthState.AUTHENTICATED
        assert state.user == USER
        assert server.count("/api/auth/refresh") == 0

    async def test_init_refreshes_expired_session(self, http, server, clock, storage):
        storage.set(ACCESS_TOKEN_KEY, "access-0")
        storage.set(REFRESH_TOKEN_KEY, "refresh-0")
        storage.set(TOKEN_EXPIRY_KEY, str(int((clock.now - 60) * 1000)))
        session = SessionManager(http, storage=storage, clock=clock)

        state = await session.init()

        assert state.access_token == "access-1"
        assert state.auth_state is AuthState.AUTHENTICATED

    async def test_init_without_session(self, http, server, clock, navigator):
        server.refresh_ok = False
        session = SessionManager(http, navigator=navigator, clock=clock)

        state = await session.init()

        assert state.auth_state is AuthState.UNAUTHENTICATED
        assert navigator.history == []

    async def test_teardown_clears_everything(self, session, storage):
        await session.login("alice", "Secret123")
        storage.set(REDIRECT_URL_KEY, "/quotes/1")

        session.teardown()

        assert storage.as_dict() == {}
        assert session.state.access_token is None

    async def test_teardown_abandons_pending_refresh(self, session, server, storage, clock):
        await session.login("alice", "Secret123")
        clock.advance(15 * 60)
        server.refresh_gate = asyncio.Event()

        pending = asyncio.ensure_future(session.get_auth_headers())
        await refresh_started(server)
        session.teardown()
        server.refresh_gate.set()

        with pytest.raises(AuthenticationError):
            await pending

        assert storage.as_dict() == {}
        assert session.state.auth_state is AuthState.UNAUTHENTICATED
        assert session.navigator.history == []


class TestFileSessionStorage:
    def test_values_survive_a_new_instance(self, tmp_path):
        path = tmp_path / "nested" / "session.json"
        FileSessionStorage(path).set(ACCESS_TOKEN_KEY, "abc")

        assert FileSessionStorage(path).get(ACCESS_TOKEN_KEY) == "abc"

    def test_remove_many(self, tmp_path):
        storage = FileSessionStorage(tmp_path / "session.json")
        storage.set("a", "1")
        storage.set("b", "2")

        storage.remove("a", "b", "missing")

        assert storage.get("a") is None
        assert json.loads((tmp_path / "session.json").read_text()) == {}

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json")

        assert FileSessionStorage(path).get(ACCESS_TOKEN_KEY) is None
