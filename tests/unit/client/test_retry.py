"""Unit tests for the client retry policy."""

import httpx
import pytest

from quotewise.client.retry import Backoff, RetryPolicy


class Recorder:
    """Collects requested sleep durations instead of sleeping."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def responses(*statuses: int):
    """Build a send() that answers with the given statuses in order."""
    calls = iter(statuses)

    async def send() -> httpx.Response:
        return httpx.Response(next(calls))

    return send


class TestRetryPolicy:
    """Tests for RetryPolicy.run and delay computation."""

    async def test_success_needs_one_attempt(self):
        sleep = Recorder()

        response = await RetryPolicy().run(responses(200), sleep=sleep)

        assert response.status_code == 200
        assert sleep.delays == []

    async def test_retries_retryable_status(self):
        sleep = Recorder()

        response = await RetryPolicy(max_attempts=3, delay=0.5).run(
            responses(503, 502, 200), sleep=sleep
        )

        assert response.status_code == 200
        assert sleep.delays == [0.5, 0.5]

    async def test_gives_up_after_max_attempts(self):
        sleep = Recorder()

        response = await RetryPolicy(max_attempts=2).run(responses(503, 503, 200), sleep=sleep)

        assert response.status_code == 503
        assert len(sleep.delays) == 1

    async def test_client_errors_are_not_retried(self):
        sleep = Recorder()

        response = await RetryPolicy().run(responses(404, 200), sleep=sleep)

        assert response.status_code == 404
        assert sleep.delays == []

    async def test_transport_errors_are_retried_then_raised(self):
        sleep = Recorder()
        attempts = 0

        async def send() -> httpx.Response:
            nonlocal attempts
            attempts += 1
            raise httpx.ConnectError("connection refused")

        with pytest.raises(httpx.ConnectError):
            await RetryPolicy(max_attempts=3).run(send, sleep=sleep)

        assert attempts == 3
        assert len(sleep.delays) == 2

    def test_exponential_delay_is_capped(self):
        policy = RetryPolicy(delay=1.0, backoff=Backoff.EXPONENTIAL, max_delay=5.0)

        assert [policy.delay_for(n) for n in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]

    def test_fixed_delay(self):
        policy = RetryPolicy(delay=2.0)

        assert [policy.delay_for(n) for n in range(1, 4)] == [2.0, 2.0, 2.0]
