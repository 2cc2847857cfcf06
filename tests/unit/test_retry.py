"""Unit tests for the retry combinator and linear backoff."""

import pytest

from card_gateway.core.retry import linear_backoff, with_retry
from tests.conftest import RecordingSleep


class Flaky:
    """Coroutine factory that fails a fixed number of times."""

    def __init__(self, failures: int, error: Exception | None = None):
        self.failures = failures
        self.error = error or ConnectionError("unavailable")
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


class TestLinearBackoff:
    """Tests for linear_backoff()."""

    def test_default_schedule(self):
        backoff = linear_backoff()
        assert [backoff(n) for n in (1, 2, 3)] == [1.0, 2.0, 3.0]

    def test_custom_base(self):
        assert linear_backoff(0.5)(3) == 1.5


class TestWithRetry:
    """Tests for with_retry()."""

    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self):
        sleep = RecordingSleep()
        operation = Flaky(failures=0)

        assert await with_retry(operation, sleep=sleep) == "ok"
        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_succeeds_on_last_attempt(self):
        """Two failures then success: three calls, waits of 1s and 2s."""
        sleep = RecordingSleep()
        operation = Flaky(failures=2)

        assert await with_retry(operation, max_attempts=3, sleep=sleep) == "ok"
        assert operation.calls == 3
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhausted_attempts_reraise_last_error(self):
        """No wait follows the final attempt."""
        sleep = RecordingSleep()
        operation = Flaky(failures=10)

        with pytest.raises(ConnectionError):
            await with_retry(operation, max_attempts=3, sleep=sleep)

        assert operation.calls == 3
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_non_retryable_error_propagates_immediately(self):
        sleep = RecordingSleep()
        operation = Flaky(failures=1, error=KeyError("bad"))

        with pytest.raises(KeyError):
            await with_retry(operation, retry_on=(ConnectionError,), sleep=sleep)

        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_on_retry_called_before_each_retry(self):
        seen = []
        operation = Flaky(failures=2)

        await with_retry(
            operation,
            sleep=RecordingSleep(),
            on_retry=lambda attempt, error: seen.append(attempt),
        )

        assert seen == [1, 2]

    @pytest.mark.asyncio
    async def test_custom_backoff(self):
        sleep = RecordingSleep()
        await with_retry(Flaky(failures=2), backoff=linear_backoff(0.25), sleep=sleep)
        assert sleep.delays == [0.25, 0.5]

    @pytest.mark.asyncio
    async def test_invalid_max_attempts(self):
        with pytest.raises(ValueError):
            await with_retry(Flaky(failures=0), max_attempts=0)
