"""Unit tests for the shared retry policy."""

from unittest.mock import AsyncMock

import pytest

from src.dlmm_common.errors import RetryExhaustedError
from src.dlmm_common.retry import with_retry


@pytest.fixture
def sleep(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    mock = AsyncMock()
    monkeypatch.setattr("src.dlmm_common.retry.asyncio.sleep", mock)
    return mock


class TestWithRetry:
    async def test_first_success_no_sleep(self, sleep: AsyncMock) -> None:
        fn = AsyncMock(return_value=42)
        assert await with_retry(fn, "op") == 42
        fn.assert_awaited_once()
        sleep.assert_not_called()

    async def test_recovers_after_failures(self, sleep: AsyncMock) -> None:
        fn = AsyncMock(side_effect=[RuntimeError("a"), RuntimeError("b"), "ok"])
        result = await with_retry(fn, "op", max_retries=3, initial_delay_ms=100, backoff_factor=2)
        assert result == "ok"
        assert [c.args[0] for c in sleep.await_args_list] == [0.1, 0.2]

    async def test_exhaustion_wraps_last_error(self, sleep: AsyncMock) -> None:
        fn = AsyncMock(side_effect=RuntimeError("still down"))

        with pytest.raises(RetryExhaustedError) as exc:
            await with_retry(fn, "getSlot", max_retries=2, initial_delay_ms=1000, backoff_factor=3)

        assert fn.await_count == 3
        assert exc.value.code == 1002
        assert "still down" in exc.value.message
        assert isinstance(exc.value.__cause__, RuntimeError)
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 3.0]

    async def test_zero_retries_single_attempt(self, sleep: AsyncMock) -> None:
        fn = AsyncMock(side_effect=ValueError("bad"))
        with pytest.raises(RetryExhaustedError):
            await with_retry(fn, "op", max_retries=0)
        fn.assert_awaited_once()
        sleep.assert_not_called()

    async def test_defaults_from_settings(self, sleep: AsyncMock) -> None:
        fn = AsyncMock(side_effect=RuntimeError("x"))
        with pytest.raises(RetryExhaustedError):
            await with_retry(fn, "op")
        # RETRY_MAX_RETRIES=3, 1000ms doubling
        assert fn.await_count == 4
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0, 4.0]
