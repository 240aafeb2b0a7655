"""Tests for bounded retry."""

from unittest.mock import AsyncMock

import pytest

from typoscale.core.retry import RetryConfig, call_with_retry

NO_WAIT = RetryConfig(max_attempts=3, initial_delay=0, max_delay=0, jitter_max=0)


class TestRetryConfig:
    """Tests for RetryConfig."""

    def test_default_config(self) -> None:
        """Test default retry configuration."""
        config = RetryConfig()
        assert config.max_attempts == 3
        assert config.initial_delay == 1.0
        assert config.max_delay == 30.0

    def test_custom_config(self) -> None:
        """Test custom retry configuration."""
        config = RetryConfig(
            max_attempts=5,
            initial_delay=0.5,
            max_delay=30.0,
            retry_exceptions=(ValueError, TypeError),
        )
        assert config.max_attempts == 5
        assert config.retry_exceptions == (ValueError, TypeError)

    def test_with_attempts_never_drops_below_one(self) -> None:
        assert RetryConfig().with_attempts(7).max_attempts == 7
        assert RetryConfig().with_attempts(0).max_attempts == 1


class TestCallWithRetry:
    @pytest.mark.asyncio
    async def test_returns_first_success(self) -> None:
        func = AsyncMock(return_value="ok")

        assert await call_with_retry(func, NO_WAIT, operation="test") == "ok"
        func.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_retries_until_success(self) -> None:
        func = AsyncMock(side_effect=[ConnectionError(), ConnectionError(), "ok"])

        assert await call_with_retry(func, NO_WAIT, operation="test") == "ok"
        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_reraises_last_error_when_exhausted(self) -> None:
        func = AsyncMock(side_effect=ConnectionError("still down"))

        with pytest.raises(ConnectionError, match="still down"):
            await call_with_retry(func, NO_WAIT, operation="test")
        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_propagates_immediately(self) -> None:
        config = RetryConfig(
            max_attempts=3,
            initial_delay=0,
            max_delay=0,
            jitter_max=0,
            retry_exceptions=(ConnectionError,),
        )
        func = AsyncMock(side_effect=ValueError("bad input"))

        with pytest.raises(ValueError):
            await call_with_retry(func, config, operation="test")
        func.assert_awaited_once()
