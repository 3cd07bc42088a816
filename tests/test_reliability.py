"""
Test suite for reliability patterns.

Validates retry logic for model calls and performance tracking.
"""

import asyncio

import pytest

from explainer.core.exceptions import LLMError
from explainer.utils.reliability import track_performance, with_retry


class TestRetryLogic:
    """Test retry decorator functionality."""

    def test_retry_succeeds_eventually(self):
        """Test retry succeeds after initial failures."""
        call_count = 0

        @with_retry(max_attempts=3, retry_exceptions=(LLMError,), backoff_min=0, backoff_max=0)
        def flaky_func():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise LLMError("Not ready yet")
            return "success"

        result = flaky_func()
        assert result == "success"
        assert call_count == 3

    def test_retry_gives_up_after_max_attempts(self):
        """Test retry re-raises the last error after max attempts."""
        call_count = 0

        @with_retry(max_attempts=2, retry_exceptions=(LLMError,), backoff_min=0, backoff_max=0)
        def always_fail():
            nonlocal call_count
            call_count += 1
            raise LLMError("Always fails")

        with pytest.raises(LLMError):
            always_fail()
        assert call_count == 2

    def test_retry_ignores_non_retry_exceptions(self):
        """Test retry doesn't retry non-specified exceptions."""
        call_count = 0

        @with_retry(max_attempts=3, retry_exceptions=(LLMError,))
        def wrong_exception():
            nonlocal call_count
            call_count += 1
            raise TypeError("Wrong exception type")

        with pytest.raises(TypeError):
            wrong_exception()
        assert call_count == 1  # No retries

    def test_retry_wraps_coroutines(self):
        """Async callables are retried and awaited, not returned as coroutines."""
        call_count = 0

        @with_retry(max_attempts=3, retry_exceptions=(LLMError,), backoff_min=0, backoff_max=0)
        async def flaky_coro():
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise LLMError("Not ready yet")
            return "async success"

        assert asyncio.run(flaky_coro()) == "async success"
        assert call_count == 2


class TestPerformanceTracking:
    """Test performance tracking decorator."""

    def test_returns_wrapped_result(self):
        @track_performance("unit")
        def compute(x):
            return x * 2

        assert compute(21) == 42
        assert compute.__name__ == "compute"

    def test_propagates_errors(self):
        @track_performance("unit")
        def explode():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            explode()
