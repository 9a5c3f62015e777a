"""
Tests for rate-limit aware retries.
"""

import pytest

from briefly.errors import RateLimitedError
from briefly.retry import RetryingCaller, RetryPolicy, is_rate_limit_error


class ApiError(Exception):
    """Stand-in for an SDK error carrying an HTTP code."""

    def __init__(self, message, code=None, status=None):
        super().__init__(message)
        self.code = code
        self.status = status


class FlakyOperation:
    """Fails with the given errors, then returns a value."""

    def __init__(self, errors, value="ok"):
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


def _caller(sleeps, **policy):
    return RetryingCaller(RetryPolicy(**policy), sleep=sleeps.append)


class TestRetryingCaller:
    """Tests for RetryingCaller.call."""

    def test_success_first_try(self):
        """Test a successful call is not retried."""
        sleeps = []
        op = FlakyOperation([])
        assert _caller(sleeps).call(op) == "ok"
        assert op.calls == 1
        assert sleeps == []

    def test_backoff_schedule(self):
        """Test four rate limits then success waits 4, 8, 16 and 32 seconds."""
        sleeps = []
        op = FlakyOperation([ApiError("Too many requests", code=429) for _ in range(4)])
        assert _caller(sleeps).call(op) == "ok"
        assert op.calls == 5
        assert sleeps == [4.0, 8.0, 16.0, 32.0]

    def test_non_rate_limit_error_not_retried(self):
        """Test other failures propagate after a single attempt."""
        sleeps = []
        op = FlakyOperation([ApiError("Internal error", code=500)])
        with pytest.raises(ApiError, match="Internal error"):
            _caller(sleeps).call(op)
        assert op.calls == 1
        assert sleeps == []

    def test_exhaustion_reraises_last_error(self):
        """Test the last rate-limit error propagates once attempts run out."""
        sleeps = []
        errors = [RateLimitedError(f"limit {i}") for i in range(5)]
        op = FlakyOperation(errors)
        with pytest.raises(RateLimitedError, match="limit 4"):
            _caller(sleeps).call(op)
        assert op.calls == 5
        assert len(sleeps) == 4

    def test_custom_policy(self):
        """Test attempts and base delay come from the policy."""
        sleeps = []
        op = FlakyOperation([RateLimitedError("busy")] * 2)
        with pytest.raises(RateLimitedError):
            _caller(sleeps, max_attempts=2, base_delay=0.5).call(op)
        assert op.calls == 2
        assert sleeps == [0.5]

    def test_delay_for(self):
        """Test delays double per attempt."""
        policy = RetryPolicy()
        assert [policy.delay_for(i) for i in range(4)] == [4.0, 8.0, 16.0, 32.0]


class TestIsRateLimitError:
    """Tests for rate-limit detection."""

    @pytest.mark.parametrize(
        "exc",
        [
            ApiError("boom", code=429),
            ApiError("boom", status="RESOURCE_EXHAUSTED"),
            Exception("429 Too Many Requests"),
            Exception("Resource exhausted for project"),
            Exception("Quota exceeded for metric"),
            RateLimitedError("slow down"),
        ],
    )
    def test_detected(self, exc):
        """Test the known rate-limit signals are recognised."""
        assert is_rate_limit_error(exc)

    @pytest.mark.parametrize(
        "exc",
        [
            ApiError("bad request", code=400),
            ValueError("unexpected payload"),
            ApiError("server error", code=500, status="INTERNAL"),
        ],
    )
    def test_not_detected(self, exc):
        """Test unrelated failures are not treated as rate limits."""
        assert not is_rate_limit_error(exc)
