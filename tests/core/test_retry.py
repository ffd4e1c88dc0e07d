"""Tests for the retry policy."""

import pytest

from src.core.retry import RetryPolicy


class TestDelayFor:
    """Tests for RetryPolicy.delay_for()."""

    def test_default_is_fixed_one_second(self):
        """Default policy waits 1 second between every attempt."""
        policy = RetryPolicy()

        assert [policy.delay_for(n) for n in (1, 2, 3)] == [1.0, 1.0, 1.0]

    def test_exponential_backoff(self):
        """A multiplier grows the wait after each failure."""
        policy = RetryPolicy(max_attempts=5, backoff_seconds=0.5, backoff_multiplier=2.0)

        assert [policy.delay_for(n) for n in (1, 2, 3, 4)] == [0.5, 1.0, 2.0, 4.0]

    def test_backoff_is_capped(self):
        """No single wait exceeds max_backoff_seconds."""
        policy = RetryPolicy(
            max_attempts=10,
            backoff_seconds=1.0,
            backoff_multiplier=3.0,
            max_backoff_seconds=5.0,
        )

        assert policy.delay_for(1) == 1.0
        assert policy.delay_for(2) == 3.0
        assert policy.delay_for(3) == 5.0
        assert policy.delay_for(9) == 5.0


class TestShouldRetry:
    """Tests for RetryPolicy.should_retry()."""

    def test_retries_until_last_attempt(self):
        """Attempts before the last are followed by another attempt."""
        policy = RetryPolicy(max_attempts=3)

        assert policy.should_retry(1) is True
        assert policy.should_retry(2) is True
        assert policy.should_retry(3) is False

    def test_single_attempt_never_retries(self):
        """max_attempts=1 means no retry at all."""
        assert RetryPolicy(max_attempts=1).should_retry(1) is False


class TestWorstCaseSeconds:
    """Tests for RetryPolicy.worst_case_seconds."""

    def test_no_wait_after_final_attempt(self):
        """3 attempts with 1s backoff wait twice."""
        assert RetryPolicy(max_attempts=3, backoff_seconds=1.0).worst_case_seconds == 2.0

    def test_exponential_total(self):
        """Waits are summed with growth applied."""
        policy = RetryPolicy(max_attempts=4, backoff_seconds=1.0, backoff_multiplier=2.0)

        assert policy.worst_case_seconds == pytest.approx(7.0)

    def test_ten_attempts_fixed_backoff(self):
        """10 attempts at 1s each wait 9 seconds in total."""
        assert RetryPolicy(max_attempts=10).worst_case_seconds == 9.0
