"""Retry policy - Pure functions.

Describes how many times a notification is attempted and how long to
wait between attempts. The waiting itself happens in the dispatcher.
"""

from dataclasses import dataclass


DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 1.0
DEFAULT_MAX_BACKOFF_SECONDS = 30.0


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with fixed or exponential backoff.

    A multiplier of 1.0 gives a fixed interval between attempts.

    Attributes:
        max_attempts: Total attempts per recipient, including the first
        backoff_seconds: Wait after the first failed attempt
        backoff_multiplier: Growth factor applied to each subsequent wait
        max_backoff_seconds: Upper bound for a single wait
    """
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS
    backoff_multiplier: float = 1.0
    max_backoff_seconds: float = DEFAULT_MAX_BACKOFF_SECONDS

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number `attempt` (1-based).

        Pure function.
        """
        delay = self.backoff_seconds * (self.backoff_multiplier ** (attempt - 1))
        return min(delay, self.max_backoff_seconds)

    def should_retry(self, attempt: int) -> bool:
        """Whether another attempt follows failed attempt number `attempt`."""
        return attempt < self.max_attempts

    @property
    def worst_case_seconds(self) -> float:
        """Total backoff time spent when every attempt fails.

        Excludes the time spent inside the attempts themselves.
        """
        return sum(self.delay_for(n) for n in range(1, self.max_attempts))
