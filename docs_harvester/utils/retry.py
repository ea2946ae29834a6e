"""
Retry policy for page-level failures.
"""

from dataclasses import dataclass

from .constants import DEFAULT_RETRIES, DEFAULT_RETRY_DELAY


def backoff_delay(attempt: int, base_delay: float = DEFAULT_RETRY_DELAY) -> float:
    """
    Seconds to wait after a failed attempt.

    The wait grows with the attempt number: base * attempt.

    Args:
        attempt: 1-based number of the attempt that just failed
        base_delay: Delay after the first failure

    Returns:
        Delay in seconds
    """
    return base_delay * max(attempt, 1)


@dataclass
class RetryPolicy:
    """
    Bounded retry schedule.

    ``attempts`` counts every try, the first included, so the default of 3
    means one try plus two retries.
    """

    attempts: int = DEFAULT_RETRIES
    base_delay: float = DEFAULT_RETRY_DELAY

    def __post_init__(self):
        self.attempts = max(1, self.attempts)

    def delay_for(self, attempt: int) -> float:
        return backoff_delay(attempt, self.base_delay)

    def should_retry(self, attempt: int) -> bool:
        return attempt < self.attempts
