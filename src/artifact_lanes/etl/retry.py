"""Bounded retry with exponential backoff for remote calls."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try and how long to wait between tries."""

    attempts: int = 3
    base_delay: float = 0.5  # seconds

    def delay_for(self, retry: int) -> float:
        """Pause before retry number `retry` (1-based): base * 2^(retry-1)."""
        return self.base_delay * 2 ** (retry - 1)


DEFAULT_RETRY_POLICY = RetryPolicy()


def call_with_retry(
    func: Callable[[], T],
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "remote call",
) -> T:
    """Call `func` until it succeeds or the policy's attempts are used up.

    Any exception counts as a failed attempt. There is no pause after the
    final attempt.

    Args:
        func: Zero-argument callable to invoke
        policy: Attempt count and backoff base
        sleep: Blocking sleep function (injectable for tests)
        label: Name used in log messages

    Returns:
        The first successful result

    Raises:
        Exception: The last failure once all attempts are exhausted
    """
    for attempt in range(1, policy.attempts + 1):
        try:
            return func()
        except Exception as e:
            if attempt == policy.attempts:
                logger.warning(f"{label} failed after {attempt} attempt(s): {e}")
                raise

            delay = policy.delay_for(attempt)
            logger.debug(f"{label} attempt {attempt} failed: {e}; retrying in {delay:.2f}s")
            sleep(delay)

    raise ValueError(f"Retry policy must allow at least one attempt, got {policy.attempts}")
