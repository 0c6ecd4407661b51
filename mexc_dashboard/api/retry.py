"""
Bounded retry with backoff for callers of the exchange client.

The client is single-shot. Market data callers (klines, trades) wrap calls
with ``retrying`` to retry transport failures a bounded number of times.
"""

import functools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .results import ExchangeResult


logger = logging.getLogger(__name__)


LINEAR = "linear"
EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class RetryPolicy:
    """
    How many times to try a call and how long to wait between tries.

    Linear backoff waits ``base_delay * n`` after the n-th failure (1s, 2s, 3s
    by default); exponential waits ``base_delay * 2 ** (n - 1)`` (1s, 2s, 4s).
    Delays are capped at ``max_delay``.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    backoff: str = LINEAR
    max_delay: float = 60.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff not in (LINEAR, EXPONENTIAL):
            raise ValueError(f"Unknown backoff strategy: {self.backoff}")

    def get_backoff_delay(self, failures: int) -> float:
        if failures <= 0:
            return 0.0
        if self.backoff == EXPONENTIAL:
            delay = self.base_delay * (2 ** (failures - 1))
        else:
            delay = self.base_delay * failures
        return min(delay, self.max_delay)


def _should_retry(result: ExchangeResult) -> bool:
    return isinstance(result, ExchangeResult) and result.retryable


def call_with_retry(func: Callable[..., ExchangeResult], *args,
                    policy: Optional[RetryPolicy] = None,
                    sleep: Callable[[float], None] = time.sleep,
                    **kwargs) -> ExchangeResult:
    """
    Call ``func`` until it succeeds, fails with a non-retryable error, or the
    attempts run out. Returns the last result.
    """
    policy = policy or RetryPolicy()
    result = None

    for attempt in range(1, policy.max_attempts + 1):
        result = func(*args, **kwargs)
        if not _should_retry(result):
            return result

        if attempt < policy.max_attempts:
            delay = policy.get_backoff_delay(attempt)
            logger.warning(f"Attempt {attempt}/{policy.max_attempts} failed: {result.error}, retrying in {delay}s")
            sleep(delay)

    logger.error(f"Giving up after {policy.max_attempts} attempts: {result.error}")
    return result


def retrying(policy: Optional[RetryPolicy] = None,
             sleep: Callable[[float], None] = time.sleep):
    """Decorator form of ``call_with_retry``."""
    def decorator(func: Callable[..., ExchangeResult]) -> Callable[..., ExchangeResult]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            return call_with_retry(func, *args, policy=policy, sleep=sleep, **kwargs)
        return wrapper
    return decorator
