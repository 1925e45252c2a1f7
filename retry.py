"""
retry.py — Client-side retry with exponential backoff and jitter.

Used by the probe client and the scenario runner for flaky setup calls
(server still starting, network blips). The backend itself never retries.
"""
import random
import time
from typing import Callable, Optional

from config import (
    MAX_RETRIES, RETRY_BASE_DELAY_S, RETRY_MAX_DELAY_S, RETRY_JITTER_PCT,
    get_logger,
)

logger = get_logger("retry")


class RetryError(Exception):
    """Raised when every attempt of an operation failed."""

    def __init__(self, original: BaseException, attempts: int, context: dict):
        super().__init__(f"{original} (after {attempts} attempts)")
        self.original = original
        self.attempts = attempts
        self.context = context


def calculate_backoff_delay(attempt: int, base: float = RETRY_BASE_DELAY_S,
                            maximum: float = RETRY_MAX_DELAY_S,
                            jitter_pct: float = RETRY_JITTER_PCT) -> float:
    """Seconds to wait after failed attempt `attempt` (1-based)."""
    delay = min(base * 2 ** (attempt - 1), maximum)
    return delay + random.uniform(0, jitter_pct * delay)


def with_retry(operation: Callable, context: Optional[dict] = None,
               max_retries: int = MAX_RETRIES,
               retry_on: tuple = (Exception,),
               sleep: Callable[[float], None] = time.sleep):
    """
    Call `operation()` up to `max_retries + 1` times.

    Returns the first successful result. Exceptions outside `retry_on`
    propagate immediately; once attempts are exhausted a RetryError wraps
    the last failure.
    """
    context = context or {}
    name = context.get("operation", getattr(operation, "__name__", "operation"))
    total = max_retries + 1
    last_error = None

    for attempt in range(1, total + 1):
        try:
            start = time.time()
            result = operation()
            elapsed_ms = (time.time() - start) * 1000
            if attempt > 1:
                logger.info("%s succeeded on attempt %d/%d (%.1fms)", name, attempt, total, elapsed_ms)
            return result
        except retry_on as e:
            last_error = e
            logger.warning("%s failed on attempt %d/%d: %s", name, attempt, total, e)
            if attempt < total:
                delay = calculate_backoff_delay(attempt)
                logger.debug("Retrying %s in %.2fs", name, delay)
                sleep(delay)

    raise RetryError(last_error, total, context)
