"""Retry policies for calls to the generation API.

Only rate-limit failures are retried. Two policies exist because callers
disagree on what running out of attempts means: most want the last failure
raised, the chat assistant wants a canned reply instead.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Generic, TypeVar

from wardrobe_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)
T = TypeVar("T")

_RATE_LIMIT_MARKERS = ("429", "quota", "RESOURCE_EXHAUSTED")


def is_rate_limited(exc: BaseException) -> bool:
    """True when ``exc`` looks like a 429 / quota exhaustion from the API."""

    for attr in ("status", "code", "status_code"):
        if getattr(exc, attr, None) == 429:
            return True
    message = str(exc) or ""
    return any(marker in message for marker in _RATE_LIMIT_MARKERS)


class RetryPolicy:
    """Exponential backoff on rate limits; exhaustion re-raises the last failure."""

    def __init__(
        self,
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self._sleep = sleep

    def with_budget(self, max_attempts: int, initial_delay: float) -> "RetryPolicy":
        """Propagating policy on the same clock with a different budget."""

        return RetryPolicy(max_attempts=max_attempts, initial_delay=initial_delay, sleep=self._sleep)

    def run(self, operation: Callable[[], T]) -> T:
        delay = self.initial_delay
        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation()
            except Exception as exc:
                if not is_rate_limited(exc) or attempt == self.max_attempts:
                    raise
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "rate_limited_retrying",
                    attempt=attempt,
                    delay_seconds=delay,
                )
                self._sleep(delay)
                delay *= 2
        raise AssertionError("unreachable")  # pragma: no cover


class DefaultingRetryPolicy(RetryPolicy, Generic[T]):
    """Same backoff, but any failure that escapes it becomes ``default``."""

    def __init__(
        self,
        default: T,
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(max_attempts=max_attempts, initial_delay=initial_delay, sleep=sleep)
        self.default = default

    def run(self, operation: Callable[[], T]) -> T:
        try:
            return super().run(operation)
        except Exception as exc:
            log_event(
                LOGGER,
                logging.WARNING,
                "retry_fell_back_to_default",
                error_type=type(exc).__name__,
            )
            return self.default


__all__ = ["DefaultingRetryPolicy", "RetryPolicy", "is_rate_limited"]
