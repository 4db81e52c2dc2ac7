from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from morning_secretary.errors import ErrorKind, classify_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 3
BASE_DELAY_SECONDS = 1.0


@dataclass
class RetryPolicy:
    """
    Retry a remote call on rate limiting with exponential backoff.

    Only rate-limit errors are retried, at most ``max_retries`` times, waiting
    ``base_delay * 2**attempt`` seconds before each retry (1s, 2s, 4s by default).
    Auth failures and any other error are raised immediately. The error that
    ends the loop is always re-raised unmodified.
    """

    max_retries: int = MAX_RETRIES
    base_delay: float = BASE_DELAY_SECONDS
    # Blocks only the calling thread; tests inject a recorder.
    sleep_fn: Callable[[float], None] = time.sleep

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (2 ** attempt)

    def execute(self, operation: Callable[[], T], *, label: str = "remote call") -> T:
        attempt = 0
        while True:
            try:
                return operation()
            except Exception as exc:
                kind = classify_error(exc)
                if kind is not ErrorKind.RATE_LIMITED:
                    logger.debug("%s failed (%s), not retrying: %s", label, kind.value, exc)
                    raise
                if attempt >= self.max_retries:
                    logger.error("%s still rate limited after %d retries", label, self.max_retries)
                    raise

                delay = self.delay_for(attempt)
                logger.warning(
                    "%s rate limited. Retrying in %.1fs (retry %d/%d)",
                    label,
                    delay,
                    attempt + 1,
                    self.max_retries,
                )
                self.sleep_fn(delay)
                attempt += 1
