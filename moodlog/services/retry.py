"""
Bounded retry with fixed backoff and an overall timeout.

Replaces "poll again in two seconds" chains: the caller states how many
attempts it allows, how long to wait between them and the total budget;
exhaustion is reported as ReviewNotReadyError.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

from moodlog.core.errors import ReviewNotReadyError

logger = logging.getLogger("moodlog.reviews")

T = TypeVar("T")


def retry_until(
    fetch: Callable[[], Optional[T]],
    accept: Callable[[T], bool],
    attempts: int = 3,
    backoff: float = 2.0,
    timeout: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """
    Call `fetch` until it returns a value `accept` approves.
    Raises ReviewNotReadyError after `attempts` tries, or earlier when the
    next wait would overrun `timeout`.
    """
    attempts = max(1, attempts)
    started = clock()
    for attempt in range(1, attempts + 1):
        value = fetch()
        if value is not None and accept(value):
            return value
        if attempt == attempts:
            break
        if timeout is not None and (clock() - started) + backoff > timeout:
            logger.info("Readiness wait timed out after %d attempt(s)", attempt)
            raise ReviewNotReadyError(attempts=attempt, reason="timeout")
        logger.debug("Attempt %d/%d not ready, retrying in %.1fs", attempt, attempts, backoff)
        sleep(backoff)
    raise ReviewNotReadyError(attempts=attempts)
