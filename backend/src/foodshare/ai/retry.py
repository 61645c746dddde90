from __future__ import annotations

import logging
import re
import time
from typing import Callable, Optional, TypeVar

from foodshare.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Matched case-insensitively against the error message.
TRANSIENT_PATTERNS = (
    r"\b429\b",
    r"\b503\b",
    r"rate[ _-]?limit",
    r"too many requests",
    r"overload",
    r"quota",
    r"resource[ _]exhausted",
    r"unavailable",
    r"try again later",
)
_TRANSIENT_RE = re.compile("|".join(TRANSIENT_PATTERNS), re.IGNORECASE)


def is_transient_error(exc: BaseException) -> bool:
    return bool(_TRANSIENT_RE.search(str(exc)))


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retry number ``attempt`` (1-based): linear growth, capped."""
    return min(base_delay * attempt, max_delay)


def retry_with_backoff(
    fn: Callable[[], T],
    max_retries: int = 5,
    base_delay: float = 5.0,
    max_delay: float = 60.0,
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """Call ``fn``; retry transient failures up to ``max_retries`` times.

    Non-transient errors propagate on first occurrence. When retries run out
    the last transient error is wrapped in ``ExternalServiceError``.
    """
    sleep = sleep or time.sleep
    attempt = 0
    while True:
        try:
            return fn()
        except Exception as exc:
            if not is_transient_error(exc):
                raise
            if attempt >= max_retries:
                raise ExternalServiceError(
                    f"AI service still unavailable after {max_retries} retries: {exc}"
                ) from exc
            attempt += 1
            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.info("Transient AI error (%s); retry %d/%d in %.1fs", exc, attempt, max_retries, delay)
            sleep(delay)
