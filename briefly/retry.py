from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from .errors import RateLimitedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RATE_LIMIT_MARKERS = ("429", "resource_exhausted", "resource exhausted", "quota exceeded")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    base_delay: float = 4.0  # seconds

    def delay_for(self, attempt: int) -> float:
        """Wait before retrying after the 0-indexed ``attempt`` failed."""
        return self.base_delay * (2 ** attempt)


def _describe(exc: BaseException) -> str:
    parts = [type(exc).__name__, str(exc), repr(exc)]
    for attr in ("status", "code", "status_code", "details", "response_json"):
        value = getattr(exc, attr, None)
        if value is None:
            continue
        try:
            parts.append(json.dumps(value, default=str))
        except (TypeError, ValueError):
            parts.append(str(value))
    return " ".join(parts).lower()


def is_rate_limit_error(exc: BaseException) -> bool:
    if isinstance(exc, RateLimitedError):
        return True
    for attr in ("status", "code", "status_code"):
        if getattr(exc, attr, None) == 429:
            return True
    text = _describe(exc)
    return any(marker in text for marker in _RATE_LIMIT_MARKERS)


class RetryingCaller:
    """Runs remote operations, backing off exponentially on rate limits only.

    Any other failure propagates on the first attempt. Once attempts are
    exhausted the last error propagates unchanged.
    """

    def __init__(self, policy: RetryPolicy | None = None, sleep: Callable[[float], None] = time.sleep):
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    def call(self, operation: Callable[[], T], label: str = "remote call") -> T:
        attempts = max(1, self.policy.max_attempts)
        for attempt in range(attempts):
            try:
                return operation()
            except Exception as exc:
                if not is_rate_limit_error(exc) or attempt >= attempts - 1:
                    raise
                wait = self.policy.delay_for(attempt)
                logger.warning(
                    "Rate limit hit on %s (attempt %d/%d). Retrying in %.1fs...",
                    label, attempt + 1, attempts, wait,
                )
                self._sleep(wait)
        raise RuntimeError("Unreachable")
