"""Where: src/agent_defs/platform/github/rate_limit.py
What: Quota-aware gate in front of every GitHub API request.
Why: Parallel source fetches share one quota; once GitHub reports it spent,
     further requests only burn time until the reset.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Final

from agent_defs.features.definitions.domain.errors import AuthError

REQUEST_INTERVAL_DEFAULT: Final[float] = 0.25
MAX_WAIT_DEFAULT: Final[float] = 30.0


class GitHubRateLimiter:
    """Space requests and honour the quota GitHub advertises in headers.

    ``observe`` records ``x-ratelimit-remaining``/``x-ratelimit-reset`` and
    ``retry-after`` from each response. ``acquire`` then waits out short
    pauses and fails fast with ``AuthError("rate_limited")`` when the next
    window opens later than ``max_wait`` seconds from now.
    """

    def __init__(
        self,
        min_interval: float = REQUEST_INTERVAL_DEFAULT,
        *,
        max_wait: float = MAX_WAIT_DEFAULT,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._min_interval = max(0.0, min_interval)
        self._max_wait = max(0.0, max_wait)
        self._clock = clock
        self._sleep = sleep
        self._lock: Final[threading.Lock] = threading.Lock()
        self._last_start: float | None = None
        self._blocked_until: float | None = None

    @property
    def blocked_until(self) -> float | None:
        """Epoch seconds before which no request should be sent, if known."""

        with self._lock:
            return self._blocked_until

    def acquire(self) -> None:
        """Block until a request may be sent.

        Raises:
            AuthError: When the quota is exhausted for longer than ``max_wait``.
        """

        with self._lock:
            now = self._clock()
            wait = 0.0
            if self._blocked_until is not None:
                blocked = self._blocked_until - now
                if blocked > self._max_wait:
                    raise AuthError("rate_limited", quota_message(blocked))
                if blocked <= 0:
                    self._blocked_until = None
                wait = max(wait, blocked)
            if self._last_start is not None:
                wait = max(wait, self._min_interval - (now - self._last_start))
            if wait > 0:
                self._sleep(wait)
            self._last_start = self._clock()

    def observe(self, headers: Mapping[str, str]) -> None:
        """Update the quota state from lower-cased response headers."""

        now = self._clock()
        pause = parse_retry_after(headers.get("retry-after"), now)
        if pause is None and headers.get("x-ratelimit-remaining", "").strip() == "0":
            pause = parse_reset(headers.get("x-ratelimit-reset"), now)
        if pause is None or pause <= 0:
            return
        with self._lock:
            until = now + pause
            if self._blocked_until is None or until > self._blocked_until:
                self._blocked_until = until


def parse_retry_after(value: str | None, now: float) -> float | None:
    """Seconds to wait from a ``Retry-After`` value (delta or HTTP date)."""

    if not value:
        return None
    stripped = value.strip()
    if stripped.isdigit():
        return float(int(stripped))
    try:
        dt = parsedate_to_datetime(stripped)
    except (TypeError, ValueError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return max(0.0, dt.timestamp() - now)


def parse_reset(value: str | None, now: float) -> float | None:
    """Seconds until the epoch timestamp in ``X-RateLimit-Reset``."""

    if not value or not value.strip().isdigit():
        return None
    return max(0.0, float(int(value.strip())) - now)


def quota_message(wait: float | None) -> str:
    if wait is None:
        return "GitHub API rate limit exceeded; set GITHUB_TOKEN for a higher quota"
    return f"GitHub API rate limit exceeded; retry in {int(wait)}s or set GITHUB_TOKEN"


__all__ = [
    "GitHubRateLimiter",
    "MAX_WAIT_DEFAULT",
    "REQUEST_INTERVAL_DEFAULT",
    "parse_reset",
    "parse_retry_after",
    "quota_message",
]
