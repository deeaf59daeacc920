"""Where: src/agent_defs/config/settings.py
What: Validated runtime settings derived from the loaded configuration.
Why: Feature layers receive plain values and never touch config files.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

from agent_defs.config.config import (
    RATE_LIMIT_MAX_WAIT_DEFAULT,
    REQUEST_INTERVAL_DEFAULT,
    REQUEST_TIMEOUT_DEFAULT,
    RETRY_ATTEMPTS_DEFAULT,
    RETRY_BASE_DELAY_DEFAULT,
    RETRY_MAX_DELAY_DEFAULT,
    STALE_AFTER_DAYS_DEFAULT,
    SYNC_MAX_WORKERS_DEFAULT,
    AppConfig,
)

ENV_GITHUB_TOKEN: Final[str] = "GITHUB_TOKEN"

# Upper bound for concurrent source fetches regardless of configuration.
MAX_WORKERS_CEILING: Final[int] = 16


@dataclass(slots=True, frozen=True)
class SyncSettings:
    """Concurrency and retry parameters for a reconciliation pass."""

    max_workers: int = SYNC_MAX_WORKERS_DEFAULT
    retry_attempts: int = RETRY_ATTEMPTS_DEFAULT
    retry_base_delay: float = RETRY_BASE_DELAY_DEFAULT
    retry_max_delay: float = RETRY_MAX_DELAY_DEFAULT

    @classmethod
    def from_config(cls, config: AppConfig) -> "SyncSettings":
        workers = config.sync_max_workers if config.sync_max_workers > 0 else SYNC_MAX_WORKERS_DEFAULT
        attempts = config.retry_attempts if config.retry_attempts > 0 else RETRY_ATTEMPTS_DEFAULT
        base_delay = config.retry_base_delay if config.retry_base_delay >= 0 else RETRY_BASE_DELAY_DEFAULT
        max_delay = max(base_delay, config.retry_max_delay)
        return cls(
            max_workers=min(workers, MAX_WORKERS_CEILING),
            retry_attempts=attempts,
            retry_base_delay=base_delay,
            retry_max_delay=max_delay,
        )

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (1-based), exponential and capped."""

        return min(self.retry_max_delay, self.retry_base_delay * (2 ** (attempt - 1)))


def request_timeout(config: AppConfig) -> float:
    return config.request_timeout if config.request_timeout > 0 else REQUEST_TIMEOUT_DEFAULT


def request_interval(config: AppConfig) -> float:
    """Minimum spacing between GitHub requests; zero disables spacing."""

    return config.request_interval if config.request_interval >= 0 else REQUEST_INTERVAL_DEFAULT


def rate_limit_max_wait(config: AppConfig) -> float:
    return config.rate_limit_max_wait if config.rate_limit_max_wait >= 0 else RATE_LIMIT_MAX_WAIT_DEFAULT


def stale_after_days(config: AppConfig) -> int:
    return config.stale_after_days if config.stale_after_days > 0 else STALE_AFTER_DAYS_DEFAULT


def github_token(env: Mapping[str, str] | None = None) -> str | None:
    """Optional bearer token; an unset or blank variable means anonymous access."""

    mapping = env if env is not None else os.environ
    value = (mapping.get(ENV_GITHUB_TOKEN) or "").strip()
    return value or None


__all__ = [
    "ENV_GITHUB_TOKEN",
    "MAX_WORKERS_CEILING",
    "SyncSettings",
    "github_token",
    "rate_limit_max_wait",
    "request_interval",
    "request_timeout",
    "stale_after_days",
]
