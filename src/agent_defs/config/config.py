"""Configuration management for agent-def-fetcher."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Final

from agent_defs.config.file_ops import write_default_config
from agent_defs.config.paths import default_config_path
from agent_defs.features.definitions.domain.errors import ConfigError
from agent_defs.features.sources.domain.models import default_source_tables
from agent_defs.platform.logging import logger

SYNC_MAX_WORKERS_DEFAULT: Final[int] = 4
RETRY_ATTEMPTS_DEFAULT: Final[int] = 3
RETRY_BASE_DELAY_DEFAULT: Final[float] = 0.5
RETRY_MAX_DELAY_DEFAULT: Final[float] = 8.0
REQUEST_TIMEOUT_DEFAULT: Final[float] = 30.0
REQUEST_INTERVAL_DEFAULT: Final[float] = 0.25
RATE_LIMIT_MAX_WAIT_DEFAULT: Final[float] = 30.0
STALE_AFTER_DAYS_DEFAULT: Final[int] = 7

DEFAULT_CONFIG_TEMPLATE: Final[str] = """\
# agent-def-fetcher sources
#
# Each [[sources]] table adds one remote source. Supported types:
#   claude-code-templates  built-in preset (davila7/claude-code-templates)
#   awesome-subagents      built-in preset (VoltAgent/awesome-claude-code-subagents)
#   github-repo            owner, repo, branch (default "main"), base_path, layout
#   github-gist            gist_id, path_prefix (e.g. "agents/misc/")
#
# Set GITHUB_TOKEN to raise the GitHub API rate limit or read private repos.

[[sources]]
name = "claude-code-templates"
type = "claude-code-templates"

[[sources]]
name = "awesome-subagents"
type = "awesome-subagents"

# [[sources]]
# name = "my-team"
# type = "github-repo"
# owner = "my-org"
# repo = "claude-agents"
# branch = "main"
# base_path = "definitions/"

# [settings]
# sync_max_workers = 4
# retry_attempts = 3
# retry_base_delay = 0.5
# retry_max_delay = 8.0
# request_timeout = 30.0
# request_interval = 0.25
# rate_limit_max_wait = 30.0
# stale_after_days = 7
# log_file = "/path/to/agent-defs.log"
"""


@dataclass
class AppConfig:
    """Application configuration."""

    source_tables: list[dict[str, Any]] = field(default_factory=default_source_tables)

    sync_max_workers: int = SYNC_MAX_WORKERS_DEFAULT
    retry_attempts: int = RETRY_ATTEMPTS_DEFAULT
    retry_base_delay: float = RETRY_BASE_DELAY_DEFAULT
    retry_max_delay: float = RETRY_MAX_DELAY_DEFAULT
    request_timeout: float = REQUEST_TIMEOUT_DEFAULT
    request_interval: float = REQUEST_INTERVAL_DEFAULT
    rate_limit_max_wait: float = RATE_LIMIT_MAX_WAIT_DEFAULT
    stale_after_days: int = STALE_AFTER_DAYS_DEFAULT

    log_file: Path | None = None

    # Singleton instance
    _instance: ClassVar["AppConfig | None"] = None
    _loaded_from: ClassVar[Path | None] = None

    @classmethod
    def load(cls, path: Path | None = None) -> "AppConfig":
        """Load configuration from ``path`` (or the default location).

        A missing file is created from :data:`DEFAULT_CONFIG_TEMPLATE`. A file
        that is not valid TOML is reported and defaults are used instead.

        Raises:
            ConfigError: When the TOML is valid but its tables are malformed.
        """
        config_file = path or default_config_path()
        if cls._instance is not None and cls._loaded_from == config_file:
            return cls._instance

        try:
            if write_default_config(config_file, DEFAULT_CONFIG_TEMPLATE):
                logger.info("Created default configuration at %s", config_file)
        except OSError as exc:
            logger.warning("Could not write default configuration to %s: %s", config_file, exc)

        try:
            with open(config_file, "rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            logger.warning("Failed to parse config at %s, using defaults: %s", config_file, exc)
            data = {}
        except OSError as exc:
            logger.warning("Failed to read config at %s, using defaults: %s", config_file, exc)
            data = {}
        else:
            logger.debug("Configuration loaded from %s", config_file)

        instance = cls.from_mapping(data)
        cls._instance = instance
        cls._loaded_from = config_file
        return instance

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AppConfig":
        """Build a config from parsed TOML data."""

        sources = data.get("sources")
        if sources is None:
            tables = default_source_tables()
        elif isinstance(sources, list) and all(isinstance(item, dict) for item in sources):
            tables = [dict(item) for item in sources]
        else:
            raise ConfigError("'sources' must be an array of tables ([[sources]])")

        settings = data.get("settings", {})
        if not isinstance(settings, dict):
            raise ConfigError("'settings' must be a table")

        log_file = settings.get("log_file")
        return cls(
            source_tables=tables,
            sync_max_workers=_int(settings, "sync_max_workers", SYNC_MAX_WORKERS_DEFAULT),
            retry_attempts=_int(settings, "retry_attempts", RETRY_ATTEMPTS_DEFAULT),
            retry_base_delay=_float(settings, "retry_base_delay", RETRY_BASE_DELAY_DEFAULT),
            retry_max_delay=_float(settings, "retry_max_delay", RETRY_MAX_DELAY_DEFAULT),
            request_timeout=_float(settings, "request_timeout", REQUEST_TIMEOUT_DEFAULT),
            request_interval=_float(settings, "request_interval", REQUEST_INTERVAL_DEFAULT),
            rate_limit_max_wait=_float(settings, "rate_limit_max_wait", RATE_LIMIT_MAX_WAIT_DEFAULT),
            stale_after_days=_int(settings, "stale_after_days", STALE_AFTER_DAYS_DEFAULT),
            log_file=Path(log_file).expanduser() if isinstance(log_file, str) and log_file.strip() else None,
        )

    @classmethod
    def reset(cls) -> None:
        """Forget the cached instance (tests and config reloads)."""

        cls._instance = None
        cls._loaded_from = None


def _int(settings: Mapping[str, Any], key: str, default: int) -> int:
    value = settings.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"settings.{key} must be an integer")
    return value


def _float(settings: Mapping[str, Any], key: str, default: float) -> float:
    value = settings.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"settings.{key} must be a number")
    return float(value)


__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG_TEMPLATE",
    "RATE_LIMIT_MAX_WAIT_DEFAULT",
    "REQUEST_INTERVAL_DEFAULT",
    "REQUEST_TIMEOUT_DEFAULT",
    "RETRY_ATTEMPTS_DEFAULT",
    "RETRY_BASE_DELAY_DEFAULT",
    "RETRY_MAX_DELAY_DEFAULT",
    "STALE_AFTER_DAYS_DEFAULT",
    "SYNC_MAX_WORKERS_DEFAULT",
]
