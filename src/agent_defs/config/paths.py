"""Shared path utilities for configuration, cache and log locations.

Policy:
- Config: ``$XDG_CONFIG_HOME/agent-def-fetcher/sources.toml`` unless
  overridden by ``AGENT_DEFS_CONFIG``.
- Cache: ``$XDG_CACHE_HOME/agent-def-fetcher`` unless overridden by
  ``AGENT_DEFS_CACHE_DIR``.
- Logs: ``<cache>/logs/agent-defs.log``.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "agent-def-fetcher"
CONFIG_FILE_NAME: Final[str] = "sources.toml"
LOG_FILE_NAME: Final[str] = "agent-defs.log"
ENV_CONFIG_PATH: Final[str] = "AGENT_DEFS_CONFIG"
ENV_CACHE_DIR: Final[str] = "AGENT_DEFS_CACHE_DIR"


def _env_value(env: Mapping[str, str] | None, name: str | None) -> str | None:
    """Non-blank value of ``name`` in ``env`` (``os.environ`` when omitted)."""

    if not name:
        return None
    source = os.environ if env is None else env
    value = (source.get(name) or "").strip()
    return value or None


def resolve_overridable_path(
    *,
    explicit_path: Path | str | None,
    env: Mapping[str, str] | None,
    env_var: str | None,
    default_factory: Callable[[], Path],
) -> Path:
    """Pick the first of explicit path, environment variable and default.

    The winner is user-expanded and made absolute.
    """

    if explicit_path is not None:
        chosen = Path(explicit_path)
    else:
        override = _env_value(env, env_var)
        chosen = Path(override) if override is not None else default_factory()
    return chosen.expanduser().resolve()


def _base_dir(xdg_var: str, home_relative: str, env: Mapping[str, str] | None) -> Path:
    base = _env_value(env, xdg_var)
    return Path(base) if base is not None else Path.home() / home_relative


def default_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Location of the sources TOML file."""

    return resolve_overridable_path(
        explicit_path=None,
        env=env,
        env_var=ENV_CONFIG_PATH,
        default_factory=lambda: _base_dir("XDG_CONFIG_HOME", ".config", env) / APP_DIR_NAME / CONFIG_FILE_NAME,
    )


def default_cache_dir(env: Mapping[str, str] | None = None) -> Path:
    """Cache root holding the manifest journal and definition bodies."""

    return resolve_overridable_path(
        explicit_path=None,
        env=env,
        env_var=ENV_CACHE_DIR,
        default_factory=lambda: _base_dir("XDG_CACHE_HOME", ".cache", env) / APP_DIR_NAME,
    )


def default_log_file(env: Mapping[str, str] | None = None) -> Path:
    return default_cache_dir(env) / "logs" / LOG_FILE_NAME


__all__ = [
    "APP_DIR_NAME",
    "ENV_CACHE_DIR",
    "ENV_CONFIG_PATH",
    "default_cache_dir",
    "default_config_path",
    "default_log_file",
    "resolve_overridable_path",
]
