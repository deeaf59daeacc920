"""Where: src/agent_defs/features/definitions/domain/errors.py
What: Typed failures shared by sources, cache, sync and install.
Why: Callers branch on the failure class rather than on message text.
"""

from __future__ import annotations

from pathlib import Path


class AgentDefsError(Exception):
    """Base class for every error raised by agent_defs."""


class SourceError(AgentDefsError):
    """A source could not produce its listing."""


class NetworkError(SourceError):
    """Transient transport failure; the attempt may be retried."""


class AuthError(SourceError):
    """Non-retryable refusal from the remote (credentials, permissions, quota).

    ``reason`` is a short machine-readable tag such as ``unauthorized``,
    ``forbidden``, ``rate_limited`` or ``not_found``.
    """

    def __init__(self, reason: str, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or reason)


class ParseError(AgentDefsError):
    """A single remote document could not be interpreted."""

    def __init__(self, relative_path: str, message: str) -> None:
        self.relative_path = relative_path
        super().__init__(f"{relative_path}: {message}")


class CacheCorruption(AgentDefsError):
    """The cache manifest cannot be read back."""


class FsError(AgentDefsError):
    """A local filesystem operation failed."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class AlreadyExists(AgentDefsError):
    """The install destination already holds a file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Destination already exists: {path}")


class NotFound(AgentDefsError):
    """No definition matches the requested key."""


class AmbiguousDefinition(NotFound):
    """A path matches definitions from more than one source."""

    def __init__(self, path: str, sources: list[str]) -> None:
        self.path = path
        self.sources = sources
        joined = ", ".join(sources)
        super().__init__(f"'{path}' exists in several sources ({joined}); pass --source")


class ConfigError(AgentDefsError):
    """The sources configuration is structurally invalid."""


__all__ = [
    "AgentDefsError",
    "AlreadyExists",
    "AmbiguousDefinition",
    "AuthError",
    "CacheCorruption",
    "ConfigError",
    "FsError",
    "NetworkError",
    "NotFound",
    "ParseError",
    "SourceError",
]
