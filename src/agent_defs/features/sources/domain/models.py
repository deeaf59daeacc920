"""Where: src/agent_defs/features/sources/domain/models.py
What: Configuration records describing remote definition sources.
Why: Source behaviour is selected by data, not by subclassing per source.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final

from agent_defs.features.definitions.domain.errors import ConfigError


class SourceType(str, Enum):
    """Transport used to list a source."""

    GITHUB_REPO = "github-repo"
    GITHUB_GIST = "github-gist"


class Layout(str, Enum):
    """Path transform applied to files of a repository source."""

    CANONICAL = "canonical"
    AWESOME_SUBAGENTS = "awesome-subagents"

    @staticmethod
    def from_user_input(value: str) -> "Layout":
        normalized = value.strip().lower()
        for layout in Layout:
            if layout.value == normalized:
                return layout
        valid: Final[str] = ", ".join(item.value for item in Layout)
        raise ConfigError(f"Unsupported layout '{value}'. Valid options: {valid}")


@dataclass(slots=True, frozen=True)
class SourceConfig:
    """One configured source; read-only after load."""

    name: str
    type: SourceType
    location: str
    branch: str = "main"
    base_path: str | None = None
    layout: Layout = Layout.CANONICAL
    path_prefix: str | None = None
    enabled: bool = True

    @property
    def owner_repo(self) -> tuple[str, str]:
        """Split ``owner/repo`` for repository sources."""

        owner, _, repo = self.location.partition("/")
        return owner, repo

    @classmethod
    def from_table(cls, table: Mapping[str, Any]) -> "SourceConfig":
        """Build a config from one ``[[sources]]`` TOML table.

        Accepts the preset types ``claude-code-templates`` and
        ``awesome-subagents`` as well as explicit ``github-repo`` and
        ``github-gist`` entries.

        Raises:
            ConfigError: When required keys are missing or mistyped.
        """

        name = _required_str(table, "name", fallback_key="label")
        raw_type = _required_str(table, "type")
        enabled = table.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ConfigError(f"source '{name}': 'enabled' must be a boolean")

        preset = PRESETS.get(raw_type)
        if preset is not None:
            return cls(
                name=name,
                type=preset.type,
                location=preset.location,
                branch=preset.branch,
                base_path=preset.base_path,
                layout=preset.layout,
                enabled=enabled,
            )

        if raw_type == SourceType.GITHUB_REPO.value:
            owner = _optional_str(table, "owner")
            repo = _optional_str(table, "repo")
            location = f"{owner}/{repo}" if owner and repo else _optional_str(table, "location")
            if not location or "/" not in location:
                raise ConfigError(f"source '{name}': github-repo needs 'owner' and 'repo' (or 'location')")
            layout_value = _optional_str(table, "layout")
            return cls(
                name=name,
                type=SourceType.GITHUB_REPO,
                location=location,
                branch=_optional_str(table, "branch") or "main",
                base_path=_normalize_prefix(_optional_str(table, "base_path")),
                layout=Layout.from_user_input(layout_value) if layout_value else Layout.CANONICAL,
                enabled=enabled,
            )

        if raw_type == SourceType.GITHUB_GIST.value:
            gist_id = _optional_str(table, "gist_id") or _optional_str(table, "location")
            if not gist_id:
                raise ConfigError(f"source '{name}': github-gist needs 'gist_id'")
            return cls(
                name=name,
                type=SourceType.GITHUB_GIST,
                location=gist_id,
                path_prefix=_normalize_prefix(_optional_str(table, "path_prefix")),
                enabled=enabled,
            )

        valid = ", ".join([*PRESETS, SourceType.GITHUB_REPO.value, SourceType.GITHUB_GIST.value])
        raise ConfigError(f"source '{name}': unknown type '{raw_type}'. Valid options: {valid}")


@dataclass(slots=True, frozen=True)
class _Preset:
    type: SourceType
    location: str
    branch: str
    base_path: str | None
    layout: Layout


PRESETS: Final[dict[str, _Preset]] = {
    "claude-code-templates": _Preset(
        type=SourceType.GITHUB_REPO,
        location="davila7/claude-code-templates",
        branch="main",
        base_path="cli-tool/components/",
        layout=Layout.CANONICAL,
    ),
    "awesome-subagents": _Preset(
        type=SourceType.GITHUB_REPO,
        location="VoltAgent/awesome-claude-code-subagents",
        branch="main",
        base_path=None,
        layout=Layout.AWESOME_SUBAGENTS,
    ),
}


def default_source_tables() -> list[dict[str, Any]]:
    """Source tables used when no configuration file exists."""

    return [
        {"name": "claude-code-templates", "type": "claude-code-templates"},
        {"name": "awesome-subagents", "type": "awesome-subagents"},
    ]


def _required_str(table: Mapping[str, Any], key: str, *, fallback_key: str | None = None) -> str:
    value = table.get(key)
    if value is None and fallback_key is not None:
        value = table.get(fallback_key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"source entry is missing a '{key}' string: {dict(table)!r}")
    return value.strip()


def _optional_str(table: Mapping[str, Any], key: str) -> str | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string")
    return value.strip() or None


def _normalize_prefix(value: str | None) -> str | None:
    if not value:
        return None
    stripped = value.strip("/")
    return f"{stripped}/" if stripped else None


__all__ = [
    "Layout",
    "PRESETS",
    "SourceConfig",
    "SourceType",
    "default_source_tables",
]
