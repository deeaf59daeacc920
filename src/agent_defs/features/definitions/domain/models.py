"""Data structures describing cached definitions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Final


class DefinitionKind(str, Enum):
    """Categories of definition documents, in display order."""

    AGENT = "agent"
    COMMAND = "command"
    HOOK = "hook"
    MCP = "mcp"
    SETTING = "setting"
    SKILL = "skill"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def directory(self) -> str:
        """Top-level directory name used by canonical layouts."""

        return _DIRECTORIES[self]

    @property
    def order(self) -> int:
        return list(DefinitionKind).index(self)

    @staticmethod
    def parse(value: str) -> "DefinitionKind | None":
        """Map singular or plural spellings (any case) to a kind."""

        normalized = value.strip().lower()
        for kind in DefinitionKind:
            if normalized in (kind.value, kind.directory):
                return kind
        if normalized in ("mcp-server", "mcp-servers", "mcp_servers"):
            return DefinitionKind.MCP
        return None

    @staticmethod
    def from_user_input(value: str) -> "DefinitionKind":
        """Translate raw CLI input into the matching kind."""

        kind = DefinitionKind.parse(value)
        if kind is not None:
            return kind
        valid: Final[str] = ", ".join(k.value for k in DefinitionKind)
        msg = f"Unsupported kind '{value}'. Valid options: {valid}"
        raise ValueError(msg)


_LABELS: Final[dict[DefinitionKind, str]] = {
    DefinitionKind.AGENT: "Agents",
    DefinitionKind.COMMAND: "Commands",
    DefinitionKind.HOOK: "Hooks",
    DefinitionKind.MCP: "MCP Servers",
    DefinitionKind.SETTING: "Settings",
    DefinitionKind.SKILL: "Skills",
}

_DIRECTORIES: Final[dict[DefinitionKind, str]] = {
    DefinitionKind.AGENT: "agents",
    DefinitionKind.COMMAND: "commands",
    DefinitionKind.HOOK: "hooks",
    DefinitionKind.MCP: "mcps",
    DefinitionKind.SETTING: "settings",
    DefinitionKind.SKILL: "skills",
}


@dataclass(slots=True, frozen=True, order=True)
class DefinitionKey:
    """Unique identity of a definition: ``(source_name, relative_path)``."""

    source_name: str
    relative_path: str

    def __str__(self) -> str:
        return f"{self.source_name}:{self.relative_path}"


@dataclass(slots=True, frozen=True)
class RemoteRecord:
    """One document as listed by a source, before it reaches the cache."""

    relative_path: str
    kind: DefinitionKind
    title: str
    body: str
    fingerprint: str
    description: str | None = None
    category: str | None = None


@dataclass(slots=True, frozen=True)
class Definition:
    """A cached definition document."""

    source_name: str
    relative_path: str
    kind: DefinitionKind
    title: str
    body: str
    fingerprint: str
    synced_at: datetime
    description: str | None = None
    category: str | None = None

    @property
    def key(self) -> DefinitionKey:
        return DefinitionKey(self.source_name, self.relative_path)

    @property
    def sort_key(self) -> tuple[str, str]:
        """Canonical ordering: relative path, then source name."""

        return (self.relative_path, self.source_name)

    @classmethod
    def from_record(cls, source_name: str, record: RemoteRecord, synced_at: datetime) -> "Definition":
        return cls(
            source_name=source_name,
            relative_path=record.relative_path,
            kind=record.kind,
            title=record.title,
            body=record.body,
            fingerprint=record.fingerprint,
            synced_at=synced_at,
            description=record.description,
            category=record.category,
        )


__all__ = [
    "Definition",
    "DefinitionKey",
    "DefinitionKind",
    "RemoteRecord",
]
