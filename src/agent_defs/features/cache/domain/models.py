"""Data structures persisted in the cache manifest."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from agent_defs.features.definitions.domain.models import DefinitionKey, DefinitionKind


@dataclass(slots=True, frozen=True)
class ManifestEntry:
    """Metadata for one cached definition; the body lives in ``body_file``."""

    fingerprint: str
    synced_at: datetime
    kind: DefinitionKind
    title: str
    body_file: str
    description: str | None = None
    category: str | None = None


@dataclass(slots=True)
class CacheManifest:
    """Replayed manifest state."""

    entries: dict[DefinitionKey, ManifestEntry] = field(default_factory=dict)
    last_synced: dict[str, datetime] = field(default_factory=dict)

    def keys_for_source(self, source_name: str) -> list[DefinitionKey]:
        return sorted(key for key in self.entries if key.source_name == source_name)

    def fingerprint(self, key: DefinitionKey) -> str | None:
        entry = self.entries.get(key)
        return entry.fingerprint if entry is not None else None

    def copy(self) -> "CacheManifest":
        return CacheManifest(entries=dict(self.entries), last_synced=dict(self.last_synced))

    def __len__(self) -> int:
        return len(self.entries)


__all__ = ["CacheManifest", "ManifestEntry"]
