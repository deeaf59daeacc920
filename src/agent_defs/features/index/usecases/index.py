"""
Summary: In-memory, read-only index over cached definitions.
Why: Browsing, filtering and search must not touch the disk per keystroke.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import final

from agent_defs.features.cache.adapters.store import CacheStore
from agent_defs.features.definitions.domain.errors import AmbiguousDefinition, NotFound
from agent_defs.features.definitions.domain.models import Definition, DefinitionKey, DefinitionKind
from agent_defs.features.definitions.domain.paths import SKILL_ENTRY_NAME


@final
class Index:
    """Immutable view of a set of definitions.

    Canonical order is ``relative_path`` ascending, then ``source_name``.
    Every query returns a new list; the index itself never changes.
    """

    __slots__ = ("_items", "_by_key", "_folded")

    def __init__(self, definitions: Iterable[Definition] = ()) -> None:
        items = sorted(definitions, key=lambda definition: definition.sort_key)
        self._items: tuple[Definition, ...] = tuple(items)
        self._by_key: dict[DefinitionKey, Definition] = {item.key: item for item in items}
        self._folded: tuple[tuple[str, str], ...] = tuple(
            (item.title.casefold(), item.body.casefold()) for item in items
        )

    @classmethod
    def build(cls, definitions: Iterable[Definition]) -> "Index":
        return cls(definitions)

    @classmethod
    def from_store(cls, store: CacheStore) -> "Index":
        """Rebuild from every cached definition."""

        return cls(store.all())

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Definition]:
        return iter(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def all(self) -> list[Definition]:
        return list(self._items)

    def get(self, key: DefinitionKey) -> Definition | None:
        return self._by_key.get(key)

    def by_kind(self, kind: DefinitionKind) -> list[Definition]:
        return [item for item in self._items if item.kind is kind]

    def by_source(self, source_name: str) -> list[Definition]:
        return [item for item in self._items if item.source_name == source_name]

    def search(self, query: str) -> list[Definition]:
        """Case-insensitive substring search over title and body.

        Title matches come first, then body-only matches; each group keeps
        canonical order. Only the empty string returns everything; whitespace
        is part of the needle.
        """

        needle = query.casefold()
        if not needle:
            return self.all()

        title_hits: list[Definition] = []
        body_hits: list[Definition] = []
        for item, (title, body) in zip(self._items, self._folded):
            if needle in title:
                title_hits.append(item)
            elif needle in body:
                body_hits.append(item)
        return title_hits + body_hits

    def query(
        self,
        *,
        kind: DefinitionKind | None = None,
        source: str | None = None,
        text: str = "",
    ) -> list[Definition]:
        """Intersection of the kind, source and text filters, in search order."""

        return [
            item
            for item in self.search(text)
            if (kind is None or item.kind is kind) and (source is None or item.source_name == source)
        ]

    def kinds(self) -> list[DefinitionKind]:
        """Kinds present in the index, in display order."""

        present = {item.kind for item in self._items}
        return [kind for kind in DefinitionKind if kind in present]

    def sources(self) -> list[str]:
        return sorted({item.source_name for item in self._items})

    def counts_by_kind(self) -> dict[DefinitionKind, int]:
        counts: dict[DefinitionKind, int] = {}
        for item in self._items:
            counts[item.kind] = counts.get(item.kind, 0) + 1
        return {kind: counts[kind] for kind in DefinitionKind if kind in counts}

    def find(self, path: str, source: str | None = None) -> Definition:
        """Resolve a user-supplied path, optionally scoped to one source.

        ``path`` may be a relative path or a skill directory id such as
        ``skills/<category>/<name>``.

        Raises:
            NotFound: No definition matches.
            AmbiguousDefinition: Several sources carry the path.
        """

        wanted = path.strip().strip("/")
        candidates = (wanted, f"{wanted}/{SKILL_ENTRY_NAME}")
        matches = [
            item
            for item in self._items
            if item.relative_path in candidates and (source is None or item.source_name == source)
        ]
        if not matches:
            scope = f" in source '{source}'" if source else ""
            raise NotFound(f"No definition found for '{path}'{scope}")
        sources = sorted({item.source_name for item in matches})
        if len(sources) > 1:
            raise AmbiguousDefinition(wanted, sources)
        return matches[0]

    def fingerprint_table(self) -> dict[DefinitionKey, str]:
        """Key to fingerprint mapping, handy for comparing two indexes."""

        return {item.key: item.fingerprint for item in self._items}

    @staticmethod
    def position_of(key: DefinitionKey | None, items: Sequence[Definition]) -> int | None:
        """Index of ``key`` inside ``items`` (a query result), if present."""

        if key is None:
            return None
        for position, item in enumerate(items):
            if item.key == key:
                return position
        return None


__all__ = ["Index"]
