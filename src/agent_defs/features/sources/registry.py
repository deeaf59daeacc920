"""Where: src/agent_defs/features/sources/registry.py
What: Ordered, read-only collection of configured sources and their adapters.
Why: Sync and filters need one place that maps a source name to behaviour.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, final

from agent_defs.features.definitions.domain.errors import ConfigError, NotFound
from agent_defs.features.sources.adapters import GitHubGistSource, GitHubRepoSource
from agent_defs.features.sources.domain.models import SourceConfig, SourceType
from agent_defs.features.sources.usecases.ports import DefinitionSource
from agent_defs.platform.github.http_client import GitHubHTTPClient


@final
class SourceRegistry:
    """Configured sources keyed by unique name, in configuration order."""

    def __init__(
        self,
        configs: Iterable[SourceConfig],
        *,
        adapters: Mapping[SourceType, DefinitionSource] | None = None,
    ) -> None:
        self._configs: dict[str, SourceConfig] = {}
        for config in configs:
            if config.name in self._configs:
                raise ConfigError(f"duplicate source name '{config.name}'")
            self._configs[config.name] = config
        self._adapters: dict[SourceType, DefinitionSource] = dict(adapters or {})

    @classmethod
    def from_tables(
        cls,
        tables: Iterable[Mapping[str, Any]],
        *,
        adapters: Mapping[SourceType, DefinitionSource] | None = None,
    ) -> "SourceRegistry":
        return cls((SourceConfig.from_table(table) for table in tables), adapters=adapters)

    def __iter__(self) -> Iterator[SourceConfig]:
        return iter(self._configs.values())

    def __len__(self) -> int:
        return len(self._configs)

    def names(self) -> list[str]:
        return list(self._configs)

    def enabled(self) -> list[SourceConfig]:
        return [config for config in self._configs.values() if config.enabled]

    def get(self, name: str) -> SourceConfig:
        try:
            return self._configs[name]
        except KeyError:
            raise NotFound(f"Unknown source '{name}'") from None

    def source_for(self, config: SourceConfig) -> DefinitionSource:
        """Return the adapter implementing ``config.type``."""

        try:
            return self._adapters[config.type]
        except KeyError:
            raise ConfigError(f"no adapter registered for source type '{config.type.value}'") from None


def github_adapters(client: GitHubHTTPClient) -> dict[SourceType, DefinitionSource]:
    """Default adapters sharing one GitHub client."""

    return {
        SourceType.GITHUB_REPO: GitHubRepoSource(client),
        SourceType.GITHUB_GIST: GitHubGistSource(client),
    }


__all__ = ["SourceRegistry", "github_adapters"]
