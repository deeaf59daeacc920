"""Application service wiring sources, cache, sync, index and install."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from logging import Logger, getLogger
from pathlib import Path
from typing import final

from agent_defs.config.config import AppConfig
from agent_defs.config.paths import default_cache_dir
from agent_defs.config.settings import (
    SyncSettings,
    github_token,
    rate_limit_max_wait,
    request_interval,
    request_timeout,
    stale_after_days,
)
from agent_defs.features.cache.adapters.store import CacheStore
from agent_defs.features.definitions.domain.errors import CacheCorruption, FsError
from agent_defs.features.definitions.domain.models import Definition
from agent_defs.features.index.usecases.index import Index
from agent_defs.features.install.domain.models import InstallOutcome
from agent_defs.features.install.usecases.install_manager import InstallManager
from agent_defs.features.sources.registry import SourceRegistry, github_adapters
from agent_defs.features.sync.domain.models import SyncReport
from agent_defs.features.sync.usecases.sync_engine import ProgressCallback, SyncEngine
from agent_defs.platform.filesystem import ensure_directory
from agent_defs.platform.github.http_client import GitHubHTTPClient
from agent_defs.platform.github.rate_limit import GitHubRateLimiter


class Freshness(str, Enum):
    """How current a source's cached listing is."""

    NEVER_SYNCED = "never_synced"
    STALE = "stale"
    FRESH = "fresh"


@dataclass(slots=True, frozen=True)
class SourceFreshness:
    source_name: str
    status: Freshness
    last_synced: datetime | None


@final
class CatalogService:
    """Application façade used by the CLI and the terminal browser."""

    def __init__(
        self,
        *,
        config: AppConfig | None = None,
        cache_dir: Path | None = None,
        registry: SourceRegistry | None = None,
        store: CacheStore | None = None,
        engine: SyncEngine | None = None,
        installer: InstallManager | None = None,
        env: Mapping[str, str] | None = None,
        clock: Callable[[], datetime] | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._config = config or AppConfig.load()
        self._logger = logger or getLogger(__name__)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        if registry is None:
            limiter = GitHubRateLimiter(
                request_interval(self._config),
                max_wait=rate_limit_max_wait(self._config),
            )
            client = GitHubHTTPClient(
                github_token(env),
                timeout=request_timeout(self._config),
                limiter=limiter,
            )
            registry = SourceRegistry.from_tables(self._config.source_tables, adapters=github_adapters(client))
        self._registry = registry

        if store is None:
            root = cache_dir or default_cache_dir(env)
            try:
                _ = ensure_directory(root)
            except OSError as exc:
                raise FsError(root, f"cache directory is unusable: {exc}") from exc
            store = CacheStore(root)
        self._store = store

        self._engine = engine or SyncEngine(
            self._store,
            SyncSettings.from_config(self._config),
            clock=self._clock,
            logger=self._logger,
        )
        self._installer = installer or InstallManager(logger=self._logger)
        self._stale_after = timedelta(days=stale_after_days(self._config))

    @property
    def registry(self) -> SourceRegistry:
        return self._registry

    @property
    def store(self) -> CacheStore:
        return self._store

    def load_index(self) -> Index:
        """Build an index from the cache, starting over if the manifest is corrupt."""

        try:
            _ = self._store.load()
        except CacheCorruption as exc:
            moved_to = self._store.reset()
            self._logger.warning(
                "Cache manifest is corrupt (%s); starting with an empty cache%s",
                exc,
                f", old manifest kept at {moved_to}" if moved_to else "",
            )
        return Index.from_store(self._store)

    def freshness(self) -> list[SourceFreshness]:
        """Freshness of every enabled source."""

        now = self._clock()
        reports: list[SourceFreshness] = []
        for config in self._registry.enabled():
            last = self._store.last_synced(config.name)
            if last is None:
                status = Freshness.NEVER_SYNCED
            elif now - last >= self._stale_after:
                status = Freshness.STALE
            else:
                status = Freshness.FRESH
            reports.append(SourceFreshness(config.name, status, last))
        return reports

    def ensure_synced(self, *, progress: ProgressCallback | None = None) -> SyncReport | None:
        """Sync sources that have never been synced and warn about stale ones.

        Returns:
            SyncReport | None: The report when a pass ran, else ``None``.
        """

        never: list[str] = []
        for item in self.freshness():
            if item.status is Freshness.NEVER_SYNCED:
                never.append(item.source_name)
            elif item.status is Freshness.STALE and item.last_synced is not None:
                age = (self._clock() - item.last_synced).days
                self._logger.warning(
                    "Source '%s' was last synced %d days ago; run 'agent-defs sync' to refresh",
                    item.source_name,
                    age,
                )
        if not never:
            return None
        self._logger.info("Fetching never-synced sources: %s", ", ".join(never))
        return self.sync(only=never, progress=progress)

    def sync(
        self,
        *,
        only: Sequence[str] | None = None,
        progress: ProgressCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> SyncReport:
        return self._engine.sync(self._registry, only=only, progress=progress, cancel=cancel)

    def destination_for(self, definition: Definition, target_dir: Path) -> Path:
        return self._installer.destination_for(definition, target_dir)

    def install(self, definition: Definition, target_dir: Path, *, overwrite: bool = False) -> InstallOutcome:
        return self._installer.install(definition, target_dir, overwrite=overwrite)


__all__ = ["CatalogService", "Freshness", "SourceFreshness"]
