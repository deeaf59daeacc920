"""
Summary: Reconcile remote source listings with the on-disk cache.
Why: One failing source must never block or corrupt the others.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import final

from agent_defs.config.settings import SyncSettings
from agent_defs.features.cache.adapters.store import CacheStore
from agent_defs.features.definitions.domain.errors import (
    AuthError,
    ConfigError,
    FsError,
    NetworkError,
    ParseError,
)
from agent_defs.features.definitions.domain.models import Definition, DefinitionKey, RemoteRecord
from agent_defs.features.sources.domain.models import SourceConfig
from agent_defs.features.sources.registry import SourceRegistry
from agent_defs.features.sources.usecases.ports import DefinitionSource, ListingItem
from agent_defs.features.sync.domain.models import SourceOutcome, SyncPhase, SyncProgress, SyncReport
from agent_defs.platform.logging import logger as default_logger

ProgressCallback = Callable[[SyncProgress], None]

CANCELLED_REASON = "cancelled"
NETWORK_REASON = "network"
CACHE_REASON = "cache_write"


class _Cancelled(Exception):
    pass


@final
class SyncEngine:
    """Run reconciliation passes against a :class:`CacheStore`."""

    def __init__(
        self,
        store: CacheStore,
        settings: SyncSettings | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._settings = settings or SyncSettings()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._logger = logger or default_logger

    def sync(
        self,
        registry: SourceRegistry,
        *,
        only: Sequence[str] | None = None,
        progress: ProgressCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> SyncReport:
        """Fetch every enabled source concurrently and apply the differences.

        Args:
            registry: Configured sources and their adapters.
            only: Restrict the pass to these source names.
            progress: Called from worker threads with progress notifications.
            cancel: Once set, no new fetch attempt starts.

        Returns:
            SyncReport: One outcome per source, in configuration order.
        """

        cancel_event = cancel or threading.Event()
        configs = [
            config for config in registry.enabled() if only is None or config.name in only
        ]
        report = SyncReport()
        if not configs:
            return report

        _ = self._store.manifest()

        workers = max(1, min(self._settings.max_workers, len(configs)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="agent-defs-sync") as pool:
            futures: list[tuple[SourceConfig, Future[SourceOutcome]]] = [
                (
                    config,
                    pool.submit(
                        self._sync_source,
                        config,
                        registry,
                        cancel_event,
                        progress,
                    ),
                )
                for config in configs
            ]
            for config, future in futures:
                try:
                    report.outcomes.append(future.result())
                except Exception as exc:  # isolate unexpected failures per source
                    self._logger.exception("Unexpected failure syncing %s", config.name)
                    report.outcomes.append(
                        SourceOutcome(source_name=config.name, error=str(exc) or type(exc).__name__, error_reason="internal")
                    )

        if self._store.needs_compaction:
            try:
                self._store.compact()
            except FsError as exc:
                self._logger.warning("Cache compaction failed: %s", exc)

        self._logger.info("%s", report.summary())
        return report

    # --- Source --------------------------------------------------------------

    def _sync_source(
        self,
        config: SourceConfig,
        registry: SourceRegistry,
        cancel: threading.Event,
        progress: ProgressCallback | None,
    ) -> SourceOutcome:
        outcome = SourceOutcome(source_name=config.name)
        if cancel.is_set():
            return self._fail(outcome, "sync cancelled before start", CANCELLED_REASON, progress)
        try:
            source = registry.source_for(config)
        except ConfigError as exc:
            return self._fail(outcome, str(exc), "config", progress)

        self._logger.info("Syncing source: %s", config.name)
        _notify(progress, SyncProgress(config.name, SyncPhase.STARTED))

        try:
            listing = self._fetch_with_retry(config, source, cancel, progress)
        except _Cancelled:
            return self._fail(outcome, "sync cancelled", CANCELLED_REASON, progress)
        except AuthError as exc:
            return self._fail(outcome, str(exc), exc.reason, progress)
        except NetworkError as exc:
            return self._fail(outcome, str(exc), NETWORK_REASON, progress)

        try:
            self._reconcile(config.name, listing, outcome)
            self._store.record_sync(config.name, self._clock())
        except FsError as exc:
            # Writes that landed before the failure are picked up as unchanged next pass.
            outcome.clear_counts()
            return self._fail(outcome, str(exc), CACHE_REASON, progress)

        self._logger.info("Synced source: %s", outcome.describe())
        _notify(progress, SyncProgress(config.name, SyncPhase.FINISHED, outcome.describe()))
        return outcome

    def _fetch_with_retry(
        self,
        config: SourceConfig,
        source: DefinitionSource,
        cancel: threading.Event,
        progress: ProgressCallback | None,
    ) -> list[ListingItem]:
        attempts = self._settings.retry_attempts
        for attempt in range(1, attempts + 1):
            if cancel.is_set():
                raise _Cancelled()
            try:
                return list(source.list(config))
            except NetworkError as exc:
                if attempt >= attempts:
                    raise
                delay = self._settings.backoff_delay(attempt)
                self._logger.warning(
                    "Source %s failed (%s); retry %d/%d in %.1fs",
                    config.name,
                    exc,
                    attempt,
                    attempts - 1,
                    delay,
                )
                _notify(progress, SyncProgress(config.name, SyncPhase.RETRYING, str(exc)))
                if cancel.wait(delay):
                    raise _Cancelled() from exc
        raise NetworkError(f"{config.name}: no attempts configured")

    def _reconcile(self, source_name: str, listing: list[ListingItem], outcome: SourceOutcome) -> None:
        records: dict[str, RemoteRecord] = {}
        for item in listing:
            if isinstance(item, ParseError):
                outcome.skipped_count += 1
                outcome.warnings.append(str(item))
                self._logger.warning("Skipping %s in %s: %s", item.relative_path, source_name, item)
                continue
            if item.relative_path in records:
                outcome.warnings.append(f"duplicate path {item.relative_path}; keeping the last copy")
            records[item.relative_path] = item

        synced_at = self._clock()
        for relative_path, record in records.items():
            key = DefinitionKey(source_name, relative_path)
            cached = self._store.entry(key)
            if cached is not None and cached.fingerprint == record.fingerprint:
                outcome.unchanged_count += 1
                continue
            self._store.put(Definition.from_record(source_name, record, synced_at))
            if cached is None:
                outcome.added_count += 1
            else:
                outcome.updated_count += 1

        for key in self._store.keys_for_source(source_name):
            if key.relative_path not in records:
                self._store.remove(key)
                outcome.removed_count += 1

    def _fail(
        self,
        outcome: SourceOutcome,
        message: str,
        reason: str,
        progress: ProgressCallback | None,
    ) -> SourceOutcome:
        outcome.error = message
        outcome.error_reason = reason
        if reason == CANCELLED_REASON:
            self._logger.info("Source %s: %s", outcome.source_name, message)
        else:
            self._logger.error("Source %s failed [%s]: %s", outcome.source_name, reason, message)
        _notify(progress, SyncProgress(outcome.source_name, SyncPhase.FAILED, f"{reason}: {message}"))
        return outcome


def _notify(progress: ProgressCallback | None, event: SyncProgress) -> None:
    if progress is not None:
        progress(event)


__all__ = ["CANCELLED_REASON", "ProgressCallback", "SyncEngine"]
