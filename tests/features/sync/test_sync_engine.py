"""
Summary: Tests for reconciling source listings with the cache.
Why: Counts, retries, isolation and cancellation are the sync contract.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest
from pytest_mock import MockerFixture

from agent_defs.config.settings import SyncSettings
from agent_defs.features.cache.adapters.store import CacheStore
from agent_defs.features.definitions.domain.errors import AuthError, FsError, NetworkError, ParseError
from agent_defs.features.definitions.domain.models import Definition, DefinitionKey, RemoteRecord
from agent_defs.features.sources.domain.models import SourceConfig, SourceType
from agent_defs.features.sources.registry import SourceRegistry
from agent_defs.features.sync.domain.models import SyncPhase, SyncProgress
from agent_defs.features.sync.usecases.sync_engine import SyncEngine

MakeRecord = Callable[..., RemoteRecord]
RegistryFactory = Callable[..., SourceRegistry]


@pytest.fixture
def engine(store: CacheStore, fast_settings: SyncSettings, fixed_clock: Callable[[], datetime]) -> SyncEngine:
    return SyncEngine(store, fast_settings, clock=fixed_clock)


def _three(make_record: MakeRecord) -> list[RemoteRecord]:
    return [
        make_record("agents/a.md", "alpha"),
        make_record("agents/b.md", "beta"),
        make_record("commands/c.md", "gamma"),
    ]


def test_first_sync_adds_everything(
    engine: SyncEngine,
    store: CacheStore,
    scripted_source: Any,
    registry_factory: RegistryFactory,
    make_record: MakeRecord,
) -> None:
    scripted_source.script("src", _three(make_record))

    report = engine.sync(registry_factory("src"))

    outcome = report.outcome_for("src")
    assert outcome is not None
    assert (outcome.added_count, outcome.updated_count, outcome.unchanged_count, outcome.removed_count) == (3, 0, 0, 0)
    assert len(store.all()) == 3
    assert store.last_synced("src") is not None


def test_second_identical_sync_changes_nothing(
    engine: SyncEngine,
    store: CacheStore,
    scripted_source: Any,
    registry_factory: RegistryFactory,
    make_record: MakeRecord,
) -> None:
    scripted_source.script("src", _three(make_record))
    registry = registry_factory("src")
    _ = engine.sync(registry)
    before = store.manifest().entries

    report = engine.sync(registry)

    assert report.unchanged == 3
    assert report.added == report.updated == report.removed == 0
    assert store.manifest().entries == before


def test_one_new_file_counts_as_one_added(
    engine: SyncEngine,
    scripted_source: Any,
    registry_factory: RegistryFactory,
    make_record: MakeRecord,
) -> None:
    three = _three(make_record)
    scripted_source.script("src", three, [*three, make_record("agents/d.md", "delta")])
    registry = registry_factory("src")
    _ = engine.sync(registry)

    report = engine.sync(registry)

    assert (report.added, report.unchanged, report.updated, report.removed) == (1, 3, 0, 0)


def test_changed_and_removed_files(
    engine: SyncEngine,
    store: CacheStore,
    scripted_source: Any,
    registry_factory: RegistryFactory,
    make_record: MakeRecord,
) -> None:
    three = _three(make_record)
    changed = [make_record("agents/a.md", "alpha v2"), three[1]]
    scripted_source.script("src", three, changed)
    registry = registry_factory("src")
    _ = engine.sync(registry)

    report = engine.sync(registry)

    assert (report.updated, report.unchanged, report.removed) == (1, 1, 1)
    assert store.get_body(DefinitionKey("src", "agents/a.md")) == "alpha v2"
    assert store.entry(DefinitionKey("src", "commands/c.md")) is None


def test_failing_source_does_not_affect_others(
    engine: SyncEngine,
    store: CacheStore,
    scripted_source: Any,
    registry_factory: RegistryFactory,
    make_record: MakeRecord,
) -> None:
    scripted_source.script("good", [make_record("agents/a.md")])
    scripted_source.script("bad", [make_record("agents/old.md")], AuthError("unauthorized", "HTTP 401"))
    registry = registry_factory("good", "bad")
    _ = engine.sync(registry, only=["bad"])

    report = engine.sync(registry)

    good = report.outcome_for("good")
    bad = report.outcome_for("bad")
    assert good is not None and good.ok and good.added_count == 1
    assert bad is not None and not bad.ok
    assert bad.error_reason == "unauthorized"
    assert not report.all_failed
    assert store.entry(DefinitionKey("bad", "agents/old.md")) is not None


def test_auth_errors_are_not_retried(
    engine: SyncEngine,
    scripted_source: Any,
    registry_factory: RegistryFactory,
) -> None:
    scripted_source.script("src", AuthError("rate_limited", "slow down"))

    report = engine.sync(registry_factory("src"))

    assert scripted_source.calls["src"] == 1
    outcome = report.outcome_for("src")
    assert outcome is not None
    assert outcome.error_reason == "rate_limited"
    assert report.all_failed


def test_network_errors_are_retried_then_succeed(
    engine: SyncEngine,
    scripted_source: Any,
    registry_factory: RegistryFactory,
    make_record: MakeRecord,
) -> None:
    scripted_source.script("src", NetworkError("reset"), NetworkError("reset"), [make_record("agents/a.md")])
    events: list[SyncProgress] = []

    report = engine.sync(registry_factory("src"), progress=events.append)

    assert scripted_source.calls["src"] == 3
    assert report.added == 1
    phases = [event.phase for event in events]
    assert phases.count(SyncPhase.RETRYING) == 2
    assert phases[-1] is SyncPhase.FINISHED


def test_network_errors_exhaust_attempts(
    engine: SyncEngine,
    scripted_source: Any,
    registry_factory: RegistryFactory,
) -> None:
    scripted_source.script("src", NetworkError("down"))

    report = engine.sync(registry_factory("src"))

    assert scripted_source.calls["src"] == 3
    outcome = report.outcome_for("src")
    assert outcome is not None and outcome.error_reason == "network"


def test_parse_errors_are_skipped_with_warnings(
    engine: SyncEngine,
    scripted_source: Any,
    registry_factory: RegistryFactory,
    make_record: MakeRecord,
) -> None:
    scripted_source.script("src", [make_record("agents/a.md"), ParseError("agents/bad.md", "invalid YAML")])

    report = engine.sync(registry_factory("src"))

    outcome = report.outcome_for("src")
    assert outcome is not None and outcome.ok
    assert outcome.added_count == 1
    assert outcome.skipped_count == 1
    assert any("agents/bad.md" in warning for warning in outcome.warnings)


def test_cancel_before_start_fetches_nothing(
    engine: SyncEngine,
    store: CacheStore,
    scripted_source: Any,
    registry_factory: RegistryFactory,
) -> None:
    cancel = threading.Event()
    cancel.set()

    report = engine.sync(registry_factory("a", "b"), cancel=cancel)

    assert scripted_source.calls == {}
    assert [outcome.error_reason for outcome in report.outcomes] == ["cancelled", "cancelled"]
    assert len(store.all()) == 0


def test_cancel_during_backoff_stops_retrying(
    store: CacheStore,
    scripted_source: Any,
    registry_factory: RegistryFactory,
    fixed_clock: Callable[[], datetime],
) -> None:
    slow = SyncSettings(max_workers=1, retry_attempts=5, retry_base_delay=60.0, retry_max_delay=60.0)
    engine = SyncEngine(store, slow, clock=fixed_clock)
    scripted_source.script("src", NetworkError("flaky"))
    cancel = threading.Event()

    def on_progress(event: SyncProgress) -> None:
        if event.phase is SyncPhase.RETRYING:
            cancel.set()

    report = engine.sync(registry_factory("src"), progress=on_progress, cancel=cancel)

    assert scripted_source.calls["src"] == 1
    outcome = report.outcome_for("src")
    assert outcome is not None and outcome.error_reason == "cancelled"


def test_only_and_disabled_sources_are_respected(
    engine: SyncEngine,
    scripted_source: Any,
    registry_factory: RegistryFactory,
    make_record: MakeRecord,
) -> None:
    for name in ("a", "b", "c"):
        scripted_source.script(name, [make_record("agents/x.md")])

    report = engine.sync(registry_factory("a", "b", "c", disabled=("c",)), only=["b", "c"])

    assert [outcome.source_name for outcome in report.outcomes] == ["b"]
    assert set(scripted_source.calls) == {"b"}


def test_duplicate_paths_keep_last_copy(
    engine: SyncEngine,
    store: CacheStore,
    scripted_source: Any,
    registry_factory: RegistryFactory,
    make_record: MakeRecord,
) -> None:
    scripted_source.script("src", [make_record("agents/a.md", "first"), make_record("agents/a.md", "second")])

    report = engine.sync(registry_factory("src"))

    assert report.added == 1
    assert report.warnings
    assert store.get_body(DefinitionKey("src", "agents/a.md")) == "second"


def test_summary_mentions_failures(
    engine: SyncEngine,
    scripted_source: Any,
    registry_factory: RegistryFactory,
    make_record: MakeRecord,
) -> None:
    scripted_source.script("ok", [make_record("agents/a.md")])
    scripted_source.script("broken", AuthError("forbidden", "HTTP 403"))

    summary = engine.sync(registry_factory("ok", "broken")).summary()

    assert summary.startswith("Synced 1/2 sources: 1 added")
    assert "broken (forbidden)" in summary


class _OverlappingSource:
    """Holds each ``list`` call at a barrier so sources are fetched in parallel."""

    def __init__(self, listings: dict[str, list[RemoteRecord]], parties: int) -> None:
        self._listings = listings
        self._barrier = threading.Barrier(parties, timeout=30)
        self._lock = threading.Lock()
        self.active = 0
        self.peak = 0

    def list(self, config: SourceConfig) -> Iterator[RemoteRecord]:
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            _ = self._barrier.wait()
        finally:
            with self._lock:
                self.active -= 1
        return iter(list(self._listings[config.name]))


def _overlapping_registry(source: _OverlappingSource, names: list[str]) -> SourceRegistry:
    configs = [SourceConfig(name=name, type=SourceType.GITHUB_REPO, location=f"owner/{name}") for name in names]
    return SourceRegistry(configs, adapters={SourceType.GITHUB_REPO: source})


def test_concurrent_sources_share_the_store_consistently(
    store: CacheStore,
    cache_dir: Path,
    fixed_clock: Callable[[], datetime],
    make_record: MakeRecord,
    make_definition: Callable[..., Definition],
) -> None:
    for number in range(150):
        store.put(make_definition(f"agents/old-{number}.md", source_name="b"))
    listings = {
        "a": [make_record(f"agents/new-{number}.md") for number in range(150)],
        "b": [],
        "c": [make_record(f"commands/c-{number}.md") for number in range(40)],
        "d": [make_record(f"commands/d-{number}.md") for number in range(40)],
    }
    source = _OverlappingSource(listings, parties=2)
    settings = SyncSettings(max_workers=2, retry_attempts=1, retry_base_delay=0.0, retry_max_delay=0.0)

    report = SyncEngine(store, settings, clock=fixed_clock).sync(_overlapping_registry(source, ["a", "b", "c", "d"]))

    assert [outcome.error for outcome in report.outcomes] == [None, None, None, None]
    assert (report.added, report.removed) == (230, 150)
    assert source.peak == 2

    reloaded = CacheStore(cache_dir)
    manifest = reloaded.load()
    assert [len(manifest.keys_for_source(name)) for name in ("a", "b", "c", "d")] == [150, 0, 40, 40]
    assert sorted(manifest.last_synced) == ["a", "b", "c", "d"]


def test_fetches_never_exceed_max_workers(
    store: CacheStore,
    fixed_clock: Callable[[], datetime],
    make_record: MakeRecord,
) -> None:
    names = [f"s{number}" for number in range(6)]
    listings = {name: [make_record(f"agents/{name}.md")] for name in names}
    source = _OverlappingSource(listings, parties=3)
    settings = SyncSettings(max_workers=3, retry_attempts=1, retry_base_delay=0.0, retry_max_delay=0.0)

    report = SyncEngine(store, settings, clock=fixed_clock).sync(_overlapping_registry(source, names))

    assert all(outcome.ok for outcome in report.outcomes)
    assert source.peak == 3


def test_cache_write_failure_reports_no_changes(
    engine: SyncEngine,
    store: CacheStore,
    cache_dir: Path,
    scripted_source: Any,
    registry_factory: RegistryFactory,
    make_record: MakeRecord,
    mocker: MockerFixture,
) -> None:
    scripted_source.script("src", _three(make_record))
    original_put = store.put
    calls: list[Definition] = []

    def failing_put(definition: Definition) -> None:
        calls.append(definition)
        if len(calls) > 1:
            raise FsError(cache_dir, "disk full")
        original_put(definition)

    _ = mocker.patch.object(store, "put", side_effect=failing_put)

    report = engine.sync(registry_factory("src"))

    outcome = report.outcome_for("src")
    assert outcome is not None
    assert outcome.error_reason == "cache_write"
    assert (outcome.added_count, outcome.updated_count, outcome.removed_count, outcome.unchanged_count) == (0, 0, 0, 0)
    assert report.summary().startswith("Synced 0/1 sources: 0 added")
    assert store.last_synced("src") is None
