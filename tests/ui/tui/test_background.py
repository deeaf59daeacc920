"""Tests for the background job runner feeding the browser."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

import pytest

from agent_defs.features.cache.adapters.store import CacheStore
from agent_defs.features.definitions.domain.errors import AlreadyExists
from agent_defs.features.definitions.domain.models import Definition
from agent_defs.features.install.domain.models import InstallOutcome
from agent_defs.features.sync.domain.models import SourceOutcome, SyncPhase, SyncProgress, SyncReport
from agent_defs.features.sync.usecases.sync_engine import ProgressCallback
from agent_defs.ui.tui.background import BackgroundWorker
from agent_defs.ui.tui.messages import (
    InstallFailed,
    InstallFinished,
    Message,
    SyncFailed,
    SyncFinished,
    SyncProgressMessage,
)


class _Service:
    def __init__(self, store: CacheStore) -> None:
        self._store = store
        self.sync_error: Exception | None = None
        self.release = threading.Event()
        self.release.set()
        self.seen_cancel: threading.Event | None = None

    @property
    def store(self) -> CacheStore:
        return self._store

    def sync(
        self,
        *,
        only: Sequence[str] | None = None,
        progress: ProgressCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> SyncReport:
        self.seen_cancel = cancel
        if progress is not None:
            progress(SyncProgress("src", SyncPhase.STARTED))
        _ = self.release.wait(5)
        if self.sync_error is not None:
            raise self.sync_error
        return SyncReport([SourceOutcome("src")])

    def destination_for(self, definition: Definition, target_dir: Path) -> Path:
        return target_dir / definition.relative_path

    def install(self, definition: Definition, target_dir: Path, *, overwrite: bool = False) -> InstallOutcome:
        if not overwrite:
            raise AlreadyExists(target_dir / definition.relative_path)
        return InstallOutcome(definition.key, target_dir / definition.relative_path, overwritten=True)


@pytest.fixture
def service(store: CacheStore) -> _Service:
    return _Service(store)


@pytest.fixture
def worker(service: _Service) -> Iterator[BackgroundWorker]:
    runner = BackgroundWorker(service)
    yield runner
    service.release.set()
    runner.shutdown()


def wait_for(worker: BackgroundWorker, done: Callable[[list[Message]], bool]) -> list[Message]:
    collected: list[Message] = []
    deadline = time.monotonic() + 5
    while time.monotonic() < deadline:
        collected.extend(worker.drain())
        if done(collected):
            return collected
        time.sleep(0.01)
    raise AssertionError(f"timed out; got {collected!r}")


def test_sync_posts_progress_then_result(worker: BackgroundWorker) -> None:
    assert worker.start_sync() is True

    messages = wait_for(worker, lambda got: any(isinstance(m, SyncFinished) for m in got))

    assert isinstance(messages[0], SyncProgressMessage)
    finished = messages[-1]
    assert isinstance(finished, SyncFinished)
    assert finished.report.summary().startswith("Synced 1/1 sources")
    assert len(finished.index) == 0


def test_only_one_sync_runs_at_a_time(worker: BackgroundWorker, service: _Service) -> None:
    service.release.clear()
    assert worker.start_sync() is True
    assert worker.start_sync() is False

    worker.cancel_sync()
    service.release.set()
    _ = wait_for(worker, lambda got: any(isinstance(m, SyncFinished) for m in got))

    assert worker.sync_running is False
    assert service.seen_cancel is not None
    assert service.seen_cancel.is_set()


def test_sync_errors_become_messages(worker: BackgroundWorker, service: _Service) -> None:
    service.sync_error = RuntimeError("kaboom")

    _ = worker.start_sync()
    messages = wait_for(worker, lambda got: any(isinstance(m, SyncFailed) for m in got))

    failed = messages[-1]
    assert isinstance(failed, SyncFailed)
    assert "kaboom" in failed.error


def test_install_results_are_posted(
    worker: BackgroundWorker,
    make_definition: Callable[..., Definition],
    tmp_path: Path,
) -> None:
    definition = make_definition("agents/a.md", title="Alpha")

    worker.install(definition, tmp_path, overwrite=False)
    worker.install(definition, tmp_path, overwrite=True)
    messages = wait_for(worker, lambda got: len(got) == 2)

    assert {type(message) for message in messages} == {InstallFailed, InstallFinished}
    assert all(isinstance(m, (InstallFailed, InstallFinished)) and m.title == "Alpha" for m in messages)
