"""Where: src/agent_defs/ui/tui/background.py
What: Run sync and install jobs off the UI thread and queue their results.
Why: The event loop must keep drawing while the network is busy.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from logging import Logger, getLogger
from pathlib import Path
from typing import Protocol, final

from agent_defs.features.cache.adapters.store import CacheStore
from agent_defs.features.definitions.domain.errors import AgentDefsError
from agent_defs.features.definitions.domain.models import Definition
from agent_defs.features.index.usecases.index import Index
from agent_defs.features.install.domain.models import InstallOutcome
from agent_defs.features.sync.domain.models import SyncProgress, SyncReport
from agent_defs.features.sync.usecases.sync_engine import ProgressCallback

from .messages import (
    InstallFailed,
    InstallFinished,
    Message,
    SyncFailed,
    SyncFinished,
    SyncProgressMessage,
)


class BrowserService(Protocol):
    """What the browser needs from the application service."""

    @property
    def store(self) -> CacheStore: ...

    def sync(
        self,
        *,
        only: Sequence[str] | None = None,
        progress: ProgressCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> SyncReport: ...

    def destination_for(self, definition: Definition, target_dir: Path) -> Path: ...

    def install(self, definition: Definition, target_dir: Path, *, overwrite: bool = False) -> InstallOutcome: ...


@final
class BackgroundWorker:
    """Single-flight sync plus install jobs reporting through a message queue."""

    def __init__(self, service: BrowserService, *, logger: Logger | None = None) -> None:
        self._service = service
        self._logger = logger or getLogger(__name__)
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="agent-defs-tui")
        self._messages: queue.Queue[Message] = queue.Queue()
        self._cancel: threading.Event | None = None
        self._sync_future: Future[None] | None = None

    @property
    def sync_running(self) -> bool:
        return self._sync_future is not None and not self._sync_future.done()

    def start_sync(self) -> bool:
        """Start a sync pass unless one is already running."""

        if self.sync_running:
            return False
        self._cancel = threading.Event()
        self._sync_future = self._executor.submit(self._run_sync, self._cancel)
        return True

    def cancel_sync(self) -> None:
        if self._cancel is not None:
            self._cancel.set()

    def install(self, definition: Definition, target_dir: Path, *, overwrite: bool) -> None:
        _ = self._executor.submit(self._run_install, definition, target_dir, overwrite)

    def post(self, message: Message) -> None:
        self._messages.put(message)

    def drain(self) -> list[Message]:
        """Return queued messages without blocking."""

        drained: list[Message] = []
        while True:
            try:
                drained.append(self._messages.get_nowait())
            except queue.Empty:
                return drained

    def shutdown(self) -> None:
        self.cancel_sync()
        self._executor.shutdown(wait=True, cancel_futures=True)

    def _run_sync(self, cancel: threading.Event) -> None:
        def progress(event: SyncProgress) -> None:
            self.post(SyncProgressMessage(event))

        try:
            report = self._service.sync(progress=progress, cancel=cancel)
            index = Index.from_store(self._service.store)
        except AgentDefsError as exc:
            self.post(SyncFailed(str(exc)))
        except Exception as exc:
            self._logger.exception("Sync crashed")
            self.post(SyncFailed(f"unexpected error: {exc}"))
        else:
            self.post(SyncFinished(report=report, index=index))

    def _run_install(self, definition: Definition, target_dir: Path, overwrite: bool) -> None:
        try:
            outcome = self._service.install(definition, target_dir, overwrite=overwrite)
        except AgentDefsError as exc:
            self.post(InstallFailed(title=definition.title, error=str(exc)))
        except Exception as exc:
            self._logger.exception("Install crashed")
            self.post(InstallFailed(title=definition.title, error=f"unexpected error: {exc}"))
        else:
            self.post(InstallFinished(outcome=outcome, title=definition.title))


__all__ = ["BackgroundWorker", "BrowserService"]
