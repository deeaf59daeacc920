"""Progress display for sync passes."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, final

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn

from agent_defs.features.sync.domain.models import SyncPhase, SyncProgress, SyncReport
from agent_defs.features.sync.usecases.sync_engine import ProgressCallback
from agent_defs.platform.logging import StatusRichHandler, logger

_PHASE_STYLES: dict[SyncPhase, str] = {
    SyncPhase.STARTED: "[cyan]fetching",
    SyncPhase.RETRYING: "[yellow]retrying",
    SyncPhase.FINISHED: "[green]done",
    SyncPhase.FAILED: "[red]failed",
}


@final
class SyncProgressDisplay:
    """Show one spinner row per source while a pass runs."""

    def run(self, runner: Callable[[ProgressCallback], SyncReport], *, quiet: bool = False) -> SyncReport:
        """Invoke ``runner`` with a progress callback wired to a Rich progress bar.

        Args:
            runner: Starts the pass; receives the callback to forward progress.
            quiet: Skip the progress display entirely.

        Returns:
            SyncReport: Whatever ``runner`` returned.
        """
        if quiet:
            return runner(lambda _event: None)

        progress_console: Console | None = None
        for handler in logger.handlers:
            if isinstance(handler, StatusRichHandler):
                progress_console = handler.console
                break

        progress_kwargs: dict[str, Any] = {
            "transient": True,
            "redirect_stdout": False,
            "redirect_stderr": False,
        }
        if progress_console is not None:
            progress_kwargs["console"] = progress_console

        with Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            TimeElapsedColumn(),
            **progress_kwargs,
        ) as progress:
            tasks: dict[str, TaskID] = {}

            def _cb(event: SyncProgress) -> None:
                label = _PHASE_STYLES[event.phase]
                description = f"{event.source_name}: {label}[/]"
                task_id = tasks.get(event.source_name)
                if task_id is None:
                    tasks[event.source_name] = progress.add_task(description, total=None)
                    return
                finished = event.phase in (SyncPhase.FINISHED, SyncPhase.FAILED)
                progress.update(task_id, description=description, completed=1 if finished else 0, total=1 if finished else None)

            return runner(_cb)
