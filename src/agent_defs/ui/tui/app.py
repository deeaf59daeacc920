"""Where: src/agent_defs/ui/tui/app.py
What: Event loop tying terminal input, the controller, background jobs and rendering.
Why: Entry point used by the ``tui`` command.
"""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Final

from rich.console import Console
from rich.live import Live

from agent_defs.application.services.catalog_service import CatalogService
from agent_defs.features.index.usecases.index import Index
from agent_defs.platform.logging import detach_console, logger

from .background import BackgroundWorker
from .controller import BrowserController
from .events import InputEvent, ResizeEvent
from .keys import InputDecoder
from .messages import CancelSync, Command, CopyRequest, InstallRequest, Quit, StartSync
from .renderer import BrowserRenderer
from .terminal import Terminal

TICK_SECONDS: Final[float] = 0.25


def run_browser(
    service: CatalogService,
    index: Index,
    *,
    target_dir: Path,
    initial_status: str | None = None,
) -> int:
    """Run the full-screen browser until the user quits.

    Args:
        service: Application service used for sync and install jobs.
        index: Index built from the cache before the browser opens.
        target_dir: Project directory installs are written under.
        initial_status: Message shown in the status bar on start.

    Returns:
        int: Process exit code.
    """

    if not sys.stdin.isatty() or not sys.stdout.isatty():
        logger.error("The browser needs an interactive terminal; use 'list' or 'search' instead")
        return 1

    console = Console()
    renderer = BrowserRenderer()
    worker = BackgroundWorker(service, logger=logger)
    detached = detach_console()
    try:
        with Terminal() as terminal:
            width, height = terminal.size()
            controller = BrowserController(
                index,
                target_dir=target_dir,
                destination_for=service.destination_for,
                source_names=service.registry.names(),
                width=width,
                height=height,
                initial_status=initial_status,
            )
            with Live(
                renderer.render(controller.snapshot()),
                console=console,
                screen=True,
                auto_refresh=False,
            ) as live:
                _event_loop(terminal, controller, worker, renderer, live)
    finally:
        worker.shutdown()
        for handler in detached:
            logger.addHandler(handler)
    return 0


def _event_loop(
    terminal: Terminal,
    controller: BrowserController,
    worker: BackgroundWorker,
    renderer: BrowserRenderer,
    live: Live,
) -> None:
    decoder = InputDecoder()
    size = terminal.size()
    last_tick = time.monotonic()

    while True:
        data = terminal.read(TICK_SECONDS)
        now = time.monotonic()
        events: list[InputEvent] = decoder.feed(data, now) if data else decoder.flush()

        current_size = terminal.size()
        if current_size != size:
            size = current_size
            events.append(ResizeEvent(width=size[0], height=size[1]))

        for event in events:
            command = controller.handle_event(event)
            if command is not None and not _dispatch(command, terminal, worker):
                return

        for message in worker.drain():
            _ = controller.handle_message(message)

        if now - last_tick >= TICK_SECONDS:
            controller.tick()
            last_tick = now

        live.update(renderer.render(controller.snapshot()), refresh=True)


def _dispatch(command: Command, terminal: Terminal, worker: BackgroundWorker) -> bool:
    """Run ``command``; returns False when the loop should stop."""

    if isinstance(command, Quit):
        worker.cancel_sync()
        return False
    if isinstance(command, StartSync):
        if not worker.start_sync():
            logger.debug("Sync already running")
    elif isinstance(command, CancelSync):
        worker.cancel_sync()
    elif isinstance(command, InstallRequest):
        worker.install(command.definition, command.target_dir, overwrite=command.overwrite)
    elif isinstance(command, CopyRequest):
        terminal.copy_to_clipboard(command.text)
    return True


__all__ = ["run_browser"]
