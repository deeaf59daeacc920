"""Launch the interactive browser."""

from __future__ import annotations

from typing import final

from agent_defs.application.services.catalog_service import CatalogService
from agent_defs.ui.cli.args.options import TuiArgs
from agent_defs.ui.cli.commands.executor import CommandExecutor
from agent_defs.ui.tui.app import run_browser


@final
class TuiCommand(CommandExecutor):
    """Open the full-screen browser on the cached catalog."""

    def __init__(self, args: TuiArgs, service: CatalogService | None = None) -> None:
        super().__init__(service, quiet=args.quiet)
        self.args = args

    def execute(self) -> int:
        index, report = self.prepare_index()
        status = report.summary() if report is not None else None
        return run_browser(self.service, index, target_dir=self.args.target, initial_status=status)
