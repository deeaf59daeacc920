"""Sync command implementation for the CLI."""

from __future__ import annotations

from typing import final

from agent_defs.application.services.catalog_service import CatalogService
from agent_defs.ui.cli.args.options import SyncArgs
from agent_defs.ui.cli.commands.executor import CommandExecutor


@final
class SyncCommand(CommandExecutor):
    """Run a reconciliation pass over every enabled source."""

    def __init__(self, args: SyncArgs, service: CatalogService | None = None) -> None:
        super().__init__(service, quiet=args.quiet)
        self.args = args

    def execute(self) -> int:
        _ = self.service.load_index()
        for name in self.args.sources:
            _ = self.service.registry.get(name)
        only = self.args.sources or None
        report = self.progress_display.run(
            lambda callback: self.service.sync(only=only, progress=callback),
            quiet=self.args.quiet,
        )
        self.report_display.show_report(report, quiet=self.args.quiet, verbose=self.args.verbose)
        return 1 if report.all_failed else 0
