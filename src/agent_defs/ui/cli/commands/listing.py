"""List and search commands."""

from __future__ import annotations

from typing import final

from agent_defs.application.services.catalog_service import CatalogService
from agent_defs.ui.cli.args.options import ListArgs, SearchArgs
from agent_defs.ui.cli.commands.executor import CommandExecutor
from agent_defs.ui.cli.display.catalog import CatalogDisplay


@final
class ListCommand(CommandExecutor):
    """Print cached definitions grouped by kind."""

    def __init__(self, args: ListArgs, service: CatalogService | None = None) -> None:
        super().__init__(service, quiet=args.quiet)
        self.args = args
        self.display = CatalogDisplay()

    def execute(self) -> int:
        index, report = self.prepare_index()
        if self.args.source is not None:
            _ = self.service.registry.get(self.args.source)
        results = index.query(kind=self.args.kind, source=self.args.source)
        self.display.show_grouped(results)
        return self.exit_code_for(index, report)


@final
class SearchCommand(CommandExecutor):
    """Print definitions matching a query, title matches first."""

    def __init__(self, args: SearchArgs, service: CatalogService | None = None) -> None:
        super().__init__(service, quiet=args.quiet)
        self.args = args
        self.display = CatalogDisplay()

    def execute(self) -> int:
        index, report = self.prepare_index()
        results = index.query(kind=self.args.kind, source=self.args.source, text=self.args.query)
        self.display.show_ranked(self.args.query, results)
        return self.exit_code_for(index, report)
