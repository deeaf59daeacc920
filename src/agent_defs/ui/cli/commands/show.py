"""Show command implementation for the CLI."""

from __future__ import annotations

from typing import final

from agent_defs.application.services.catalog_service import CatalogService
from agent_defs.features.definitions.domain.errors import NotFound
from agent_defs.platform.logging import logger
from agent_defs.ui.cli.args.options import ShowArgs
from agent_defs.ui.cli.commands.executor import CommandExecutor
from agent_defs.ui.cli.display.definition import DefinitionDisplay


@final
class ShowCommand(CommandExecutor):
    """Print one definition."""

    def __init__(self, args: ShowArgs, service: CatalogService | None = None) -> None:
        super().__init__(service, quiet=args.quiet or args.raw)
        self.args = args
        self.display = DefinitionDisplay()

    def execute(self) -> int:
        index, _ = self.prepare_index()
        try:
            definition = index.find(self.args.path, self.args.source)
        except NotFound as exc:
            logger.error("%s", exc)
            return 1
        self.display.show(definition, raw=self.args.raw)
        return 0
