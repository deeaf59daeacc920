"""Install command implementation for the CLI."""

from __future__ import annotations

from typing import final

from agent_defs.application.services.catalog_service import CatalogService
from agent_defs.features.definitions.domain.errors import AlreadyExists, FsError, NotFound
from agent_defs.platform.logging import logger
from agent_defs.ui.cli.args.options import InstallArgs
from agent_defs.ui.cli.commands.executor import CommandExecutor


@final
class InstallCommand(CommandExecutor):
    """Copy one definition into the target project."""

    def __init__(self, args: InstallArgs, service: CatalogService | None = None) -> None:
        super().__init__(service, quiet=args.quiet)
        self.args = args

    def execute(self) -> int:
        index, _ = self.prepare_index()
        try:
            definition = index.find(self.args.path, self.args.source)
        except NotFound as exc:
            logger.error("%s", exc)
            return 1

        try:
            outcome = self.service.install(definition, self.args.target, overwrite=self.args.force)
        except AlreadyExists as exc:
            logger.error("%s (use --force to overwrite)", exc)
            return 1
        except FsError as exc:
            logger.error("Install failed: %s", exc)
            return 1

        if outcome.overwritten:
            logger.warning("Replaced existing file %s", outcome.destination)
        return 0
