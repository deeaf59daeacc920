"""Command line interface for agent-def-fetcher."""

import sys
from typing import final

from agent_defs.features.definitions.domain.errors import AgentDefsError, FsError
from agent_defs.platform.logging import logger
from agent_defs.ui.cli.args import ArgumentParser
from agent_defs.ui.cli.args.options import (
    CLIArgs,
    InstallArgs,
    ListArgs,
    SearchArgs,
    ShowArgs,
    SyncArgs,
    TuiArgs,
)
from agent_defs.ui.cli.commands import (
    CommandExecutor,
    InstallCommand,
    ListCommand,
    SearchCommand,
    ShowCommand,
    SyncCommand,
    TuiCommand,
)


@final
class CommandProcessor:
    """Command line interface processor."""

    @staticmethod
    def process_command(args_list: list[str] | None = None) -> None:
        """Process command line arguments.

        Args:
            args_list: List of command line arguments (for testing).
        """
        try:
            args: CLIArgs = ArgumentParser.process_args(args_list)
            exit_code = CommandProcessor.build_command(args).execute()
            if exit_code:
                sys.exit(exit_code)
            return

        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            sys.exit(130)
        except FsError as e:
            logger.error("Filesystem error: %s", e)
            sys.exit(1)
        except AgentDefsError as e:
            logger.error("%s", e)
            sys.exit(1)
        except Exception as e:
            logger.error("An unexpected error occurred: %s", str(e))
            sys.exit(1)

    @staticmethod
    def build_command(args: CLIArgs) -> CommandExecutor:
        """Map parsed arguments to the command that handles them."""

        if isinstance(args, SyncArgs):
            return SyncCommand(args)
        if isinstance(args, ListArgs):
            return ListCommand(args)
        if isinstance(args, SearchArgs):
            return SearchCommand(args)
        if isinstance(args, ShowArgs):
            return ShowCommand(args)
        if isinstance(args, InstallArgs):
            return InstallCommand(args)
        assert isinstance(args, TuiArgs)
        return TuiCommand(args)


def main() -> int:
    """Main entry point.

    Returns:
        int: Process exit code (0 on success). Failures call ``sys.exit``
        with a non-zero code from inside command processing.
    """
    CommandProcessor.process_command()
    return 0
