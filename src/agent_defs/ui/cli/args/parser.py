"""Command line argument parser."""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import final

from agent_defs import __version__
from agent_defs.config.config import AppConfig
from agent_defs.config.paths import default_log_file
from agent_defs.features.definitions.domain.errors import ConfigError
from agent_defs.features.definitions.domain.models import DefinitionKind
from agent_defs.platform.logging import logger, setup_logger
from agent_defs.ui.cli.args.options import (
    CLIArgs,
    InstallArgs,
    ListArgs,
    SearchArgs,
    ShowArgs,
    SyncArgs,
    TuiArgs,
)


@final
class ArgumentParser:
    """Command line argument parser."""

    @staticmethod
    def create_parser() -> argparse.ArgumentParser:
        """Create argument parser.

        Returns:
            argparse.ArgumentParser: Configured argument parser.
        """
        parser = argparse.ArgumentParser(
            prog="agent-defs",
            description="Fetch, browse, search and install agent, command and skill definitions.",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        _ = parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

        common = argparse.ArgumentParser(add_help=False)
        verbosity = common.add_mutually_exclusive_group()
        _ = verbosity.add_argument(
            "--verbose",
            action="store_true",
            help="Show detailed progress and debug information",
        )
        _ = verbosity.add_argument(
            "--quiet",
            action="store_true",
            help="Suppress all output except errors",
        )

        subparsers = parser.add_subparsers(dest="command", required=True)

        sync_parser = subparsers.add_parser(
            "sync",
            parents=[common],
            help="Fetch every enabled source and refresh the local cache",
        )
        _ = sync_parser.add_argument(
            "sources",
            nargs="*",
            metavar="SOURCE",
            help="Only sync these sources (default: all enabled sources)",
        )

        list_parser = subparsers.add_parser(
            "list",
            parents=[common],
            help="List cached definitions grouped by kind",
        )
        ArgumentParser._add_filters(list_parser)

        search_parser = subparsers.add_parser(
            "search",
            parents=[common],
            help="Search titles and bodies (title matches first)",
        )
        _ = search_parser.add_argument("query", type=str, metavar="QUERY", help="Text to look for")
        ArgumentParser._add_filters(search_parser)

        show_parser = subparsers.add_parser(
            "show",
            parents=[common],
            help="Show one definition",
        )
        _ = show_parser.add_argument("path", type=str, metavar="PATH", help="Relative path of the definition")
        _ = show_parser.add_argument("--source", type=str, metavar="SOURCE", help="Source holding the definition")
        _ = show_parser.add_argument(
            "--raw",
            action="store_true",
            help="Print the document exactly as fetched",
        )

        install_parser = subparsers.add_parser(
            "install",
            parents=[common],
            help="Copy a definition into <target>/.claude/",
        )
        _ = install_parser.add_argument("path", type=str, metavar="PATH", help="Relative path of the definition")
        _ = install_parser.add_argument(
            "--target",
            type=str,
            metavar="DIR",
            help="Project directory to install into (default: current directory)",
        )
        _ = install_parser.add_argument("--source", type=str, metavar="SOURCE", help="Source holding the definition")
        _ = install_parser.add_argument(
            "--force",
            action="store_true",
            help="Overwrite an existing file at the destination",
        )

        tui_parser = subparsers.add_parser(
            "tui",
            parents=[common],
            help="Open the interactive browser",
        )
        _ = tui_parser.add_argument(
            "--target",
            type=str,
            metavar="DIR",
            help="Project directory used for installs (default: current directory)",
        )

        return parser

    @staticmethod
    def _add_filters(parser: argparse.ArgumentParser) -> None:
        _ = parser.add_argument(
            "--kind",
            type=str,
            metavar="KIND",
            help="Only show this kind (agent, command, hook, mcp, setting, skill)",
        )
        _ = parser.add_argument("--source", type=str, metavar="SOURCE", help="Only show this source")

    @staticmethod
    def process_args(args_list: Sequence[str] | None = None) -> CLIArgs:
        """Process command line arguments.

        Args:
            args_list: List of command line arguments (for testing).

        Returns:
            CLIArgs: Processed command line arguments.

        Raises:
            SystemExit: On usage errors or an invalid configuration file.
        """
        parser = ArgumentParser.create_parser()
        parsed_args = parser.parse_args(args_list)

        is_quiet = bool(getattr(parsed_args, "quiet", False))
        is_verbose = bool(getattr(parsed_args, "verbose", False))

        if is_quiet:
            log_level = logging.ERROR
        elif is_verbose:
            log_level = logging.DEBUG
        else:
            log_level = logging.INFO

        try:
            configuration = AppConfig.load()
        except ConfigError as exc:
            logger.error("Invalid configuration: %s", exc)
            sys.exit(1)
        log_file_path = configuration.log_file or default_log_file()
        _ = setup_logger(log_file=log_file_path, console_level=log_level)

        command: str = parsed_args.command

        if command == "sync":
            return SyncArgs(verbose=is_verbose, quiet=is_quiet, sources=list(parsed_args.sources))

        if command == "list":
            return ListArgs(
                verbose=is_verbose,
                quiet=is_quiet,
                kind=ArgumentParser._parse_kind(parsed_args.kind),
                source=parsed_args.source,
            )

        if command == "search":
            return SearchArgs(
                verbose=is_verbose,
                quiet=is_quiet,
                query=parsed_args.query,
                kind=ArgumentParser._parse_kind(parsed_args.kind),
                source=parsed_args.source,
            )

        if command == "show":
            return ShowArgs(
                verbose=is_verbose,
                quiet=is_quiet,
                path=parsed_args.path,
                source=parsed_args.source,
                raw=parsed_args.raw,
            )

        if command == "install":
            return InstallArgs(
                verbose=is_verbose,
                quiet=is_quiet,
                path=parsed_args.path,
                target=ArgumentParser._target(parsed_args.target),
                source=parsed_args.source,
                force=parsed_args.force,
            )

        if command == "tui":
            return TuiArgs(
                verbose=is_verbose,
                quiet=is_quiet,
                target=ArgumentParser._target(parsed_args.target),
            )

        logger.error("Unsupported command: %s", command)
        sys.exit(2)

    @staticmethod
    def _parse_kind(value: str | None) -> DefinitionKind | None:
        if value is None:
            return None
        try:
            return DefinitionKind.from_user_input(value)
        except ValueError as exc:
            logger.error("%s", exc)
            sys.exit(2)

    @staticmethod
    def _target(value: str | None) -> Path:
        target = Path(value).expanduser() if value else Path.cwd()
        if target.exists() and not target.is_dir():
            logger.error("Target is not a directory: %s", target)
            sys.exit(1)
        return target.resolve()
