"""Command execution package for CLI."""

from agent_defs.ui.cli.commands.executor import CommandExecutor
from agent_defs.ui.cli.commands.install import InstallCommand
from agent_defs.ui.cli.commands.listing import ListCommand, SearchCommand
from agent_defs.ui.cli.commands.show import ShowCommand
from agent_defs.ui.cli.commands.sync import SyncCommand
from agent_defs.ui.cli.commands.tui import TuiCommand

__all__ = [
    "CommandExecutor",
    "InstallCommand",
    "ListCommand",
    "SearchCommand",
    "ShowCommand",
    "SyncCommand",
    "TuiCommand",
]
