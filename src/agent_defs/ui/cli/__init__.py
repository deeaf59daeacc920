"""Command line interface package."""

from agent_defs.ui.cli.cli import CommandProcessor, main

__all__ = ["CommandProcessor", "main"]
