"""Command line argument handling."""

from agent_defs.ui.cli.args.parser import ArgumentParser

__all__ = ["ArgumentParser"]
