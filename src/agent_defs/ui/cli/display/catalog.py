"""Render lists of definitions for ``list`` and ``search``."""

from __future__ import annotations

from collections.abc import Sequence
from itertools import groupby
from typing import final

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from agent_defs.features.definitions.domain.models import Definition


@final
class CatalogDisplay:
    """Tabular output of definitions."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def show_grouped(self, definitions: Sequence[Definition]) -> None:
        """Print definitions grouped by kind, each group in canonical order."""

        if not definitions:
            self.console.print("[yellow]No definitions found.[/yellow]")
            return

        ordered = sorted(definitions, key=lambda item: (item.kind.order, item.sort_key))
        for kind, group in groupby(ordered, key=lambda item: item.kind):
            items = list(group)
            self.console.print(f"\n[bold]{kind.label}[/bold] [dim]({len(items)})[/dim]")
            for item in items:
                description = f" [dim]- {escape(item.description)}[/dim]" if item.description else ""
                self.console.print(
                    f"  [cyan]{escape(item.relative_path)}[/cyan] [dim]\\[{escape(item.source_name)}][/dim]"
                    f" {escape(item.title)}{description}",
                    highlight=False,
                    overflow="ellipsis",
                    no_wrap=True,
                )
        self.console.print(f"\n[bold]{len(definitions)}[/bold] definitions")

    def show_ranked(self, query: str, definitions: Sequence[Definition]) -> None:
        """Print search results in rank order."""

        if not definitions:
            self.console.print(f"[yellow]No definitions match '{escape(query)}'.[/yellow]")
            return

        table = Table(title=f"Results for '{escape(query)}'")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Path", style="cyan", overflow="fold")
        table.add_column("Kind")
        table.add_column("Source", style="dim")
        table.add_column("Title", style="bold")
        for rank, item in enumerate(definitions, start=1):
            table.add_row(str(rank), item.relative_path, item.kind.value, item.source_name, item.title)
        self.console.print(table)
