"""Display utilities for sync results."""

from __future__ import annotations

from typing import final

from rich.console import Console
from rich.table import Table

from agent_defs.features.sync.domain.models import SyncReport


@final
class SyncReportDisplay:
    """Render per-source sync counts."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def show_report(self, report: SyncReport, *, quiet: bool = False, verbose: bool = False) -> None:
        """Print a table of per-source counts followed by the summary line."""

        if quiet:
            return

        if not report.outcomes:
            self.console.print("[yellow]No enabled sources to sync.[/yellow]")
            return

        table = Table(title="Sync Summary", show_lines=False)
        table.add_column("Source", style="bold")
        table.add_column("Added", justify="right", style="green")
        table.add_column("Updated", justify="right", style="cyan")
        table.add_column("Removed", justify="right", style="magenta")
        table.add_column("Unchanged", justify="right")
        table.add_column("Status")

        for outcome in report.outcomes:
            if outcome.ok:
                status = "[green]ok[/green]"
                if outcome.warnings:
                    status += f" [yellow]({len(outcome.warnings)} warnings)[/yellow]"
            else:
                status = f"[red]{outcome.error_reason or 'error'}[/red]"
            table.add_row(
                outcome.source_name,
                str(outcome.added_count),
                str(outcome.updated_count),
                str(outcome.removed_count),
                str(outcome.unchanged_count),
                status,
            )
        self.console.print(table)

        for outcome in report.failed:
            self.console.print(f"[red]  • {outcome.source_name}: {outcome.error}[/red]", markup=True, highlight=False)
        if verbose:
            for warning in report.warnings:
                self.console.print(f"[yellow]  • {warning}[/yellow]", highlight=False)

        style = "red" if report.all_failed else "bold"
        self.console.print(f"[{style}]{report.summary()}[/{style}]", highlight=False)
