"""Render a single definition for ``show``."""

from __future__ import annotations

from typing import final

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule

from agent_defs.features.definitions.domain.errors import ParseError
from agent_defs.features.definitions.domain.models import Definition
from agent_defs.features.definitions.usecases.builder import read_details


@final
class DefinitionDisplay:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def show(self, definition: Definition, *, raw: bool = False) -> None:
        """Print header fields then the body, or the untouched document when ``raw``."""

        if raw:
            _ = self.console.file.write(definition.body)
            if not definition.body.endswith("\n"):
                _ = self.console.file.write("\n")
            self.console.file.flush()
            return

        try:
            details = read_details(definition.relative_path, definition.body)
            tools, model = details.tools, details.model
        except ParseError:
            tools, model = (), None

        fields: list[tuple[str, str | None]] = [
            ("Name", definition.title),
            ("Kind", definition.kind.label),
            ("Description", definition.description),
            ("Category", definition.category),
            ("Model", model),
            ("Tools", ", ".join(tools) if tools else None),
            ("Source", definition.source_name),
            ("ID", definition.relative_path),
        ]
        for label, value in fields:
            if value:
                self.console.print(f"[bold]{label + ':':<13}[/bold]{escape(value)}", highlight=False)
        self.console.print(Rule(style="dim"))
        self.console.print(definition.body, markup=False, highlight=False)
