"""Turn a browser snapshot into rich renderables."""

from __future__ import annotations

from typing import Final, final

from rich.console import Group, RenderableType
from rich.layout import Layout
from rich.panel import Panel
from rich.text import Text

from agent_defs.features.definitions.domain.models import Definition, DefinitionKind

from .layout import ScreenLayout
from .state import BrowserSnapshot, OverlayKind, StatusLevel, View

PREVIEW_LINES: Final[int] = 400

_KIND_BADGES: Final[dict[DefinitionKind, tuple[str, str]]] = {
    DefinitionKind.AGENT: ("AGT", "cyan"),
    DefinitionKind.COMMAND: ("CMD", "green"),
    DefinitionKind.HOOK: ("HOK", "magenta"),
    DefinitionKind.MCP: ("MCP", "yellow"),
    DefinitionKind.SETTING: ("SET", "blue"),
    DefinitionKind.SKILL: ("SKL", "bright_red"),
}

_STATUS_STYLES: Final[dict[StatusLevel, str]] = {
    StatusLevel.INFO: "white on grey23",
    StatusLevel.SUCCESS: "black on green",
    StatusLevel.WARNING: "black on yellow",
    StatusLevel.ERROR: "white on red",
}

_HINTS: Final[dict[View, str]] = {
    View.LIST: "j/k move  enter open  / search  f kind  p source  i install  s sync  c copy  q quit",
    View.DETAIL: "j/k scroll  esc back  i install  c copy  s sync  q quit",
    View.SYNC_IN_PROGRESS: "esc/x cancel sync  q quit",
}

_OVERLAY_TITLES: Final[dict[OverlayKind, str]] = {
    OverlayKind.KIND_FILTER: "Filter by kind",
    OverlayKind.SOURCE_FILTER: "Filter by source",
    OverlayKind.SEARCH: "Search",
    OverlayKind.INSTALL_DIALOG: "Install",
}


@final
class BrowserRenderer:
    """Stateless; ``render`` may be called for every frame."""

    def render(self, snapshot: BrowserSnapshot) -> Layout:
        geometry = ScreenLayout.compute(snapshot.width, snapshot.height)

        root = Layout(name="root")
        body = Layout(name="body", size=geometry.list_pane.height)
        root.split_column(
            Layout(self._header(snapshot), name="header", size=geometry.header.height),
            body,
            Layout(self._status(snapshot), name="status", size=geometry.status.height),
        )
        body.split_row(
            Layout(self._list(snapshot, geometry), name="list", size=geometry.list_pane.width),
            Layout(self._side(snapshot, geometry), name="side"),
        )
        return root

    def _header(self, snapshot: BrowserSnapshot) -> RenderableType:
        text = Text(" agent-defs ", style="bold white on dark_blue")
        _ = text.append(f" {snapshot.total_items} of {snapshot.index_size} ", style="bold")
        if snapshot.kind_filter is not None:
            _ = text.append(f" kind:{snapshot.kind_filter.label} ", style="cyan")
        if snapshot.source_filter is not None:
            _ = text.append(f" source:{snapshot.source_filter} ", style="magenta")
        if snapshot.search_query:
            _ = text.append(f" search:{snapshot.search_query!r} ", style="yellow")
        text.no_wrap = True
        text.overflow = "ellipsis"
        return text

    def _list(self, snapshot: BrowserSnapshot, geometry: ScreenLayout) -> RenderableType:
        width = geometry.list_pane.width
        rows: list[Text] = []
        if not snapshot.visible_items:
            message = "No definitions cached. Press s to sync." if snapshot.index_size == 0 else "No matches."
            rows.append(Text(f" {message}", style="dim"))
        for offset, definition in enumerate(snapshot.visible_items):
            position = snapshot.scroll_offset + offset
            rows.append(self._list_row(definition, width, selected=position == snapshot.selected_index))
        return Group(*rows)

    def _list_row(self, definition: Definition, width: int, *, selected: bool) -> Text:
        badge, colour = _KIND_BADGES[definition.kind]
        row = Text(no_wrap=True, overflow="ellipsis")
        _ = row.append(f" {badge} ", style=colour)
        _ = row.append(definition.title)
        row.truncate(width, overflow="ellipsis", pad=True)
        if selected:
            row.stylize("reverse")
        return row

    def _side(self, snapshot: BrowserSnapshot, geometry: ScreenLayout) -> RenderableType:
        if snapshot.overlay is not None:
            return Panel(
                self._overlay(snapshot, geometry),
                title=_OVERLAY_TITLES[snapshot.overlay],
                border_style="yellow",
            )
        if snapshot.view is View.SYNC_IN_PROGRESS:
            lines = snapshot.sync_lines[-max(1, geometry.side_inner.height) :]
            content = Text("\n".join(lines) or "Starting sync...")
            title = "Syncing (cancelling)" if snapshot.cancel_requested else "Syncing"
            return Panel(content, title=title, border_style="blue")

        definition = snapshot.selected
        if definition is None:
            return Panel(Text("Nothing selected", style="dim"), title="Preview")
        if snapshot.view is View.DETAIL:
            lines = definition.body.splitlines()
            visible = lines[snapshot.detail_scroll : snapshot.detail_scroll + geometry.side_inner.height]
            return Panel(
                Text("\n".join(visible)),
                title=definition.title,
                subtitle=f"{definition.source_name}:{definition.relative_path}",
                border_style="green",
            )
        return Panel(self._preview(definition), title="Preview")

    def _preview(self, definition: Definition) -> RenderableType:
        meta = Text()
        _ = meta.append(f"{definition.title}\n", style="bold")
        _ = meta.append(f"{definition.kind.label}", style=_KIND_BADGES[definition.kind][1])
        if definition.category:
            _ = meta.append(f" / {definition.category}")
        _ = meta.append(f"\n{definition.source_name}:{definition.relative_path}\n", style="dim")
        if definition.description:
            _ = meta.append(f"\n{definition.description}\n", style="italic")
        body = Text("\n".join(definition.body.splitlines()[:PREVIEW_LINES]))
        return Group(meta, Text(""), body)

    def _overlay(self, snapshot: BrowserSnapshot, geometry: ScreenLayout) -> RenderableType:
        width = geometry.side_inner.width
        if snapshot.overlay is OverlayKind.SEARCH:
            prompt = Text("/ ", style="bold yellow")
            _ = prompt.append(snapshot.search_query)
            _ = prompt.append("_", style="blink")
            return Group(
                prompt,
                Text(f"{snapshot.total_items} matches", style="dim"),
                Text("enter keep  esc cancel  up/down move", style="dim"),
            )
        if snapshot.overlay is OverlayKind.INSTALL_DIALOG:
            title = snapshot.selected.title if snapshot.selected is not None else "definition"
            rows: list[Text] = [
                Text(f"Install {title}?", style="bold"),
                Text(f"to {snapshot.install_destination}"),
            ]
            if snapshot.install_exists:
                rows.append(Text("A file already exists there and will be replaced.", style="yellow"))
            rows.append(Text("y/enter install  n/esc cancel", style="dim"))
            return Group(*rows)

        option_rows: list[Text] = []
        for position, option in enumerate(snapshot.overlay_options):
            row = Text(f" {option}", no_wrap=True, overflow="ellipsis")
            row.truncate(width, overflow="ellipsis", pad=True)
            if position == snapshot.overlay_cursor:
                row.stylize("reverse")
            option_rows.append(row)
        return Group(*option_rows)

    def _status(self, snapshot: BrowserSnapshot) -> RenderableType:
        if snapshot.status_text is not None and snapshot.status_level is not None:
            text = Text(f" {snapshot.status_text}", style=_STATUS_STYLES[snapshot.status_level])
        else:
            text = Text(f" {_HINTS[snapshot.view]}", style="dim")
        text.no_wrap = True
        text.overflow = "ellipsis"
        return text


__all__ = ["BrowserRenderer"]
