"""Where: src/agent_defs/ui/tui/state.py
What: Mutable browser state owned by the controller and its frozen snapshot.
Why: The renderer only ever sees an immutable picture of one moment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from agent_defs.features.definitions.domain.models import Definition, DefinitionKey, DefinitionKind


class View(str, Enum):
    LIST = "list"
    DETAIL = "detail"
    SYNC_IN_PROGRESS = "sync_in_progress"


class OverlayKind(str, Enum):
    KIND_FILTER = "kind_filter"
    SOURCE_FILTER = "source_filter"
    SEARCH = "search"
    INSTALL_DIALOG = "install_dialog"


class StatusLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class RestorePoint:
    """What closing an overlay without applying it puts back."""

    selected_key: DefinitionKey | None
    selected_index: int | None
    scroll_offset: int
    detail_scroll: int
    search_query: str


@dataclass(slots=True)
class OverlayState:
    kind: OverlayKind
    restore: RestorePoint
    options: list[str] = field(default_factory=list)
    values: list[str | None] = field(default_factory=list)
    cursor: int = 0
    install_target: Definition | None = None
    install_destination: Path | None = None
    install_exists: bool = False


@dataclass(slots=True)
class StatusMessage:
    text: str
    level: StatusLevel
    ticks_left: int


@dataclass(slots=True)
class BrowserState:
    view: View = View.LIST
    overlay: OverlayState | None = None
    kind_filter: DefinitionKind | None = None
    source_filter: str | None = None
    search_query: str = ""
    items: list[Definition] = field(default_factory=list)
    selected_index: int | None = None
    scroll_offset: int = 0
    detail_scroll: int = 0
    status: StatusMessage | None = None
    width: int = 80
    height: int = 24
    resume_view: View = View.LIST
    sync_lines: list[str] = field(default_factory=list)
    cancel_requested: bool = False

    @property
    def overlay_stack(self) -> tuple[OverlayState, ...]:
        """Active overlays; never more than one."""

        return (self.overlay,) if self.overlay is not None else ()

    @property
    def selected(self) -> Definition | None:
        if self.selected_index is None or not 0 <= self.selected_index < len(self.items):
            return None
        return self.items[self.selected_index]


@dataclass(slots=True, frozen=True)
class BrowserSnapshot:
    """Immutable picture handed to the renderer after every event."""

    view: View
    overlay: OverlayKind | None
    overlay_options: tuple[str, ...]
    overlay_cursor: int
    install_destination: Path | None
    install_exists: bool
    kind_filter: DefinitionKind | None
    source_filter: str | None
    search_query: str
    visible_items: tuple[Definition, ...]
    total_items: int
    index_size: int
    selected_index: int | None
    selected: Definition | None
    scroll_offset: int
    detail_scroll: int
    status_text: str | None
    status_level: StatusLevel | None
    width: int
    height: int
    sync_lines: tuple[str, ...]
    cancel_requested: bool


__all__ = [
    "BrowserSnapshot",
    "BrowserState",
    "OverlayKind",
    "OverlayState",
    "RestorePoint",
    "StatusLevel",
    "StatusMessage",
    "View",
]
