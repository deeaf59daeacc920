"""
Summary: Browser state machine driven by key, mouse and background events.
Why: Keep every TUI decision testable without a terminal attached.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Final, final

from agent_defs.features.definitions.domain.models import Definition, DefinitionKey, DefinitionKind
from agent_defs.features.index.usecases.index import Index

from .events import InputEvent, Key, KeyEvent, MouseAction, MouseEvent, ResizeEvent
from .layout import ScreenLayout
from .messages import (
    CancelSync,
    Command,
    CopyRequest,
    InstallFailed,
    InstallFinished,
    InstallRequest,
    Message,
    Quit,
    StartSync,
    SyncFailed,
    SyncFinished,
    SyncProgressMessage,
)
from .state import (
    BrowserSnapshot,
    BrowserState,
    OverlayKind,
    OverlayState,
    RestorePoint,
    StatusLevel,
    StatusMessage,
    View,
)

DOUBLE_CLICK_SECONDS: Final[float] = 0.4
WHEEL_STEP: Final[int] = 3
DETAIL_PAGE: Final[int] = 5
STATUS_TICKS: Final[int] = 16
ERROR_STATUS_TICKS: Final[int] = 32
SYNC_LOG_LINES: Final[int] = 200
ALL_OPTION: Final[str] = "All"

DestinationResolver = Callable[[Definition, Path], Path]


@final
class BrowserController:
    """Owns the browser state; the app loop only forwards events and runs commands."""

    def __init__(
        self,
        index: Index,
        *,
        target_dir: Path,
        destination_for: DestinationResolver,
        source_names: Iterable[str] = (),
        width: int = 80,
        height: int = 24,
        initial_status: str | None = None,
    ) -> None:
        self._index = index
        self._target_dir = target_dir
        self._destination_for = destination_for
        self._source_names = sorted(set(source_names) | set(index.sources()))
        self._state = BrowserState(width=width, height=height)
        self._last_click: tuple[int, int, float] | None = None
        self._refilter(None)
        if initial_status:
            self._set_status(initial_status, StatusLevel.INFO)

    # --- Read access ------------------------------------------------------

    @property
    def state(self) -> BrowserState:
        return self._state

    @property
    def index(self) -> Index:
        return self._index

    @property
    def layout(self) -> ScreenLayout:
        return ScreenLayout.compute(self._state.width, self._state.height)

    def snapshot(self) -> BrowserSnapshot:
        state = self._state
        overlay = state.overlay
        viewport = self.layout.viewport_height
        visible = state.items[state.scroll_offset : state.scroll_offset + viewport]
        return BrowserSnapshot(
            view=state.view,
            overlay=overlay.kind if overlay is not None else None,
            overlay_options=tuple(overlay.options) if overlay is not None else (),
            overlay_cursor=overlay.cursor if overlay is not None else 0,
            install_destination=overlay.install_destination if overlay is not None else None,
            install_exists=overlay.install_exists if overlay is not None else False,
            kind_filter=state.kind_filter,
            source_filter=state.source_filter,
            search_query=state.search_query,
            visible_items=tuple(visible),
            total_items=len(state.items),
            index_size=len(self._index),
            selected_index=state.selected_index,
            selected=state.selected,
            scroll_offset=state.scroll_offset,
            detail_scroll=state.detail_scroll,
            status_text=state.status.text if state.status is not None else None,
            status_level=state.status.level if state.status is not None else None,
            width=state.width,
            height=state.height,
            sync_lines=tuple(state.sync_lines),
            cancel_requested=state.cancel_requested,
        )

    # --- Event entry points -----------------------------------------------

    def handle_event(self, event: InputEvent) -> Command | None:
        if isinstance(event, KeyEvent):
            return self.handle_key(event)
        if isinstance(event, MouseEvent):
            return self.handle_mouse(event)
        if isinstance(event, ResizeEvent):
            self.resize(event.width, event.height)
        return None

    def handle_key(self, event: KeyEvent) -> Command | None:
        state = self._state
        if state.view is View.SYNC_IN_PROGRESS:
            return self._sync_key(event)
        if state.overlay is not None:
            return self._overlay_key(state.overlay, event)
        if event.key is Key.CTRL_C or event.is_char("q"):
            return Quit()

        handled, command = self._global_key(event)
        if handled:
            return command
        if state.view is View.DETAIL:
            self._detail_key(event)
        else:
            self._list_key(event)
        return None

    def handle_mouse(self, event: MouseEvent) -> Command | None:
        state = self._state
        if state.view is View.SYNC_IN_PROGRESS:
            return None
        layout = self.layout
        if state.overlay is not None:
            self._overlay_mouse(state.overlay, event, layout)
            return None

        if event.action in (MouseAction.WHEEL_UP, MouseAction.WHEEL_DOWN):
            step = WHEEL_STEP if event.action is MouseAction.WHEEL_DOWN else -WHEEL_STEP
            if layout.list_pane.contains(event.x, event.y):
                self._scroll_list(step)
            elif layout.side_pane.contains(event.x, event.y):
                self._scroll_detail(step)
            return None

        if event.action is not MouseAction.PRESS or event.button != 0:
            return None
        row = layout.list_row_at(event.x, event.y)
        if row is None:
            return None
        position = state.scroll_offset + row
        if position >= len(state.items):
            self._last_click = None
            return None

        double = self._is_double_click(event)
        self._select(position)
        if double:
            self._open_detail()
            self._last_click = None
        else:
            self._last_click = (event.x, event.y, event.time)
        return None

    def handle_message(self, message: Message) -> Command | None:
        state = self._state
        if isinstance(message, SyncProgressMessage):
            progress = message.progress
            line = f"{progress.source_name}: {progress.phase.value}"
            if progress.detail:
                line = f"{line} ({progress.detail})"
            state.sync_lines.append(line)
            del state.sync_lines[:-SYNC_LOG_LINES]
        elif isinstance(message, SyncFinished):
            self._replace_index(message.index)
            self._leave_sync_view()
            report = message.report
            if report.all_failed:
                level = StatusLevel.ERROR
            elif report.failed:
                level = StatusLevel.WARNING
            else:
                level = StatusLevel.SUCCESS
            self._set_status(report.summary(), level)
        elif isinstance(message, SyncFailed):
            self._leave_sync_view()
            self._set_status(f"Sync failed: {message.error}", StatusLevel.ERROR)
        elif isinstance(message, InstallFinished):
            outcome = message.outcome
            verb = "Replaced" if outcome.overwritten else "Installed"
            self._set_status(f"{verb} {message.title} at {outcome.destination}", StatusLevel.SUCCESS)
        elif isinstance(message, InstallFailed):
            self._set_status(f"Install of {message.title} failed: {message.error}", StatusLevel.ERROR)
        return None

    def tick(self) -> None:
        """Advance timers; status messages expire after a few seconds."""

        status = self._state.status
        if status is None:
            return
        status.ticks_left -= 1
        if status.ticks_left <= 0:
            self._state.status = None

    def resize(self, width: int, height: int) -> None:
        self._state.width = width
        self._state.height = height
        self._clamp_scroll()
        self._reveal_selection()

    # --- Keys -------------------------------------------------------------

    def _global_key(self, event: KeyEvent) -> tuple[bool, Command | None]:
        """Bindings shared by LIST and DETAIL; returns ``(handled, command)``."""

        if event.is_char("/"):
            self._open_search()
        elif event.is_char("f"):
            self._open_kind_filter()
        elif event.is_char("p"):
            self._open_source_filter()
        elif event.is_char("i"):
            self._open_install_dialog()
        elif event.is_char("s"):
            return True, self._start_sync()
        elif event.is_char("c"):
            return True, self._copy_selection()
        else:
            return False, None
        return True, None

    def _list_key(self, event: KeyEvent) -> None:
        state = self._state
        viewport = max(1, self.layout.viewport_height)
        if event.key is Key.DOWN or event.is_char("j"):
            self._move_selection(1)
        elif event.key is Key.UP or event.is_char("k"):
            self._move_selection(-1)
        elif event.key is Key.PAGE_DOWN:
            self._move_selection(viewport)
        elif event.key is Key.PAGE_UP:
            self._move_selection(-viewport)
        elif event.key is Key.HOME or event.is_char("g"):
            if state.items:
                self._select(0)
        elif event.key is Key.END or event.is_char("G"):
            if state.items:
                self._select(len(state.items) - 1)
        elif event.key is Key.ENTER or event.is_char("o"):
            self._open_detail()
        elif event.key is Key.ESCAPE:
            self._clear_filters()

    def _detail_key(self, event: KeyEvent) -> None:
        if event.key in (Key.ESCAPE, Key.BACKSPACE, Key.LEFT) or event.is_char("h"):
            self._state.view = View.LIST
        elif event.key is Key.DOWN or event.is_char("j"):
            self._scroll_detail(1)
        elif event.key is Key.UP or event.is_char("k"):
            self._scroll_detail(-1)
        elif event.key in (Key.PAGE_DOWN, Key.CTRL_D):
            self._scroll_detail(DETAIL_PAGE)
        elif event.key in (Key.PAGE_UP, Key.CTRL_U):
            self._scroll_detail(-DETAIL_PAGE)
        elif event.key is Key.HOME or event.is_char("g"):
            self._state.detail_scroll = 0
        elif event.key is Key.END or event.is_char("G"):
            self._state.detail_scroll = self._max_detail_scroll()

    def _sync_key(self, event: KeyEvent) -> Command | None:
        state = self._state
        if event.key is Key.CTRL_C or event.is_char("q"):
            state.cancel_requested = True
            return Quit()
        if event.key is Key.ESCAPE or event.is_char("x"):
            if state.cancel_requested:
                return None
            state.cancel_requested = True
            self._set_status("Cancelling sync...", StatusLevel.WARNING)
            return CancelSync()
        return None

    def _overlay_key(self, overlay: OverlayState, event: KeyEvent) -> Command | None:
        if overlay.kind is OverlayKind.SEARCH:
            self._search_key(overlay, event)
            return None
        if event.key in (Key.ESCAPE, Key.CTRL_C) or event.is_char("q"):
            self._close_overlay(restore=True)
            return None
        if overlay.kind is OverlayKind.INSTALL_DIALOG:
            return self._install_key(overlay, event)

        if event.key is Key.DOWN or event.is_char("j"):
            overlay.cursor = min(overlay.cursor + 1, len(overlay.options) - 1)
        elif event.key is Key.UP or event.is_char("k"):
            overlay.cursor = max(overlay.cursor - 1, 0)
        elif event.key is Key.HOME:
            overlay.cursor = 0
        elif event.key is Key.END:
            overlay.cursor = len(overlay.options) - 1
        elif event.key is Key.ENTER:
            self._apply_filter_option(overlay, overlay.cursor)
        return None

    def _search_key(self, overlay: OverlayState, event: KeyEvent) -> None:
        state = self._state
        if event.key in (Key.ESCAPE, Key.CTRL_C):
            self._close_overlay(restore=True)
        elif event.key is Key.ENTER:
            self._close_overlay(restore=False)
        elif event.key is Key.BACKSPACE:
            if state.search_query:
                self._set_query(state.search_query[:-1])
        elif event.key is Key.CTRL_U:
            self._set_query("")
        elif event.key is Key.DOWN:
            self._move_selection(1)
        elif event.key is Key.UP:
            self._move_selection(-1)
        elif event.char is not None and event.char.isprintable():
            self._set_query(state.search_query + event.char)

    def _install_key(self, overlay: OverlayState, event: KeyEvent) -> Command | None:
        if event.key is Key.ENTER or event.is_char("y", "Y"):
            definition = overlay.install_target
            overwrite = overlay.install_exists
            self._close_overlay(restore=True)
            if definition is None:
                return None
            self._set_status(f"Installing {definition.title}...", StatusLevel.INFO)
            return InstallRequest(definition=definition, target_dir=self._target_dir, overwrite=overwrite)
        if event.is_char("n", "N"):
            self._close_overlay(restore=True)
        return None

    # --- Overlays ---------------------------------------------------------

    def _restore_point(self) -> RestorePoint:
        state = self._state
        selected = state.selected
        return RestorePoint(
            selected_key=selected.key if selected is not None else None,
            selected_index=state.selected_index,
            scroll_offset=state.scroll_offset,
            detail_scroll=state.detail_scroll,
            search_query=state.search_query,
        )

    def _open_overlay(self, overlay: OverlayState) -> bool:
        if self._state.overlay is not None:
            return False
        self._state.overlay = overlay
        return True

    def _open_search(self) -> None:
        _ = self._open_overlay(OverlayState(kind=OverlayKind.SEARCH, restore=self._restore_point()))

    def _open_kind_filter(self) -> None:
        kinds = [kind for kind in DefinitionKind if kind in self._index.kinds() or kind is self._state.kind_filter]
        values: list[str | None] = [None, *(kind.value for kind in kinds)]
        options = [ALL_OPTION, *(kind.label for kind in kinds)]
        current = self._state.kind_filter.value if self._state.kind_filter is not None else None
        _ = self._open_overlay(
            OverlayState(
                kind=OverlayKind.KIND_FILTER,
                restore=self._restore_point(),
                options=options,
                values=values,
                cursor=values.index(current) if current in values else 0,
            )
        )

    def _open_source_filter(self) -> None:
        names = list(self._source_names)
        current = self._state.source_filter
        if current is not None and current not in names:
            names.append(current)
        values: list[str | None] = [None, *names]
        _ = self._open_overlay(
            OverlayState(
                kind=OverlayKind.SOURCE_FILTER,
                restore=self._restore_point(),
                options=[ALL_OPTION, *names],
                values=values,
                cursor=values.index(current) if current in values else 0,
            )
        )

    def _open_install_dialog(self) -> None:
        definition = self._state.selected
        if definition is None:
            self._set_status("Nothing selected to install", StatusLevel.WARNING)
            return
        if self._state.overlay is not None:
            return
        destination = self._destination_for(definition, self._target_dir)
        _ = self._open_overlay(
            OverlayState(
                kind=OverlayKind.INSTALL_DIALOG,
                restore=self._restore_point(),
                install_target=definition,
                install_destination=destination,
                install_exists=destination.exists(),
            )
        )

    def _close_overlay(self, *, restore: bool) -> None:
        state = self._state
        overlay = state.overlay
        if overlay is None:
            return
        state.overlay = None
        if not restore:
            return
        point = overlay.restore
        if state.search_query != point.search_query:
            state.search_query = point.search_query
            state.items = self._index.query(
                kind=state.kind_filter,
                source=state.source_filter,
                text=state.search_query,
            )
        position = Index.position_of(point.selected_key, state.items)
        if position is None and state.items:
            position = 0
        state.selected_index = position
        state.scroll_offset = point.scroll_offset
        state.detail_scroll = point.detail_scroll
        self._clamp_scroll()
        self._reveal_selection()

    def _apply_filter_option(self, overlay: OverlayState, position: int) -> None:
        if not 0 <= position < len(overlay.values):
            return
        value = overlay.values[position]
        state = self._state
        keep = state.selected.key if state.selected is not None else None
        self._close_overlay(restore=False)
        if overlay.kind is OverlayKind.KIND_FILTER:
            state.kind_filter = DefinitionKind(value) if value is not None else None
        else:
            state.source_filter = value
        self._refilter(keep)

    def _overlay_mouse(self, overlay: OverlayState, event: MouseEvent, layout: ScreenLayout) -> None:
        if event.action is not MouseAction.PRESS:
            return
        row = layout.overlay_row_at(event.x, event.y)
        if row is None:
            self._close_overlay(restore=True)
            return
        if overlay.kind in (OverlayKind.KIND_FILTER, OverlayKind.SOURCE_FILTER):
            if row < len(overlay.options):
                overlay.cursor = row
                self._apply_filter_option(overlay, row)

    # --- Commands ---------------------------------------------------------

    def _start_sync(self) -> Command | None:
        state = self._state
        state.resume_view = state.view
        state.view = View.SYNC_IN_PROGRESS
        state.sync_lines = []
        state.cancel_requested = False
        return StartSync()

    def _leave_sync_view(self) -> None:
        state = self._state
        if state.view is not View.SYNC_IN_PROGRESS:
            return
        state.view = state.resume_view
        if state.view is View.DETAIL and state.selected is None:
            state.view = View.LIST
        state.cancel_requested = False

    def _copy_selection(self) -> Command | None:
        definition = self._state.selected
        if definition is None:
            self._set_status("Nothing selected to copy", StatusLevel.WARNING)
            return None
        self._set_status(f"Copied {definition.title} to the clipboard", StatusLevel.SUCCESS)
        return CopyRequest(text=definition.body)

    # --- Selection, filtering and scrolling -------------------------------

    def _refilter(self, keep: DefinitionKey | None) -> None:
        """Recompute the visible list, keeping ``keep`` selected when still present."""

        state = self._state
        state.items = self._index.query(
            kind=state.kind_filter,
            source=state.source_filter,
            text=state.search_query,
        )
        position = Index.position_of(keep, state.items)
        if position is None:
            position = 0 if state.items else None
            state.detail_scroll = 0
        state.selected_index = position
        self._clamp_scroll()
        self._reveal_selection()

    def _replace_index(self, index: Index) -> None:
        state = self._state
        keep = state.selected.key if state.selected is not None else None
        self._index = index
        self._source_names = sorted(set(self._source_names) | set(index.sources()))
        self._refilter(keep)

    def _set_query(self, query: str) -> None:
        state = self._state
        keep = state.selected.key if state.selected is not None else None
        state.search_query = query
        self._refilter(keep)

    def _clear_filters(self) -> None:
        state = self._state
        if state.kind_filter is None and state.source_filter is None and not state.search_query:
            return
        keep = state.selected.key if state.selected is not None else None
        state.kind_filter = None
        state.source_filter = None
        state.search_query = ""
        self._refilter(keep)
        self._set_status("Filters cleared", StatusLevel.INFO)

    def _select(self, position: int) -> None:
        state = self._state
        if position != state.selected_index:
            state.detail_scroll = 0
        state.selected_index = position
        self._reveal_selection()

    def _move_selection(self, delta: int) -> None:
        state = self._state
        if not state.items:
            return
        current = state.selected_index if state.selected_index is not None else 0
        self._select(max(0, min(len(state.items) - 1, current + delta)))

    def _open_detail(self) -> None:
        if self._state.selected is not None:
            self._state.view = View.DETAIL

    def _reveal_selection(self) -> None:
        state = self._state
        if state.selected_index is None:
            return
        viewport = max(1, self.layout.viewport_height)
        if state.selected_index < state.scroll_offset:
            state.scroll_offset = state.selected_index
        elif state.selected_index >= state.scroll_offset + viewport:
            state.scroll_offset = state.selected_index - viewport + 1

    def _max_scroll(self) -> int:
        return max(0, len(self._state.items) - self.layout.viewport_height)

    def _clamp_scroll(self) -> None:
        state = self._state
        state.scroll_offset = max(0, min(state.scroll_offset, self._max_scroll()))

    def _scroll_list(self, delta: int) -> None:
        state = self._state
        state.scroll_offset = max(0, min(state.scroll_offset + delta, self._max_scroll()))

    def _max_detail_scroll(self) -> int:
        selected = self._state.selected
        if selected is None:
            return 0
        return max(0, len(selected.body.splitlines()) - 1)

    def _scroll_detail(self, delta: int) -> None:
        state = self._state
        state.detail_scroll = max(0, min(state.detail_scroll + delta, self._max_detail_scroll()))

    def _is_double_click(self, event: MouseEvent) -> bool:
        last = self._last_click
        if last is None:
            return False
        x, y, at = last
        return (x, y) == (event.x, event.y) and 0 <= event.time - at <= DOUBLE_CLICK_SECONDS

    def _set_status(self, text: str, level: StatusLevel) -> None:
        ticks = ERROR_STATUS_TICKS if level is StatusLevel.ERROR else STATUS_TICKS
        self._state.status = StatusMessage(text=text, level=level, ticks_left=ticks)


__all__ = ["BrowserController", "DOUBLE_CLICK_SECONDS", "WHEEL_STEP"]
