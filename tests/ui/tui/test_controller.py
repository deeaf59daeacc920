"""
Summary: Tests for the browser state machine.
Why: Overlay, selection and mouse rules are easy to break and hard to see.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from agent_defs.features.definitions.domain.models import Definition, DefinitionKind
from agent_defs.features.index.usecases.index import Index
from agent_defs.features.sync.domain.models import SourceOutcome, SyncPhase, SyncProgress, SyncReport
from agent_defs.ui.tui.controller import BrowserController
from agent_defs.ui.tui.events import Key, KeyEvent, MouseAction, MouseEvent, ResizeEvent
from agent_defs.ui.tui.messages import (
    CancelSync,
    CopyRequest,
    InstallRequest,
    Quit,
    StartSync,
    SyncFailed,
    SyncFinished,
    SyncProgressMessage,
)
from agent_defs.ui.tui.state import OverlayKind, StatusLevel, View

Factory = Callable[..., BrowserController]
MakeDefinition = Callable[..., Definition]


def press(controller: BrowserController, *values: Key | str) -> list[object]:
    commands: list[object] = []
    for value in values:
        command = controller.handle_key(KeyEvent.of(value))
        if command is not None:
            commands.append(command)
    return commands


def type_text(controller: BrowserController, text: str) -> None:
    _ = press(controller, *text)


def click(controller: BrowserController, x: int, y: int, at: float = 0.0) -> None:
    _ = controller.handle_mouse(MouseEvent(action=MouseAction.PRESS, x=x, y=y, time=at))


def wheel(controller: BrowserController, action: MouseAction, x: int = 2, y: int = 5) -> None:
    _ = controller.handle_mouse(MouseEvent(action=action, x=x, y=y))


@pytest.fixture
def mixed(make_definition: MakeDefinition) -> list[Definition]:
    return [
        make_definition("agents/a.md", title="Alpha"),
        make_definition("commands/b.md", title="Bravo"),
        make_definition("commands/c.md", title="Charlie", source_name="other"),
    ]


# --- Selection and scrolling ---------------------------------------------


def test_starts_on_first_item(controller_factory: Factory, agents: list[Definition]) -> None:
    controller = controller_factory(agents)

    snapshot = controller.snapshot()
    assert snapshot.view is View.LIST
    assert snapshot.selected_index == 0
    assert snapshot.total_items == 30
    assert len(snapshot.visible_items) == 22


def test_empty_index_has_no_selection(controller_factory: Factory) -> None:
    controller = controller_factory([])

    _ = press(controller, "j", Key.ENTER)

    assert controller.state.selected_index is None
    assert controller.state.view is View.LIST


def test_keyboard_movement_reveals_selection(controller_factory: Factory, agents: list[Definition]) -> None:
    controller = controller_factory(agents)

    _ = press(controller, Key.END)
    assert controller.state.selected_index == 29
    assert controller.state.scroll_offset == 8

    _ = press(controller, "g")
    assert controller.state.selected_index == 0
    assert controller.state.scroll_offset == 0

    _ = press(controller, Key.PAGE_DOWN, "j")
    assert controller.state.selected_index == 23


def test_wheel_scroll_is_clamped_and_keeps_selection(
    controller_factory: Factory, agents: list[Definition]
) -> None:
    controller = controller_factory(agents)

    for _ in range(10):
        wheel(controller, MouseAction.WHEEL_DOWN)
    assert controller.state.scroll_offset == 8
    assert controller.state.selected_index == 0

    for _ in range(10):
        wheel(controller, MouseAction.WHEEL_UP)
    assert controller.state.scroll_offset == 0


def test_click_selects_row_under_pointer_after_scrolling(
    controller_factory: Factory, agents: list[Definition]
) -> None:
    controller = controller_factory(agents)
    wheel(controller, MouseAction.WHEEL_DOWN)

    click(controller, 2, 1 + 4)

    assert controller.state.scroll_offset == 3
    assert controller.state.selected_index == 7
    assert controller.state.view is View.LIST


def test_click_below_last_item_is_ignored(controller_factory: Factory, mixed: list[Definition]) -> None:
    controller = controller_factory(mixed)

    click(controller, 2, 10)

    assert controller.state.selected_index == 0


def test_double_click_opens_detail(controller_factory: Factory, agents: list[Definition]) -> None:
    controller = controller_factory(agents)

    click(controller, 2, 3, at=1.0)
    click(controller, 2, 3, at=1.3)

    assert controller.state.view is View.DETAIL
    assert controller.state.selected_index == 2


def test_slow_second_click_only_selects(controller_factory: Factory, agents: list[Definition]) -> None:
    controller = controller_factory(agents)

    click(controller, 2, 3, at=1.0)
    click(controller, 2, 3, at=1.5)

    assert controller.state.view is View.LIST


def test_detail_scrolling_and_back(controller_factory: Factory, agents: list[Definition]) -> None:
    controller = controller_factory(agents)

    _ = press(controller, Key.ENTER, "j", "j", Key.PAGE_DOWN)
    assert controller.state.view is View.DETAIL
    assert controller.state.detail_scroll == 7

    _ = press(controller, "G")
    assert controller.state.detail_scroll == 11

    _ = press(controller, Key.ESCAPE)
    assert controller.state.view is View.LIST


def test_resize_keeps_selection_visible(controller_factory: Factory, agents: list[Definition]) -> None:
    controller = controller_factory(agents)
    _ = press(controller, *(["j"] * 15))

    _ = controller.handle_event(ResizeEvent(width=80, height=10))

    assert controller.state.selected_index == 15
    assert controller.state.scroll_offset == 8


# --- Overlays ------------------------------------------------------------


def test_only_one_overlay_at_a_time(controller_factory: Factory, mixed: list[Definition]) -> None:
    controller = controller_factory(mixed)

    _ = press(controller, "f", "p", "/", "i")

    assert controller.state.overlay is not None
    assert controller.state.overlay.kind is OverlayKind.KIND_FILTER
    assert len(controller.state.overlay_stack) == 1


def test_quit_closes_overlay_before_quitting(controller_factory: Factory, mixed: list[Definition]) -> None:
    controller = controller_factory(mixed)

    assert press(controller, "f", "q") == []
    assert controller.state.overlay is None
    assert press(controller, "q") == [Quit()]


def test_search_treats_q_as_text(controller_factory: Factory, mixed: list[Definition]) -> None:
    controller = controller_factory(mixed)

    _ = press(controller, "/", "q")

    assert controller.state.overlay is not None
    assert controller.state.search_query == "q"


def test_search_filters_live_and_escape_restores(
    controller_factory: Factory, agents: list[Definition]
) -> None:
    controller = controller_factory(agents)
    _ = press(controller, *(["j"] * 5))

    _ = press(controller, "/")
    type_text(controller, "agent 1")
    assert len(controller.state.items) == 10
    assert controller.state.selected is not None
    assert controller.state.selected.title == "Agent 10"

    _ = press(controller, Key.ESCAPE)

    assert controller.state.overlay is None
    assert controller.state.search_query == ""
    assert len(controller.state.items) == 30
    assert controller.state.selected_index == 5


def test_search_enter_keeps_query(controller_factory: Factory, agents: list[Definition]) -> None:
    controller = controller_factory(agents)

    _ = press(controller, "/")
    type_text(controller, "agent 2x")
    _ = press(controller, Key.BACKSPACE, Key.ENTER)

    assert controller.state.overlay is None
    assert controller.state.search_query == "agent 2"
    assert len(controller.state.items) == 10


def test_escape_in_list_clears_filters(controller_factory: Factory, agents: list[Definition]) -> None:
    controller = controller_factory(agents)
    _ = press(controller, "/")
    type_text(controller, "agent 2")
    _ = press(controller, Key.ENTER, Key.ESCAPE)

    assert controller.state.search_query == ""
    assert len(controller.state.items) == 30
    assert controller.state.selected is not None
    assert controller.state.selected.title == "Agent 20"


def test_kind_filter_keeps_selection_when_still_visible(
    controller_factory: Factory, mixed: list[Definition]
) -> None:
    controller = controller_factory(mixed)
    _ = press(controller, Key.END)

    _ = press(controller, "f")
    assert controller.snapshot().overlay_options == ("All", DefinitionKind.AGENT.label, DefinitionKind.COMMAND.label)
    _ = press(controller, "j", "j", Key.ENTER)

    assert controller.state.kind_filter is DefinitionKind.COMMAND
    assert [item.title for item in controller.state.items] == ["Bravo", "Charlie"]
    assert controller.state.selected is not None
    assert controller.state.selected.title == "Charlie"


def test_source_filter_lists_configured_and_cached_names(
    controller_factory: Factory, mixed: list[Definition]
) -> None:
    controller = controller_factory(mixed, source_names=["zeta", "src"])

    _ = press(controller, "p")

    assert controller.snapshot().overlay_options == ("All", "other", "src", "zeta")


def test_clicking_a_filter_option_applies_it(controller_factory: Factory, mixed: list[Definition]) -> None:
    controller = controller_factory(mixed)
    inner = controller.layout.side_inner
    _ = press(controller, "p")

    click(controller, inner.x + 1, inner.y + 1)

    assert controller.state.overlay is None
    assert controller.state.source_filter == "other"
    assert [item.title for item in controller.state.items] == ["Charlie"]


def test_click_outside_overlay_closes_and_restores(
    controller_factory: Factory, mixed: list[Definition]
) -> None:
    controller = controller_factory(mixed)
    _ = press(controller, "j", "f", "j")

    click(controller, 2, 1)

    assert controller.state.overlay is None
    assert controller.state.kind_filter is None
    assert controller.state.selected_index == 1


def test_install_dialog_requests_install(
    controller_factory: Factory, mixed: list[Definition], tmp_path: Path
) -> None:
    controller = controller_factory(mixed)

    commands = press(controller, "i")
    snapshot = controller.snapshot()
    assert commands == []
    assert snapshot.overlay is OverlayKind.INSTALL_DIALOG
    assert snapshot.install_destination == tmp_path / "project" / ".claude" / "Alpha.md"
    assert snapshot.install_exists is False

    commands = press(controller, "y")

    assert commands == [InstallRequest(definition=mixed[0], target_dir=tmp_path / "project", overwrite=False)]
    assert controller.state.overlay is None


def test_install_dialog_flags_existing_file(
    controller_factory: Factory, mixed: list[Definition], tmp_path: Path
) -> None:
    existing = tmp_path / "project" / ".claude" / "Alpha.md"
    existing.parent.mkdir(parents=True)
    _ = existing.write_text("old", encoding="utf-8")
    controller = controller_factory(mixed)

    _ = press(controller, "i")
    assert controller.snapshot().install_exists is True
    commands = press(controller, Key.ENTER)

    assert isinstance(commands[0], InstallRequest)
    assert commands[0].overwrite is True


def test_install_dialog_can_be_declined(controller_factory: Factory, mixed: list[Definition]) -> None:
    controller = controller_factory(mixed)

    assert press(controller, "i", "n") == []
    assert controller.state.overlay is None


def test_copy_returns_body(controller_factory: Factory, mixed: list[Definition]) -> None:
    controller = controller_factory(mixed)

    assert press(controller, "c") == [CopyRequest(text=mixed[0].body)]
    assert controller.state.status is not None
    assert controller.state.status.level is StatusLevel.SUCCESS


# --- Sync ----------------------------------------------------------------


def test_sync_view_lifecycle(
    controller_factory: Factory,
    mixed: list[Definition],
    make_definition: MakeDefinition,
) -> None:
    controller = controller_factory(mixed)

    assert press(controller, "s") == [StartSync()]
    assert controller.state.view is View.SYNC_IN_PROGRESS
    assert press(controller, "j", "f") == []

    _ = controller.handle_message(
        SyncProgressMessage(SyncProgress("src", SyncPhase.RETRYING, "attempt 2 of 3"))
    )
    assert controller.state.sync_lines == ["src: retrying (attempt 2 of 3)"]

    assert press(controller, Key.ESCAPE) == [CancelSync()]
    assert press(controller, "x") == []

    grown = Index([*mixed, make_definition("agents/d.md", title="Delta")])
    report = SyncReport([SourceOutcome("src", added_count=1)])
    _ = controller.handle_message(SyncFinished(report=report, index=grown))

    assert controller.state.view is View.LIST
    assert controller.state.cancel_requested is False
    assert len(controller.state.items) == 4
    assert controller.state.status is not None
    assert controller.state.status.level is StatusLevel.SUCCESS


def test_quit_during_sync_requests_cancellation(
    controller_factory: Factory, mixed: list[Definition]
) -> None:
    controller = controller_factory(mixed)
    _ = press(controller, "s")

    assert press(controller, "q") == [Quit()]
    assert controller.state.cancel_requested is True


def test_sync_returns_to_detail_view(controller_factory: Factory, mixed: list[Definition]) -> None:
    controller = controller_factory(mixed)
    _ = press(controller, Key.ENTER, "s")

    _ = controller.handle_message(SyncFailed("boom"))

    assert controller.state.view is View.DETAIL
    assert controller.state.status is not None
    assert controller.state.status.level is StatusLevel.ERROR


@pytest.mark.parametrize(
    ("outcomes", "level"),
    [
        ([SourceOutcome("a", error="down")], StatusLevel.ERROR),
        ([SourceOutcome("a", error="down"), SourceOutcome("b")], StatusLevel.WARNING),
    ],
)
def test_failed_sources_set_status_level(
    controller_factory: Factory,
    mixed: list[Definition],
    outcomes: list[SourceOutcome],
    level: StatusLevel,
) -> None:
    controller = controller_factory(mixed)
    _ = press(controller, "s")

    _ = controller.handle_message(SyncFinished(report=SyncReport(outcomes), index=Index(mixed)))

    assert controller.state.status is not None
    assert controller.state.status.level is level


def test_status_expires_after_ticks(controller_factory: Factory, mixed: list[Definition]) -> None:
    controller = controller_factory(mixed, initial_status="hello")

    for _ in range(16):
        controller.tick()

    assert controller.state.status is None
