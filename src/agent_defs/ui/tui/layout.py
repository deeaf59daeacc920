"""Screen geometry shared by the renderer and mouse hit-testing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

LIST_PANE_RATIO: Final[float] = 0.4
MIN_LIST_WIDTH: Final[int] = 24
HEADER_ROWS: Final[int] = 1
STATUS_ROWS: Final[int] = 1
PANEL_BORDER: Final[int] = 1


@dataclass(slots=True, frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height


@dataclass(slots=True, frozen=True)
class ScreenLayout:
    """Header on row 0, list and side panes in between, status on the last row.

    List rows are drawn without a border, so list row ``r`` sits on screen
    row ``list_pane.y + r``. The side pane is a bordered panel; overlays are
    drawn inside it with their first option on its first inner row.
    """

    width: int
    height: int
    header: Rect
    list_pane: Rect
    side_pane: Rect
    status: Rect

    @classmethod
    def compute(cls, width: int, height: int) -> "ScreenLayout":
        width = max(width, 2)
        height = max(height, HEADER_ROWS + STATUS_ROWS + 1)
        body_height = height - HEADER_ROWS - STATUS_ROWS

        list_width = max(MIN_LIST_WIDTH, int(width * LIST_PANE_RATIO))
        if list_width >= width - 10:
            list_width = max(1, width // 2)

        return cls(
            width=width,
            height=height,
            header=Rect(0, 0, width, HEADER_ROWS),
            list_pane=Rect(0, HEADER_ROWS, list_width, body_height),
            side_pane=Rect(list_width, HEADER_ROWS, width - list_width, body_height),
            status=Rect(0, height - STATUS_ROWS, width, STATUS_ROWS),
        )

    @property
    def viewport_height(self) -> int:
        """Number of list rows visible at once."""

        return self.list_pane.height

    @property
    def side_inner(self) -> Rect:
        pane = self.side_pane
        return Rect(
            pane.x + PANEL_BORDER,
            pane.y + PANEL_BORDER,
            max(0, pane.width - 2 * PANEL_BORDER),
            max(0, pane.height - 2 * PANEL_BORDER),
        )

    def list_row_at(self, x: int, y: int) -> int | None:
        """Zero-based list row under ``(x, y)``, if the point is in the list pane."""

        if not self.list_pane.contains(x, y):
            return None
        return y - self.list_pane.y

    def overlay_row_at(self, x: int, y: int) -> int | None:
        """Zero-based overlay content row under ``(x, y)``, if inside the overlay."""

        inner = self.side_inner
        if not inner.contains(x, y):
            return None
        return y - inner.y


__all__ = ["Rect", "ScreenLayout"]
