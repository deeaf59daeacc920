"""Input events consumed by the browser controller."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Key(str, Enum):
    """Non-printable keys the browser reacts to."""

    ENTER = "enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"
    TAB = "tab"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    DELETE = "delete"
    CTRL_C = "ctrl_c"
    CTRL_D = "ctrl_d"
    CTRL_U = "ctrl_u"


@dataclass(slots=True, frozen=True)
class KeyEvent:
    """Either a named ``key`` or a printable ``char``."""

    key: Key | None = None
    char: str | None = None

    @classmethod
    def of(cls, value: Key | str) -> "KeyEvent":
        if isinstance(value, Key):
            return cls(key=value)
        return cls(char=value)

    def is_char(self, *chars: str) -> bool:
        return self.char is not None and self.char in chars


class MouseAction(str, Enum):
    PRESS = "press"
    RELEASE = "release"
    DRAG = "drag"
    WHEEL_UP = "wheel_up"
    WHEEL_DOWN = "wheel_down"


@dataclass(slots=True, frozen=True)
class MouseEvent:
    """Mouse report in zero-based screen cells; ``time`` is monotonic seconds."""

    action: MouseAction
    x: int
    y: int
    button: int = 0
    time: float = 0.0


@dataclass(slots=True, frozen=True)
class ResizeEvent:
    width: int
    height: int


InputEvent = KeyEvent | MouseEvent | ResizeEvent


__all__ = ["InputEvent", "Key", "KeyEvent", "MouseAction", "MouseEvent", "ResizeEvent"]
