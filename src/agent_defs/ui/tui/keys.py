"""
Summary: Decode raw terminal bytes into key and mouse events.
Why: The browser reads stdin in cbreak mode and sees escape sequences.
"""

from __future__ import annotations

import codecs
import re
from typing import Final

from .events import InputEvent, Key, KeyEvent, MouseAction, MouseEvent

ESC: Final[str] = "\x1b"

_CONTROL_KEYS: Final[dict[str, Key]] = {
    "\r": Key.ENTER,
    "\n": Key.ENTER,
    "\t": Key.TAB,
    "\x7f": Key.BACKSPACE,
    "\x08": Key.BACKSPACE,
    "\x03": Key.CTRL_C,
    "\x04": Key.CTRL_D,
    "\x15": Key.CTRL_U,
}

_ESCAPE_SEQUENCES: Final[dict[str, Key]] = {
    "[A": Key.UP,
    "[B": Key.DOWN,
    "[C": Key.RIGHT,
    "[D": Key.LEFT,
    "OA": Key.UP,
    "OB": Key.DOWN,
    "OC": Key.RIGHT,
    "OD": Key.LEFT,
    "[H": Key.HOME,
    "[F": Key.END,
    "OH": Key.HOME,
    "OF": Key.END,
    "[1~": Key.HOME,
    "[7~": Key.HOME,
    "[4~": Key.END,
    "[8~": Key.END,
    "[3~": Key.DELETE,
    "[5~": Key.PAGE_UP,
    "[6~": Key.PAGE_DOWN,
}

# CSI < button ; column ; row (M = press/motion, m = release)
_SGR_MOUSE: Final[re.Pattern[str]] = re.compile(r"\[<(\d+);(\d+);(\d+)([Mm])")
_CSI: Final[re.Pattern[str]] = re.compile(r"\[[0-9;?<]*[ -/]*[@-~]")
_SS3: Final[re.Pattern[str]] = re.compile(r"O[@-~]")


class InputDecoder:
    """Incremental decoder; keeps partial escape sequences between reads."""

    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    def feed(self, data: bytes, now: float = 0.0) -> list[InputEvent]:
        """Decode ``data``. A lone trailing ESC is reported as the Escape key."""

        self._pending += self._utf8.decode(data)
        events: list[InputEvent] = []
        text = self._pending
        position = 0
        while position < len(text):
            char = text[position]
            if char != ESC:
                events.append(_plain_key(char))
                position += 1
                continue

            rest = text[position + 1:]
            if not rest or rest[0] == ESC:
                events.append(KeyEvent(key=Key.ESCAPE))
                position += 1
                continue

            consumed, event = _decode_escape(rest, now)
            if consumed == 0:
                # Incomplete sequence: wait for more bytes.
                break
            if event is not None:
                events.append(event)
            position += 1 + consumed

        self._pending = text[position:]
        return events

    def flush(self) -> list[InputEvent]:
        """Emit whatever is pending as plain keys (used after an input timeout)."""

        pending, self._pending = self._pending, ""
        events: list[InputEvent] = []
        for char in pending:
            events.append(KeyEvent(key=Key.ESCAPE) if char == ESC else _plain_key(char))
        return events


def _plain_key(char: str) -> KeyEvent:
    key = _CONTROL_KEYS.get(char)
    if key is not None:
        return KeyEvent(key=key)
    return KeyEvent(char=char)


def _decode_escape(rest: str, now: float) -> tuple[int, InputEvent | None]:
    """Decode the text after an ESC. Returns ``(consumed, event)``; 0 means incomplete."""

    if rest[0] not in "[O":
        # Alt+key: report the key itself.
        return 1, _plain_key(rest[0])

    mouse = _SGR_MOUSE.match(rest)
    if mouse is not None:
        return mouse.end(), _mouse_event(mouse, now)

    for sequence, key in _ESCAPE_SEQUENCES.items():
        if rest.startswith(sequence):
            return len(sequence), KeyEvent(key=key)

    pattern = _CSI if rest[0] == "[" else _SS3
    other = pattern.match(rest)
    if other is not None:
        return other.end(), None
    if len(rest) < 16:
        return 0, None
    # Garbage that never terminates: drop the introducer.
    return 1, None


def _mouse_event(match: re.Match[str], now: float) -> MouseEvent | None:
    code = int(match.group(1))
    x = int(match.group(2)) - 1
    y = int(match.group(3)) - 1
    released = match.group(4) == "m"

    if code & 64:
        action = MouseAction.WHEEL_DOWN if code & 1 else MouseAction.WHEEL_UP
        return MouseEvent(action=action, x=x, y=y, time=now)

    button = code & 3
    if code & 32:
        return MouseEvent(action=MouseAction.DRAG, x=x, y=y, button=button, time=now)
    action = MouseAction.RELEASE if released else MouseAction.PRESS
    return MouseEvent(action=action, x=x, y=y, button=button, time=now)


__all__ = ["InputDecoder"]
