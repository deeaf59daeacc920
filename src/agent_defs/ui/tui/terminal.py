"""Where: src/agent_defs/ui/tui/terminal.py
What: Raw terminal plumbing: cbreak mode, mouse reporting, polling reads, clipboard.
Why: rich draws the screen but does not read input.
"""

from __future__ import annotations

import base64
import os
import select
import shutil
import sys
import termios
import tty
from types import TracebackType
from typing import Any, Final, TextIO, final

MOUSE_ON: Final[str] = "\x1b[?1000h\x1b[?1002h\x1b[?1006h"
MOUSE_OFF: Final[str] = "\x1b[?1006l\x1b[?1002l\x1b[?1000l"
READ_CHUNK: Final[int] = 4096


@final
class Terminal:
    """Context manager that puts stdin into cbreak mode with SGR mouse reporting."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._fd = self._stdin.fileno()
        self._saved: list[Any] | None = None

    def __enter__(self) -> "Terminal":
        self._saved = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        # Ctrl-C arrives as a key so an open overlay can handle it.
        attributes = termios.tcgetattr(self._fd)
        attributes[3] &= ~termios.ISIG
        termios.tcsetattr(self._fd, termios.TCSANOW, attributes)
        self._write(MOUSE_ON)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self._write(MOUSE_OFF)
        if self._saved is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
            self._saved = None

    def read(self, timeout: float) -> bytes:
        """Bytes available within ``timeout`` seconds; empty when none arrived."""

        ready, _, _ = select.select([self._fd], [], [], timeout)
        if not ready:
            return b""
        return os.read(self._fd, READ_CHUNK)

    def size(self) -> tuple[int, int]:
        columns, lines = shutil.get_terminal_size()
        return columns, lines

    def copy_to_clipboard(self, text: str) -> None:
        """Ask the terminal to set the clipboard through OSC 52."""

        payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
        self._write(f"\x1b]52;c;{payload}\x07")

    def _write(self, sequence: str) -> None:
        _ = self._stdout.write(sequence)
        self._stdout.flush()


__all__ = ["Terminal"]
