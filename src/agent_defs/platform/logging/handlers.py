"""Rich console handler with status glyphs and highlighted paths."""

from __future__ import annotations

import logging
import re
from typing import Any, Final

from rich.logging import RichHandler
from rich.style import Style
from rich.text import Text

_PATH_PATTERN: Final[re.Pattern[str]] = re.compile(r"(?:/[^/\s]+)+/?")

_PREFIXES: Final[tuple[tuple[str, str, str], ...]] = (
    ("Syncing source:", "🔄 ", "cyan"),
    ("Synced source:", "✓ ", "green"),
    ("Installed ", "💾 ", "green"),
    ("Configuration loaded from", "⚙️  ", "cyan"),
)


class StatusRichHandler(RichHandler):
    """Rich handler that prefixes level glyphs and renders paths in white."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs["show_time"] = False
        kwargs["show_path"] = False
        kwargs["show_level"] = False
        kwargs["rich_tracebacks"] = True
        kwargs["markup"] = False
        kwargs["omit_repeated_times"] = False
        super().__init__(*args, **kwargs)

    def render_message(self, record: logging.LogRecord, message: str) -> Text:
        """Render ``message`` with a level glyph and path highlighting.

        Args:
            record: Log record to format.
            message: Message to render.

        Returns:
            Rich Text object with formatted message.
        """
        text = Text()

        if record.levelno >= logging.ERROR:
            text.append("❌ ", style=Style(color="red", bold=True))
            text.append(message, style=Style(color="red"))
            return text
        if record.levelno >= logging.WARNING:
            text.append("⚠️  ", style=Style(color="yellow", bold=True))
            text.append(message, style=Style(color="yellow"))
            return text

        for prefix, glyph, color in _PREFIXES:
            if message.startswith(prefix):
                text.append(glyph, style=Style(color=color, bold=True))
                text.append(prefix, style=Style(color=color))
                _append_with_paths(text, message[len(prefix):], color)
                return text

        text.append("ℹ️  ", style=Style(color="blue", bold=True))
        _append_with_paths(text, message, "blue")
        return text


def _append_with_paths(text: Text, message: str, color: str) -> None:
    cursor = 0
    for match in _PATH_PATTERN.finditer(message):
        if match.start() > cursor:
            text.append(message[cursor:match.start()], style=Style(color=color))
        path = match.group(0)
        parts = path.split("/")
        for index, part in enumerate(parts):
            if part:
                text.append(part, style=Style(color="bright_white"))
            if index < len(parts) - 1:
                text.append("/", style=Style(color="magenta"))
        cursor = match.end()
    if cursor < len(message):
        text.append(message[cursor:], style=Style(color=color))


__all__ = ["StatusRichHandler"]
