"""
Summary: Split definition documents into YAML frontmatter and markdown body.
Why: Titles, descriptions, tools and models live in the frontmatter block.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final

import yaml

_DELIMITER: Final[str] = "---"


class FrontmatterError(ValueError):
    """Raised when a frontmatter block is present but not valid YAML."""


@dataclass(slots=True, frozen=True)
class Frontmatter:
    """Well-known frontmatter keys plus the remaining scalar extras."""

    name: str | None = None
    description: str | None = None
    tools: tuple[str, ...] = ()
    model: str | None = None
    extras: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class ParsedDocument:
    frontmatter: Frontmatter | None
    body: str


def parse_frontmatter(content: str) -> ParsedDocument:
    """Parse an optional ``---`` delimited YAML block at the top of ``content``.

    A document without an opening delimiter, or with an opening delimiter
    but no closing one, is returned unchanged as the body.

    Raises:
        FrontmatterError: If the delimited block is not a YAML mapping.
    """

    trimmed = content.lstrip()
    if not trimmed.startswith(_DELIMITER):
        return ParsedDocument(frontmatter=None, body=content)

    after_opening = trimmed[len(_DELIMITER):]
    end = after_opening.find("\n" + _DELIMITER)
    if end < 0:
        return ParsedDocument(frontmatter=None, body=content)

    yaml_text = after_opening[:end]
    rest = after_opening[end + len(_DELIMITER) + 1:]
    body = rest[1:] if rest.startswith("\n") else rest

    try:
        loaded: Any = yaml.safe_load(yaml_text)
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"invalid YAML in frontmatter: {exc}") from exc

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise FrontmatterError("frontmatter must be a mapping")

    return ParsedDocument(frontmatter=_to_frontmatter(loaded), body=body)


def _to_frontmatter(data: dict[Any, Any]) -> Frontmatter:
    extras: dict[str, str] = {}
    for key, value in data.items():
        if key in ("name", "description", "tools", "model"):
            continue
        if isinstance(value, bool):
            extras[str(key)] = "true" if value else "false"
        elif isinstance(value, (str, int, float)):
            extras[str(key)] = str(value)

    return Frontmatter(
        name=_optional_str(data.get("name")),
        description=_optional_str(data.get("description")),
        tools=_tool_list(data.get("tools")),
        model=_optional_str(data.get("model")),
        extras=extras,
    )


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _tool_list(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if isinstance(value, list):
        return tuple(str(item).strip() for item in value if str(item).strip())
    return ()


__all__ = ["Frontmatter", "FrontmatterError", "ParsedDocument", "parse_frontmatter"]
