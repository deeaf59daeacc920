"""
Summary: Relative path rules that decide which remote files are definitions.
Why: Every source layout funnels through the same kind/category conventions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .models import DefinitionKind

SKILL_ENTRY_NAME: Final[str] = "SKILL.md"
_DEFINITION_SUFFIXES: Final[tuple[str, ...]] = (".md", ".json")


@dataclass(slots=True, frozen=True)
class PathInfo:
    """Name, kind and category derived from a relative path."""

    name: str
    kind: DefinitionKind | None
    category: str | None


def is_definition_file(relative_path: str) -> bool:
    """Return True for ``.md``/``.json`` files outside hidden directories."""

    if any(segment.startswith(".") for segment in relative_path.split("/")):
        return False
    return relative_path.endswith(_DEFINITION_SUFFIXES)


def is_skill_entry_point(relative_path: str) -> bool:
    return relative_path.startswith("skills/") and relative_path.endswith("/" + SKILL_ENTRY_NAME)


def is_skill_reference(relative_path: str) -> bool:
    """Files under ``skills/`` other than ``SKILL.md`` are supporting material."""

    return relative_path.startswith("skills/") and not relative_path.endswith("/" + SKILL_ENTRY_NAME)


def skill_directory_id(relative_path: str) -> str:
    """``skills/<cat>/<name>/SKILL.md`` becomes ``skills/<cat>/<name>``."""

    return relative_path.removesuffix("/" + SKILL_ENTRY_NAME)


def parse_relative_path(relative_path: str) -> PathInfo:
    """Derive name, kind and category from a path relative to the source root.

    ``agents/<category>/<name>.md`` yields an agent with a category,
    ``hooks/<name>.md`` a hook without one, and root-level files have no kind.
    Skill entry points take their name from the skill directory.
    """

    parts = relative_path.split("/")

    if is_skill_entry_point(relative_path):
        if len(parts) == 4:
            return PathInfo(name=parts[2], kind=DefinitionKind.SKILL, category=parts[1])
        directory = skill_directory_id(relative_path)
        return PathInfo(name=directory.rsplit("/", 1)[-1], kind=DefinitionKind.SKILL, category=None)

    file_name = parts[-1]
    name = file_name
    for suffix in _DEFINITION_SUFFIXES:
        if name.endswith(suffix):
            name = name[: -len(suffix)]
            break

    if len(parts) == 1:
        return PathInfo(name=name, kind=None, category=None)

    kind = DefinitionKind.parse(parts[0])
    category = parts[1] if len(parts) >= 3 else None
    return PathInfo(name=name, kind=kind, category=category)


__all__ = [
    "PathInfo",
    "SKILL_ENTRY_NAME",
    "is_definition_file",
    "is_skill_entry_point",
    "is_skill_reference",
    "parse_relative_path",
    "skill_directory_id",
]
