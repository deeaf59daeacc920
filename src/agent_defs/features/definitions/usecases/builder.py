"""
Summary: Turn a raw remote file into a RemoteRecord ready for the cache.
Why: Sources only know paths and bytes; the builder applies naming rules.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass

from ..domain.errors import ParseError
from ..domain.frontmatter import FrontmatterError, parse_frontmatter
from ..domain.models import DefinitionKind, RemoteRecord
from ..domain.paths import (
    is_definition_file,
    is_skill_reference,
    parse_relative_path,
)


@dataclass(slots=True, frozen=True)
class DocumentDetails:
    """Display attributes recovered from a document body."""

    name: str | None
    description: str | None
    tools: tuple[str, ...]
    model: str | None


def fingerprint_of(content: str) -> str:
    """Content hash used to detect remote changes."""

    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def is_candidate_path(relative_path: str) -> bool:
    """Return True when a file at ``relative_path`` should become a record."""

    if not is_definition_file(relative_path):
        return False
    return not is_skill_reference(relative_path)


def build_record(relative_path: str, content: str) -> RemoteRecord | None:
    """Build a record from ``content`` found at ``relative_path``.

    Returns:
        RemoteRecord | None: ``None`` when the path does not describe a
        definition (wrong extension, hidden, skill reference, no kind).

    Raises:
        ParseError: When the document claims to be a definition but cannot
        be parsed.
    """

    if not is_candidate_path(relative_path):
        return None

    info = parse_relative_path(relative_path)
    is_json = relative_path.endswith(".json")
    if info.kind is None and not is_json:
        return None
    details = read_details(relative_path, content)

    kind = info.kind
    if is_json:
        override = _json_kind(content)
        if override is not None:
            kind = override
    if kind is None:
        return None

    return RemoteRecord(
        relative_path=relative_path,
        kind=kind,
        title=details.name or info.name,
        body=content,
        fingerprint=fingerprint_of(content),
        description=details.description,
        category=info.category,
    )


def read_details(relative_path: str, content: str) -> DocumentDetails:
    """Extract name, description, tools and model from a document.

    Raises:
        ParseError: On malformed JSON or frontmatter.
    """

    if relative_path.endswith(".json"):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ParseError(relative_path, f"JSON parse failed: {exc}") from exc
        if not isinstance(data, dict):
            raise ParseError(relative_path, "JSON definition must be an object")
        tools = data.get("tools") or []
        return DocumentDetails(
            name=_text(data.get("name")),
            description=_text(data.get("description")),
            tools=tuple(str(tool) for tool in tools) if isinstance(tools, list) else (),
            model=_text(data.get("model")),
        )

    try:
        parsed = parse_frontmatter(content)
    except FrontmatterError as exc:
        raise ParseError(relative_path, str(exc)) from exc

    frontmatter = parsed.frontmatter
    if frontmatter is None:
        return DocumentDetails(name=None, description=None, tools=(), model=None)
    return DocumentDetails(
        name=frontmatter.name,
        description=frontmatter.description,
        tools=frontmatter.tools,
        model=frontmatter.model,
    )


def _json_kind(content: str) -> DefinitionKind | None:
    data = json.loads(content)
    value = data.get("kind") if isinstance(data, dict) else None
    return DefinitionKind.parse(value) if isinstance(value, str) else None


def _text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


__all__ = [
    "DocumentDetails",
    "build_record",
    "fingerprint_of",
    "is_candidate_path",
    "read_details",
]
