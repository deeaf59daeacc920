"""Fetch the files of a GitHub gist."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from agent_defs.features.definitions.domain.errors import NetworkError

from .http_client import GitHubHTTPClient


@dataclass(slots=True, frozen=True)
class GistFile:
    filename: str
    content: str


def fetch_gist_files(client: GitHubHTTPClient, gist_id: str) -> list[GistFile]:
    """Return the files of ``gist_id`` that carry inline content."""

    payload = client.get_json(f"gists/{gist_id}")
    return parse_gist_payload(payload)


def parse_gist_payload(payload: Any) -> list[GistFile]:
    """Extract inline files from a ``GET /gists/{id}`` payload.

    Files without inline content (truncated or binary) are skipped.
    """

    files = payload.get("files") if isinstance(payload, dict) else None
    if not isinstance(files, dict):
        raise NetworkError("gist payload has no 'files' mapping")

    result: list[GistFile] = []
    for key, entry in files.items():
        if not isinstance(entry, dict):
            continue
        content = entry.get("content")
        if not isinstance(content, str):
            continue
        filename = entry.get("filename") or key
        result.append(GistFile(filename=str(filename), content=content))
    result.sort(key=lambda item: item.filename)
    return result


__all__ = ["GistFile", "fetch_gist_files", "parse_gist_payload"]
