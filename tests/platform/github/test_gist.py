"""Tests for gist payload parsing."""

from __future__ import annotations

import pytest

from agent_defs.features.definitions.domain.errors import NetworkError
from agent_defs.platform.github.gist import parse_gist_payload


def test_keeps_inline_files_sorted() -> None:
    payload = {
        "files": {
            "b.md": {"filename": "b.md", "content": "B"},
            "a.md": {"filename": "a.md", "content": "A"},
            "big.bin": {"filename": "big.bin", "content": None, "truncated": True},
        }
    }

    files = parse_gist_payload(payload)

    assert [(item.filename, item.content) for item in files] == [("a.md", "A"), ("b.md", "B")]


def test_missing_files_mapping_raises() -> None:
    with pytest.raises(NetworkError):
        _ = parse_gist_payload({"message": "Not Found"})
