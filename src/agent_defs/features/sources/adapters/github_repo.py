"""
Summary: List definitions from a GitHub repository tarball snapshot.
Why: One download per sync is cheaper than walking the contents API.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Final

from agent_defs.features.definitions.domain.errors import ParseError
from agent_defs.features.definitions.usecases.builder import build_record
from agent_defs.features.sources.domain.models import Layout, SourceConfig
from agent_defs.features.sources.usecases.ports import ListingItem
from agent_defs.platform.github.http_client import GitHubHTTPClient
from agent_defs.platform.github.tarball import RepoFile, fetch_repository_files
from agent_defs.platform.logging import logger

_CATEGORIES_PREFIX: Final[str] = "categories/"

Fetcher = Callable[[GitHubHTTPClient, str, str, str], list[RepoFile]]


class GitHubRepoSource:
    """Definition source for ``github-repo`` entries."""

    def __init__(self, client: GitHubHTTPClient, *, fetcher: Fetcher = fetch_repository_files) -> None:
        self._client = client
        self._fetch = fetcher

    def list(self, config: SourceConfig) -> Iterator[ListingItem]:
        owner, repo = config.owner_repo
        logger.debug("Downloading %s/%s@%s", owner, repo, config.branch)
        files = self._fetch(self._client, owner, repo, config.branch)
        return self._records(config, files)

    def _records(self, config: SourceConfig, files: list[RepoFile]) -> Iterator[ListingItem]:
        for repo_file in files:
            relative = map_repository_path(repo_file.path, config)
            if relative is None:
                continue
            try:
                record = build_record(relative, repo_file.content)
            except ParseError as exc:
                yield exc
                continue
            if record is not None:
                yield record


def map_repository_path(path: str, config: SourceConfig) -> str | None:
    """Map a repository path onto ``kind/category/name`` form, or ``None`` to skip."""

    if config.layout is Layout.AWESOME_SUBAGENTS:
        return _awesome_subagents_path(path)

    if config.base_path:
        if not path.startswith(config.base_path):
            return None
        path = path[len(config.base_path):]
    return path or None


def _awesome_subagents_path(path: str) -> str | None:
    if not path.startswith(_CATEGORIES_PREFIX) or not path.endswith(".md"):
        return None
    if path.endswith("README.md"):
        return None
    category_dir, separator, rest = path[len(_CATEGORIES_PREFIX):].partition("/")
    if not separator or not rest:
        return None
    return f"agents/{strip_numeric_prefix(category_dir)}/{rest}"


def strip_numeric_prefix(value: str) -> str:
    """``01-core-development`` becomes ``core-development``."""

    digits = len(value) - len(value.lstrip("0123456789"))
    if digits > 0 and value[digits:].startswith("-"):
        return value[digits + 1:]
    return value


__all__ = ["GitHubRepoSource", "map_repository_path", "strip_numeric_prefix"]
