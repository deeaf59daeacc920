"""Definition source for ``github-gist`` entries."""

from __future__ import annotations

from collections.abc import Callable, Iterator

from agent_defs.features.definitions.domain.errors import ParseError
from agent_defs.features.definitions.usecases.builder import build_record
from agent_defs.features.sources.domain.models import SourceConfig
from agent_defs.features.sources.usecases.ports import ListingItem
from agent_defs.platform.github.gist import GistFile, fetch_gist_files
from agent_defs.platform.github.http_client import GitHubHTTPClient

Fetcher = Callable[[GitHubHTTPClient, str], list[GistFile]]


class GitHubGistSource:
    """Treat each gist file as ``<path_prefix><filename>``."""

    def __init__(self, client: GitHubHTTPClient, *, fetcher: Fetcher = fetch_gist_files) -> None:
        self._client = client
        self._fetch = fetcher

    def list(self, config: SourceConfig) -> Iterator[ListingItem]:
        files = self._fetch(self._client, config.location)
        return self._records(config, files)

    @staticmethod
    def _records(config: SourceConfig, files: list[GistFile]) -> Iterator[ListingItem]:
        prefix = config.path_prefix or ""
        for gist_file in files:
            relative = f"{prefix}{gist_file.filename}"
            try:
                record = build_record(relative, gist_file.content)
            except ParseError as exc:
                yield exc
                continue
            if record is not None:
                yield record


__all__ = ["GitHubGistSource"]
