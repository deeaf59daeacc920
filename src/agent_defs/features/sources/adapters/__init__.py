"""GitHub-backed implementations of :class:`DefinitionSource`."""

from .github_gist import GitHubGistSource
from .github_repo import GitHubRepoSource

__all__ = ["GitHubGistSource", "GitHubRepoSource"]
