"""GitHub REST transport used by repository and gist sources."""

from __future__ import annotations

from .gist import GistFile, fetch_gist_files
from .http_client import DEFAULT_API_BASE, GitHubHTTPClient, HTTPResult, HTTPSession
from .rate_limit import GitHubRateLimiter
from .tarball import RepoFile, extract_files, fetch_repository_files
from .user_agent import format_user_agent, resolve_user_agent

__all__ = [
    "DEFAULT_API_BASE",
    "GistFile",
    "GitHubHTTPClient",
    "GitHubRateLimiter",
    "HTTPResult",
    "HTTPSession",
    "RepoFile",
    "extract_files",
    "fetch_gist_files",
    "fetch_repository_files",
    "format_user_agent",
    "resolve_user_agent",
]
