"""Download and unpack repository tarballs from the GitHub API."""

from __future__ import annotations

import io
import tarfile
import zlib
from dataclasses import dataclass

from agent_defs.features.definitions.domain.errors import NetworkError
from agent_defs.platform.logging import logger

from .http_client import GitHubHTTPClient


@dataclass(slots=True, frozen=True)
class RepoFile:
    """A text file from a repository snapshot, path relative to the repo root."""

    path: str
    content: str


def fetch_repository_files(
    client: GitHubHTTPClient,
    owner: str,
    repo: str,
    branch: str,
) -> list[RepoFile]:
    """Download ``owner/repo@branch`` as a tarball and return its text files."""

    data = client.get_bytes(f"repos/{owner}/{repo}/tarball/{branch}", accept="application/vnd.github+json")
    return extract_files(data)


def extract_files(data: bytes) -> list[RepoFile]:
    """Return every UTF-8 regular file in a gzipped tarball.

    The leading ``<owner>-<repo>-<sha>/`` directory is stripped and
    binary files are skipped.

    Raises:
        NetworkError: If the archive is truncated or unreadable.
    """

    files: list[RepoFile] = []
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
            for member in archive:
                if not member.isfile():
                    continue
                _, _, relative = member.name.partition("/")
                if not relative:
                    continue
                handle = archive.extractfile(member)
                if handle is None:
                    continue
                raw = handle.read()
                try:
                    content = raw.decode("utf-8")
                except UnicodeDecodeError:
                    logger.debug("Skipping non-UTF-8 file %s", relative)
                    continue
                files.append(RepoFile(path=relative, content=content))
    except (tarfile.TarError, EOFError, OSError, zlib.error) as exc:
        raise NetworkError(f"failed to read repository tarball: {exc}") from exc
    return files


__all__ = ["RepoFile", "extract_files", "fetch_repository_files"]
