"""Filesystem helpers reused across multiple layers."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Final

TEMP_MARKER: Final[str] = ".tmp-"


def ensure_directory(directory: Path) -> Path:
    """Ensure ``directory`` exists as a folder and return it."""

    if directory.exists():
        if not directory.is_dir():
            raise NotADirectoryError(f"Path exists but is not a directory: {directory}")
        return directory

    directory.mkdir(parents=True, exist_ok=True)
    return directory


def ensure_parent_directory(path: Path) -> Path:
    """Ensure the parent directory for ``path`` exists and return it."""

    parent = path.parent
    return ensure_directory(parent)


def temp_path_for(path: Path) -> Path:
    """Return a unique sibling temp path for ``path``."""

    return path.with_name(f"{TEMP_MARKER}{path.name}.{os.getpid()}.{uuid.uuid4().hex[:8]}")


def is_temp_artifact(path: Path) -> bool:
    """Return True when ``path`` was produced by :func:`temp_path_for`."""

    return path.name.startswith(TEMP_MARKER)


def fsync_directory(directory: Path) -> None:
    """Flush directory metadata so a completed rename survives a crash."""

    try:
        dir_fd = os.open(directory, os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)
    except (OSError, AttributeError):
        pass  # Best effort on platforms without O_DIRECTORY


def atomic_write_text(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` via temp file, fsync and rename.

    Readers observe either the previous file or the complete new one.
    The temp file is removed when any step fails.

    Args:
        path: Final destination.
        content: UTF-8 text to persist.

    Raises:
        OSError: Propagated from the underlying filesystem calls.
    """

    _ = ensure_parent_directory(path)
    temp_path = temp_path_for(path)
    try:
        with open(temp_path, "w", encoding="utf-8", newline="") as handle:
            _ = handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise
    fsync_directory(path.parent)


def remove_temp_artifacts(directory: Path) -> int:
    """Delete leftovers from interrupted atomic writes inside ``directory``.

    Returns:
        int: Number of removed files.
    """

    if not directory.is_dir():
        return 0

    removed = 0
    for candidate in directory.iterdir():
        if candidate.is_file() and is_temp_artifact(candidate):
            candidate.unlink(missing_ok=True)
            removed += 1
    return removed


def remove_empty_directories(directory: Path) -> None:
    """Recursively remove empty directories below the given root."""

    if not directory.exists():
        return

    for root, _, _ in os.walk(str(directory), topdown=False):
        root_path = Path(root)
        if root_path == directory:
            continue
        try:
            if root_path.exists() and not any(root_path.iterdir()):
                root_path.rmdir()
        except OSError:
            continue


__all__ = [
    "TEMP_MARKER",
    "atomic_write_text",
    "ensure_directory",
    "ensure_parent_directory",
    "fsync_directory",
    "is_temp_artifact",
    "remove_empty_directories",
    "remove_temp_artifacts",
    "temp_path_for",
]
