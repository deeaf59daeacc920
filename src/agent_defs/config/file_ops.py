"""Write the commented default configuration on first run."""

from __future__ import annotations

from pathlib import Path

from agent_defs.platform.filesystem import atomic_write_text


def write_default_config(path: Path, template: str) -> bool:
    """Materialize ``template`` at ``path`` unless a file is already there.

    Returns:
        bool: ``True`` when the file was written by this call.

    Raises:
        OSError: When the directory or file cannot be created.
    """

    if path.exists():
        return False
    atomic_write_text(path, template)
    return True


__all__ = ["write_default_config"]
