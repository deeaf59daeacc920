"""Where: src/agent_defs/features/install/usecases/install_manager.py
What: Copy a cached definition into a project's ``.claude`` directory.
Why: Installs must never leave a half-written file at the destination.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Final, final

from agent_defs.features.definitions.domain.errors import AlreadyExists, FsError
from agent_defs.features.definitions.domain.models import Definition, DefinitionKind
from agent_defs.features.definitions.domain.paths import (
    SKILL_ENTRY_NAME,
    parse_relative_path,
)
from agent_defs.features.install.domain.models import InstallOutcome
from agent_defs.platform.filesystem import atomic_write_text, remove_temp_artifacts
from agent_defs.platform.logging import logger as default_logger

CLAUDE_DIR: Final[str] = ".claude"
DEFAULT_SKILL_CATEGORY: Final[str] = "general"

_UNSAFE_CHARS: Final[re.Pattern[str]] = re.compile(r"[^\w.\-]", re.UNICODE)

_INSTALL_DIRS: Final[dict[DefinitionKind, str]] = {
    DefinitionKind.AGENT: "agents",
    DefinitionKind.COMMAND: "commands",
    DefinitionKind.HOOK: "hooks",
    DefinitionKind.MCP: "mcp",
    DefinitionKind.SETTING: "settings",
    DefinitionKind.SKILL: "skills",
}


def sanitize_segment(value: str) -> str:
    """Keep letters, digits, ``-``, ``_`` and ``.``; replace anything else with ``-``."""

    cleaned = _UNSAFE_CHARS.sub("-", value.strip())
    if not cleaned or set(cleaned) == {"."}:
        return "-"
    return cleaned


@final
class InstallManager:
    """Write definitions to ``<target>/.claude/<kind>/<category>/<name>``."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or default_logger

    @staticmethod
    def destination_for(definition: Definition, target_dir: Path) -> Path:
        """Compute the install path for ``definition`` under ``target_dir``.

        Skills land at ``skills/<category>/<name>/SKILL.md`` with
        ``general`` as the default category; other kinds at
        ``<kind>/[<category>/]<name>.<ext>``. Directories nested below the
        category are kept, so distinct source paths never share a destination.
        """

        info = parse_relative_path(definition.relative_path)
        base = target_dir / CLAUDE_DIR / _INSTALL_DIRS[definition.kind]
        name = sanitize_segment(info.name)
        parts = definition.relative_path.split("/")

        if definition.kind is DefinitionKind.SKILL:
            # skills/<category>/<nested...>/<name>/SKILL.md
            directories = [sanitize_segment(part) for part in parts[1:-2]] or [DEFAULT_SKILL_CATEGORY]
            return base.joinpath(*directories) / name / SKILL_ENTRY_NAME

        category = sanitize_segment(definition.category) if definition.category else None
        nested = [sanitize_segment(part) for part in parts[2:-1]] if category else []
        extension = ".json" if definition.relative_path.endswith(".json") else ".md"
        file_name = f"{name}{extension}"
        if category is None:
            return base / file_name
        return base.joinpath(category, *nested) / file_name

    def install(self, definition: Definition, target_dir: Path, *, overwrite: bool = False) -> InstallOutcome:
        """Atomically write ``definition.body`` to its destination.

        Raises:
            AlreadyExists: The destination exists and ``overwrite`` is False.
            FsError: Any filesystem failure; the destination is left untouched.
        """

        destination = self.destination_for(definition, target_dir)
        existed = destination.exists()
        if existed and destination.is_dir():
            raise FsError(destination, "destination is a directory")
        if existed and not overwrite:
            raise AlreadyExists(destination)

        try:
            removed = remove_temp_artifacts(destination.parent)
            if removed:
                self._logger.debug("Removed %d stale temp file(s) in %s", removed, destination.parent)
            atomic_write_text(destination, definition.body)
        except OSError as exc:
            raise FsError(destination, f"install failed: {exc.strerror or exc}") from exc

        self._logger.info("Installed %s to %s", definition.relative_path, destination)
        return InstallOutcome(key=definition.key, destination=destination, overwritten=existed)


__all__ = ["CLAUDE_DIR", "InstallManager", "sanitize_segment"]
