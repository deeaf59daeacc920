"""Data structures describing installation results."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from agent_defs.features.definitions.domain.models import DefinitionKey


@dataclass(slots=True, frozen=True)
class InstallOutcome:
    """Where a definition was written and whether a file was replaced."""

    key: DefinitionKey
    destination: Path
    overwritten: bool


__all__ = ["InstallOutcome"]
