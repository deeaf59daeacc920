"""Command line argument options."""

from dataclasses import dataclass
from pathlib import Path
from typing import final

from agent_defs.features.definitions.domain.models import DefinitionKind


@final
@dataclass(slots=True)
class SyncArgs:
    """Arguments for ``sync``."""

    verbose: bool
    quiet: bool
    sources: list[str]


@final
@dataclass(slots=True)
class ListArgs:
    """Arguments for ``list``."""

    verbose: bool
    quiet: bool
    kind: DefinitionKind | None
    source: str | None


@final
@dataclass(slots=True)
class SearchArgs:
    """Arguments for ``search``."""

    verbose: bool
    quiet: bool
    query: str
    kind: DefinitionKind | None
    source: str | None


@final
@dataclass(slots=True)
class ShowArgs:
    """Arguments for ``show``."""

    verbose: bool
    quiet: bool
    path: str
    source: str | None
    raw: bool


@final
@dataclass(slots=True)
class InstallArgs:
    """Arguments for ``install``."""

    verbose: bool
    quiet: bool
    path: str
    target: Path
    source: str | None
    force: bool


@final
@dataclass(slots=True)
class TuiArgs:
    """Arguments for ``tui``."""

    verbose: bool
    quiet: bool
    target: Path


CLIArgs = SyncArgs | ListArgs | SearchArgs | ShowArgs | InstallArgs | TuiArgs
