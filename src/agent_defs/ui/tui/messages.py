"""Commands the controller asks the app to perform and messages the app feeds back."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from agent_defs.features.definitions.domain.models import Definition
from agent_defs.features.index.usecases.index import Index
from agent_defs.features.install.domain.models import InstallOutcome
from agent_defs.features.sync.domain.models import SyncProgress, SyncReport


@dataclass(slots=True, frozen=True)
class Quit:
    pass


@dataclass(slots=True, frozen=True)
class StartSync:
    pass


@dataclass(slots=True, frozen=True)
class CancelSync:
    pass


@dataclass(slots=True, frozen=True)
class InstallRequest:
    definition: Definition
    target_dir: Path
    overwrite: bool


@dataclass(slots=True, frozen=True)
class CopyRequest:
    text: str


Command = Quit | StartSync | CancelSync | InstallRequest | CopyRequest


@dataclass(slots=True, frozen=True)
class SyncProgressMessage:
    progress: SyncProgress


@dataclass(slots=True, frozen=True)
class SyncFinished:
    report: SyncReport
    index: Index


@dataclass(slots=True, frozen=True)
class SyncFailed:
    error: str


@dataclass(slots=True, frozen=True)
class InstallFinished:
    outcome: InstallOutcome
    title: str


@dataclass(slots=True, frozen=True)
class InstallFailed:
    title: str
    error: str


Message = SyncProgressMessage | SyncFinished | SyncFailed | InstallFinished | InstallFailed


__all__ = [
    "CancelSync",
    "Command",
    "CopyRequest",
    "InstallFailed",
    "InstallFinished",
    "InstallRequest",
    "Message",
    "Quit",
    "StartSync",
    "SyncFailed",
    "SyncFinished",
    "SyncProgressMessage",
]
