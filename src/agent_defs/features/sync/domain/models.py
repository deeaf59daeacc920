"""Data structures describing the outcome of a reconciliation pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SyncPhase(str, Enum):
    STARTED = "started"
    RETRYING = "retrying"
    FINISHED = "finished"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class SyncProgress:
    """Progress notification emitted while a pass runs."""

    source_name: str
    phase: SyncPhase
    detail: str = ""


@dataclass(slots=True)
class SourceOutcome:
    """Per-source counts and failure information."""

    source_name: str
    added_count: int = 0
    updated_count: int = 0
    unchanged_count: int = 0
    removed_count: int = 0
    skipped_count: int = 0
    error: str | None = None
    error_reason: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def changed(self) -> int:
        return self.added_count + self.updated_count + self.removed_count

    def clear_counts(self) -> None:
        """Zero the change counts; a failed source reports no changes."""

        self.added_count = 0
        self.updated_count = 0
        self.unchanged_count = 0
        self.removed_count = 0

    def describe(self) -> str:
        if self.error is not None:
            reason = f" [{self.error_reason}]" if self.error_reason else ""
            return f"{self.source_name}: failed{reason}: {self.error}"
        return (
            f"{self.source_name}: {self.added_count} added, {self.updated_count} updated, "
            f"{self.removed_count} removed, {self.unchanged_count} unchanged"
        )


@dataclass(slots=True)
class SyncReport:
    """Aggregated result of one pass over the enabled sources."""

    outcomes: list[SourceOutcome] = field(default_factory=list)

    @property
    def failed(self) -> list[SourceOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def succeeded(self) -> list[SourceOutcome]:
        return [outcome for outcome in self.outcomes if outcome.ok]

    @property
    def all_failed(self) -> bool:
        """True when at least one source ran and none succeeded."""

        return bool(self.outcomes) and not self.succeeded

    @property
    def added(self) -> int:
        return sum(outcome.added_count for outcome in self.outcomes)

    @property
    def updated(self) -> int:
        return sum(outcome.updated_count for outcome in self.outcomes)

    @property
    def unchanged(self) -> int:
        return sum(outcome.unchanged_count for outcome in self.outcomes)

    @property
    def removed(self) -> int:
        return sum(outcome.removed_count for outcome in self.outcomes)

    @property
    def warnings(self) -> list[str]:
        return [warning for outcome in self.outcomes for warning in outcome.warnings]

    def outcome_for(self, source_name: str) -> SourceOutcome | None:
        return next((o for o in self.outcomes if o.source_name == source_name), None)

    def summary(self) -> str:
        """One-line description used by the CLI and the browser status bar."""

        if not self.outcomes:
            return "No enabled sources to sync"
        ok = len(self.succeeded)
        text = (
            f"Synced {ok}/{len(self.outcomes)} sources: {self.added} added, "
            f"{self.updated} updated, {self.removed} removed, {self.unchanged} unchanged"
        )
        failures = self.failed
        if failures:
            details = ", ".join(
                f"{outcome.source_name} ({outcome.error_reason or 'error'})" for outcome in failures
            )
            text += f"; failed: {details}"
        return text


__all__ = ["SourceOutcome", "SyncPhase", "SyncProgress", "SyncReport"]
