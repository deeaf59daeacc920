"""src/agent_defs/ui/cli/commands/executor.py
What: Shared wiring for CLI commands that read the cached catalog.
Why: Every read command needs the same auto-sync and index loading steps.
"""

from abc import ABC, abstractmethod

from agent_defs.application.services.catalog_service import CatalogService
from agent_defs.features.index.usecases.index import Index
from agent_defs.features.sync.domain.models import SyncReport
from agent_defs.platform.logging import logger
from agent_defs.ui.cli.display.progress import SyncProgressDisplay
from agent_defs.ui.cli.display.sync_report import SyncReportDisplay


class CommandExecutor(ABC):
    """Base class for command execution."""

    service: CatalogService
    progress_display: SyncProgressDisplay
    report_display: SyncReportDisplay
    quiet: bool

    def __init__(self, service: CatalogService | None = None, *, quiet: bool = False) -> None:
        self.service = service or CatalogService()
        self.progress_display = SyncProgressDisplay()
        self.report_display = SyncReportDisplay()
        self.quiet = quiet

    @abstractmethod
    def execute(self) -> int:
        """Execute the command.

        Returns:
            int: Process exit code.
        """
        pass

    def prepare_index(self) -> tuple[Index, SyncReport | None]:
        """Load the index, fetching never-synced sources first.

        Returns:
            tuple[Index, SyncReport | None]: The index and the auto-sync report
            when one ran.
        """
        _ = self.service.load_index()
        report = self.progress_display.run(
            lambda callback: self.service.ensure_synced(progress=callback) or SyncReport(),
            quiet=self.quiet,
        )
        if not report.outcomes:
            return Index.from_store(self.service.store), None

        for outcome in report.failed:
            logger.error("Could not fetch %s: %s", outcome.source_name, outcome.error)
        return Index.from_store(self.service.store), report

    @staticmethod
    def exit_code_for(index: Index, report: SyncReport | None) -> int:
        """Non-zero when an auto-sync failed everywhere and nothing is cached."""

        if report is not None and report.all_failed and len(index) == 0:
            return 1
        return 0
