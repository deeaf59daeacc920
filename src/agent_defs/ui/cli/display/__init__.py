"""Rich renderers for CLI output."""

from agent_defs.ui.cli.display.catalog import CatalogDisplay
from agent_defs.ui.cli.display.definition import DefinitionDisplay
from agent_defs.ui.cli.display.progress import SyncProgressDisplay
from agent_defs.ui.cli.display.sync_report import SyncReportDisplay

__all__ = [
    "CatalogDisplay",
    "DefinitionDisplay",
    "SyncProgressDisplay",
    "SyncReportDisplay",
]
