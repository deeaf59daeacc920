"""Reconciliation of remote listings with the cache."""

from .domain.models import SourceOutcome, SyncPhase, SyncProgress, SyncReport
from .usecases.sync_engine import SyncEngine

__all__ = ["SourceOutcome", "SyncEngine", "SyncPhase", "SyncProgress", "SyncReport"]
