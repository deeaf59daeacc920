"""Logging facade exports.

Where: platform/logging/__init__.py
What: Re-export the shared logger, setup helpers, and the custom Rich handler.
Why: Provide a single canonical import path for every layer.
"""

from __future__ import annotations

from .config import detach_console, logger, setup_logger
from .handlers import StatusRichHandler

__all__ = [
    "StatusRichHandler",
    "detach_console",
    "logger",
    "setup_logger",
]
