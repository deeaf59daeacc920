"""Installation of cached definitions into a project."""

from .domain.models import InstallOutcome
from .usecases.install_manager import InstallManager

__all__ = ["InstallManager", "InstallOutcome"]
