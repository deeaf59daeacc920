"""Remote definition sources."""

from .domain.models import Layout, SourceConfig, SourceType
from .registry import SourceRegistry, github_adapters
from .usecases.ports import DefinitionSource, ListingItem

__all__ = [
    "DefinitionSource",
    "Layout",
    "ListingItem",
    "SourceConfig",
    "SourceRegistry",
    "SourceType",
    "github_adapters",
]
