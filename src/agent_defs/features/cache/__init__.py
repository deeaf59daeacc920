"""Persistent definition cache."""

from .adapters.store import CacheStore
from .domain.models import CacheManifest, ManifestEntry

__all__ = ["CacheManifest", "CacheStore", "ManifestEntry"]
