"""Fixtures wiring CLI commands to a catalog service over scripted sources."""

from collections.abc import Callable

import pytest

from agent_defs.application.services.catalog_service import CatalogService
from agent_defs.config.config import AppConfig
from agent_defs.config.settings import SyncSettings
from agent_defs.features.cache.adapters.store import CacheStore
from agent_defs.features.sources.registry import SourceRegistry
from agent_defs.features.sync.usecases.sync_engine import SyncEngine


@pytest.fixture
def service_for(
    store: CacheStore,
    fast_settings: SyncSettings,
    registry_factory: Callable[..., SourceRegistry],
) -> Callable[..., CatalogService]:
    """Build a service whose sources are scripted in the test."""

    def factory(*names: str) -> CatalogService:
        return CatalogService(
            config=AppConfig(),
            registry=registry_factory(*names),
            store=store,
            engine=SyncEngine(store, fast_settings),
        )

    return factory
