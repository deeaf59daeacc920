"""Shared fixtures: scripted sources, temporary caches and definition factories."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from pathlib import Path

import pytest

from agent_defs.config.settings import SyncSettings
from agent_defs.features.cache.adapters.store import CacheStore
from agent_defs.features.definitions.domain.models import Definition, DefinitionKind, RemoteRecord
from agent_defs.features.definitions.usecases.builder import build_record
from agent_defs.features.sources.domain.models import SourceConfig, SourceType
from agent_defs.features.sources.registry import SourceRegistry
from agent_defs.features.sources.usecases.ports import ListingItem

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

Response = list[ListingItem] | Exception


class ScriptedSource:
    """Definition source replaying canned listings per source name.

    Each call consumes the next scripted response; the last one repeats.
    """

    def __init__(self) -> None:
        self.responses: dict[str, list[Response]] = {}
        self.calls: dict[str, int] = {}
        self._lock = threading.Lock()

    def script(self, source_name: str, *responses: Response) -> None:
        self.responses[source_name] = list(responses)

    def list(self, config: SourceConfig) -> Iterator[ListingItem]:
        with self._lock:
            count = self.calls.get(config.name, 0)
            self.calls[config.name] = count + 1
            scripted = self.responses.get(config.name) or [[]]
            response = scripted[min(count, len(scripted) - 1)]
        if isinstance(response, Exception):
            raise response
        return iter(list(response))


def record(relative_path: str, body: str = "body", *, title: str | None = None) -> RemoteRecord:
    """Build a record the way a real source would."""

    content = f"---\nname: {title}\n---\n{body}" if title else body
    built = build_record(relative_path, content)
    assert built is not None, relative_path
    return built


@pytest.fixture
def make_record() -> Callable[..., RemoteRecord]:
    return record


@pytest.fixture
def make_definition() -> Callable[..., Definition]:
    def factory(
        relative_path: str,
        *,
        source_name: str = "src",
        title: str | None = None,
        body: str = "body",
        kind: DefinitionKind | None = None,
        description: str | None = None,
    ) -> Definition:
        built = record(relative_path, body)
        return Definition(
            source_name=source_name,
            relative_path=relative_path,
            kind=kind or built.kind,
            title=title or built.title,
            body=body,
            fingerprint=built.fingerprint,
            synced_at=FIXED_NOW,
            description=description,
            category=built.category,
        )

    return factory


@pytest.fixture
def scripted_source() -> ScriptedSource:
    return ScriptedSource()


@pytest.fixture
def registry_factory(scripted_source: ScriptedSource) -> Callable[..., SourceRegistry]:
    def factory(*names: str, disabled: tuple[str, ...] = ()) -> SourceRegistry:
        configs = [
            SourceConfig(
                name=name,
                type=SourceType.GITHUB_REPO,
                location=f"owner/{name}",
                enabled=name not in disabled,
            )
            for name in names
        ]
        return SourceRegistry(configs, adapters={SourceType.GITHUB_REPO: scripted_source})

    return factory


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def store(cache_dir: Path) -> CacheStore:
    return CacheStore(cache_dir)


@pytest.fixture
def fast_settings() -> SyncSettings:
    return SyncSettings(max_workers=4, retry_attempts=3, retry_base_delay=0.0, retry_max_delay=0.0)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW
