"""Ports for the sources feature."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from agent_defs.features.definitions.domain.errors import ParseError
from agent_defs.features.definitions.domain.models import RemoteRecord
from agent_defs.features.sources.domain.models import SourceConfig

ListingItem = RemoteRecord | ParseError


class DefinitionSource(Protocol):
    """List the definitions a source currently publishes."""

    def list(self, config: SourceConfig) -> Iterator[ListingItem]:
        """Yield one item per remote document.

        Per-document problems are yielded as :class:`ParseError` values so
        the caller can record them and carry on.

        Raises:
            NetworkError: Transient transport failure.
            AuthError: Credentials, permissions or quota problem.
        """

        ...


__all__ = ["DefinitionSource", "ListingItem"]
