"""
Summary: Definition domain types, parsing rules and the record builder.
Why: Every other feature speaks in terms of these types.
"""

from __future__ import annotations

from .domain.errors import (
    AgentDefsError,
    AlreadyExists,
    AmbiguousDefinition,
    AuthError,
    CacheCorruption,
    ConfigError,
    FsError,
    NetworkError,
    NotFound,
    ParseError,
    SourceError,
)
from .domain.models import Definition, DefinitionKey, DefinitionKind, RemoteRecord
from .usecases.builder import build_record

__all__ = [
    "AgentDefsError",
    "AlreadyExists",
    "AmbiguousDefinition",
    "AuthError",
    "CacheCorruption",
    "ConfigError",
    "Definition",
    "DefinitionKey",
    "DefinitionKind",
    "FsError",
    "NetworkError",
    "NotFound",
    "ParseError",
    "RemoteRecord",
    "SourceError",
    "build_record",
]
