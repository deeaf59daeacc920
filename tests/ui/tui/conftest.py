"""Fixtures for browser controller tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from agent_defs.features.definitions.domain.models import Definition
from agent_defs.features.index.usecases.index import Index
from agent_defs.ui.tui.controller import BrowserController

MakeDefinition = Callable[..., Definition]


@pytest.fixture
def agents(make_definition: MakeDefinition) -> list[Definition]:
    return [
        make_definition(f"agents/a{number:02d}.md", title=f"Agent {number:02d}", body="line\n" * 12)
        for number in range(30)
    ]


@pytest.fixture
def controller_factory(tmp_path: Path) -> Callable[..., BrowserController]:
    def factory(definitions: list[Definition], **kwargs: object) -> BrowserController:
        return BrowserController(
            Index(definitions),
            target_dir=tmp_path / "project",
            destination_for=lambda definition, target: target / ".claude" / f"{definition.title}.md",
            **kwargs,  # type: ignore[arg-type]
        )

    return factory
