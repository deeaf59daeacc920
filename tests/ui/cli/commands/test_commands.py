"""Tests for the CLI commands running against a scripted catalog."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from agent_defs.application.services.catalog_service import CatalogService
from agent_defs.features.definitions.domain.errors import AuthError, NetworkError, NotFound
from agent_defs.features.definitions.domain.models import DefinitionKind, RemoteRecord
from agent_defs.ui.cli.args.options import InstallArgs, ListArgs, SearchArgs, ShowArgs, SyncArgs
from agent_defs.ui.cli.commands import (
    InstallCommand,
    ListCommand,
    SearchCommand,
    ShowCommand,
    SyncCommand,
)

ServiceFor = Callable[..., CatalogService]
MakeRecord = Callable[..., RemoteRecord]


@pytest.fixture
def catalog(scripted_source: Any, make_record: MakeRecord, service_for: ServiceFor) -> CatalogService:
    scripted_source.script(
        "src",
        [
            make_record("agents/review-pr.md", "Runs a code review on a pull request"),
            make_record("agents/reviewer.md", "Checks diffs", title="Code Reviewer"),
            make_record("commands/deploy.md", "Ship it"),
        ],
    )
    return service_for("src")


def test_sync_reports_success(catalog: CatalogService) -> None:
    code = SyncCommand(SyncArgs(verbose=False, quiet=True, sources=[]), catalog).execute()

    assert code == 0
    assert len(catalog.load_index()) == 3


def test_sync_fails_when_every_source_fails(scripted_source: Any, service_for: ServiceFor) -> None:
    scripted_source.script("a", AuthError("unauthorized", "bad credentials"))
    scripted_source.script("b", NetworkError("offline"))
    service = service_for("a", "b")

    code = SyncCommand(SyncArgs(verbose=False, quiet=True, sources=[]), service).execute()

    assert code == 1


def test_sync_succeeds_when_some_sources_work(
    scripted_source: Any, make_record: MakeRecord, service_for: ServiceFor
) -> None:
    scripted_source.script("a", AuthError("unauthorized", "bad credentials"))
    scripted_source.script("b", [make_record("agents/x.md")])
    service = service_for("a", "b")

    code = SyncCommand(SyncArgs(verbose=False, quiet=True, sources=[]), service).execute()

    assert code == 0


def test_sync_rejects_unknown_source(catalog: CatalogService) -> None:
    with pytest.raises(NotFound):
        _ = SyncCommand(SyncArgs(verbose=False, quiet=True, sources=["nope"]), catalog).execute()


def test_list_auto_syncs_and_prints(catalog: CatalogService, capsys: pytest.CaptureFixture[str]) -> None:
    code = ListCommand(ListArgs(verbose=False, quiet=True, kind=DefinitionKind.COMMAND, source=None), catalog).execute()

    out = capsys.readouterr().out
    assert code == 0
    assert "commands/deploy.md" in out
    assert "agents/reviewer.md" not in out


def test_list_fails_when_nothing_could_be_fetched(scripted_source: Any, service_for: ServiceFor) -> None:
    scripted_source.script("a", NetworkError("offline"))
    service = service_for("a")

    code = ListCommand(ListArgs(verbose=False, quiet=True, kind=None, source=None), service).execute()

    assert code == 1


def test_list_rejects_unknown_source(catalog: CatalogService) -> None:
    with pytest.raises(NotFound):
        _ = ListCommand(ListArgs(verbose=False, quiet=True, kind=None, source="nope"), catalog).execute()


def test_search_ranks_titles_first(catalog: CatalogService, capsys: pytest.CaptureFixture[str]) -> None:
    code = SearchCommand(
        SearchArgs(verbose=False, quiet=True, query="code review", kind=None, source=None), catalog
    ).execute()

    out = capsys.readouterr().out
    assert code == 0
    assert out.index("Code Reviewer") < out.index("review-pr")


def test_show_raw_prints_document(catalog: CatalogService, capsys: pytest.CaptureFixture[str]) -> None:
    code = ShowCommand(
        ShowArgs(verbose=False, quiet=False, path="commands/deploy.md", source=None, raw=True), catalog
    ).execute()

    assert code == 0
    assert capsys.readouterr().out == "Ship it\n"


def test_show_missing_definition(catalog: CatalogService) -> None:
    code = ShowCommand(ShowArgs(verbose=False, quiet=True, path="agents/nope.md", source=None, raw=False), catalog).execute()

    assert code == 1


def test_install_then_conflict_then_force(catalog: CatalogService, tmp_path: Path) -> None:
    target = tmp_path / "project"

    def install(force: bool) -> int:
        args = InstallArgs(verbose=False, quiet=True, path="agents/reviewer.md", target=target, source=None, force=force)
        return InstallCommand(args, catalog).execute()

    assert install(False) == 0
    destination = target / ".claude" / "agents" / "reviewer.md"
    assert destination.read_text(encoding="utf-8").endswith("Checks diffs")

    _ = destination.write_text("local edits", encoding="utf-8")
    assert install(False) == 1
    assert destination.read_text(encoding="utf-8") == "local edits"

    assert install(True) == 0
    assert destination.read_text(encoding="utf-8").endswith("Checks diffs")
