import json

import pytest

from paperlens import __version__, container
from paperlens.application.services import PaperSearchService, SummaryService
from paperlens.infrastructure.stores.memory_store import InMemoryPaperStore
from paperlens.presentation.cli import main as cli_main


@pytest.fixture
def store(monkeypatch):
    store = InMemoryPaperStore()
    container.set_repository(store)
    monkeypatch.setattr(container, "get_search_service", lambda: PaperSearchService({}, store))
    monkeypatch.setattr(container, "get_summary_service", lambda: SummaryService(store))
    yield store
    container.set_repository(None)


def test_cli_version(capsys):
    assert cli_main.run_cli(["--version"]) == 0
    assert __version__ in capsys.readouterr().out


def test_cli_search_parser_flags():
    args = cli_main.create_parser().parse_args(
        [
            "search",
            "graph learning",
            "--platform",
            "arxiv",
            "--date-range",
            "custom",
            "--start",
            "2024-01-01",
            "--sort-by",
            "citations",
            "--limit",
            "5",
            "--json",
        ]
    )

    assert args.command == "search"
    assert args.query == "graph learning"
    assert args.platform == "arxiv"
    assert args.custom_start_date == "2024-01-01"
    assert args.sort_by == "citations"
    assert args.limit == 5
    assert args.json is True


def test_cli_search_json_output(store, candidate_factory, capsys):
    store.create_paper(candidate_factory("Graph Learning", doi="10.1000/graph"))
    store.create_paper(candidate_factory("Unrelated"))

    exit_code = cli_main.run_cli(["search", "graph", "--json"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["total"] == 1
    assert payload["source"] == "database"
    assert payload["papers"][0]["doi"] == "10.1000/graph"
    assert "citationCount" in payload["papers"][0]


def test_cli_search_invalid_filter(store, capsys):
    exit_code = cli_main.run_cli(["search", "x", "--platform", "myspace"])
    assert exit_code == 1
    assert "Unknown platform" in capsys.readouterr().err


def test_cli_doi_lookup(store, candidate_factory, capsys):
    store.create_paper(candidate_factory("By DOI", doi="10.1000/bydoi"))

    assert cli_main.run_cli(["doi", "10.1000/BYDOI"]) == 0
    assert json.loads(capsys.readouterr().out)["title"] == "By DOI"

    assert cli_main.run_cli(["doi", "10.1000/missing"]) == 1


def test_cli_summary_single_tier(store, candidate_factory, capsys):
    paper = store.create_paper(candidate_factory("Summarize Me", abstract="One sentence only."))

    exit_code = cli_main.run_cli(["summary", str(paper.id), "--tier", "medium"])

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "One sentence only."


def test_cli_summary_missing_paper(store, capsys):
    assert cli_main.run_cli(["summary", "404"]) == 1
    assert "Paper not found: 404" in capsys.readouterr().err
