"""
Command line entry point.

    paperlens serve --port 8000
    paperlens search "graph neural networks" --platform arxiv --sort-by date_desc
    paperlens doi 10.1038/nature14539
    paperlens summary 12
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, Optional

from dotenv import find_dotenv, load_dotenv

from paperlens import __version__, container
from paperlens.api.schemas import PaperResponse, SummaryResponse
from paperlens.core.exceptions import PaperLensError
from paperlens.domain.search import DEFAULT_LIMIT, DateRange, SearchFilter, SortBy
from paperlens.utils.logging_config import configure_logging

# Load local .env so API keys and store settings apply to CLI runs.
load_dotenv(find_dotenv(usecwd=True), override=False)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paperlens",
        description="PaperLens - multi-source research paper discovery",
    )
    parser.add_argument("--version", "-v", action="store_true", help="print version and exit")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")

    subparsers = parser.add_subparsers(dest="command", help="available commands")

    serve_parser = subparsers.add_parser("serve", help="run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")

    search_parser = subparsers.add_parser("search", help="search papers across platforms")
    search_parser.add_argument("query", nargs="?", default=None)
    search_parser.add_argument("--platform")
    search_parser.add_argument("--domain")
    search_parser.add_argument("--author")
    search_parser.add_argument("--journal")
    search_parser.add_argument("--date-range", choices=[d.value for d in DateRange])
    search_parser.add_argument("--start", dest="custom_start_date", help="custom range start (YYYY-MM-DD)")
    search_parser.add_argument("--end", dest="custom_end_date", help="custom range end (YYYY-MM-DD)")
    search_parser.add_argument(
        "--sort-by", choices=[s.value for s in SortBy], default=SortBy.RELEVANCE.value
    )
    search_parser.add_argument("--page", type=int, default=1)
    search_parser.add_argument("--limit", type=int, default=DEFAULT_LIMIT)
    search_parser.add_argument("--json", action="store_true", help="print JSON instead of a listing")

    doi_parser = subparsers.add_parser("doi", help="look up a paper by DOI")
    doi_parser.add_argument("doi")

    summary_parser = subparsers.add_parser("summary", help="print the summary of a stored paper")
    summary_parser.add_argument("paper_id", type=int)
    summary_parser.add_argument("--regenerate", action="store_true")
    summary_parser.add_argument(
        "--tier", choices=["short", "medium", "detailed"], default=None, help="print one tier only"
    )

    return parser


def _dump(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


async def _search(parsed: argparse.Namespace) -> int:
    search_filter = SearchFilter(
        query=parsed.query,
        platform=parsed.platform,
        domain=parsed.domain,
        author=parsed.author,
        journal=parsed.journal,
        date_range=parsed.date_range,
        custom_start_date=parsed.custom_start_date,
        custom_end_date=parsed.custom_end_date,
        sort_by=parsed.sort_by,
        page=parsed.page,
        limit=parsed.limit,
    )
    try:
        outcome = await container.get_search_service().search(search_filter)
    finally:
        await container.shutdown()

    if parsed.json:
        _dump(
            {
                "papers": [PaperResponse.from_domain(p).model_dump(by_alias=True) for p in outcome.papers],
                "total": outcome.total,
                "source": outcome.source,
                "error": outcome.error,
            }
        )
        return 0

    print(f"{outcome.total} papers (source: {outcome.source})")
    if outcome.error:
        print(f"warning: {outcome.error}", file=sys.stderr)
    for paper in outcome.papers:
        print(
            f"[{paper.id}] {paper.title} | {paper.platform.value} | "
            f"{paper.published_date.date().isoformat()} | citations={paper.citation_count}"
        )
        if paper.doi:
            print(f"      doi:{paper.doi}")
    return 0


async def _doi(parsed: argparse.Namespace) -> int:
    try:
        paper = await container.get_search_service().lookup_doi(parsed.doi)
    finally:
        await container.shutdown()
    if paper is None:
        print(f"Paper not found: doi={parsed.doi}", file=sys.stderr)
        return 1
    _dump(PaperResponse.from_domain(paper).model_dump(by_alias=True))
    return 0


async def _summary(parsed: argparse.Namespace) -> int:
    service = container.get_summary_service()
    try:
        if parsed.regenerate:
            summary = await service.regenerate(parsed.paper_id)
        else:
            summary = await service.get_or_create(parsed.paper_id)
    finally:
        await container.shutdown()

    if parsed.tier:
        print(getattr(summary, f"{parsed.tier}_summary") or "")
        return 0
    _dump(SummaryResponse.from_domain(summary).model_dump(by_alias=True))
    return 0


def _serve(parsed: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("paperlens.api.main:app", host=parsed.host, port=parsed.port, reload=parsed.reload)
    return 0


def run_cli(args: Optional[list] = None) -> int:
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.version:
        print(f"PaperLens v{__version__}")
        return 0

    if not parsed.command:
        parser.print_help()
        return 0

    configure_logging(parsed.log_level)
    try:
        if parsed.command == "serve":
            return _serve(parsed)
        if parsed.command == "search":
            return asyncio.run(_search(parsed))
        if parsed.command == "doi":
            return asyncio.run(_doi(parsed))
        if parsed.command == "summary":
            return asyncio.run(_summary(parsed))
        return 0
    except PaperLensError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
