"""
Paper API routes.

- Store-first search with live top-up from the platforms
- Lookup by id or DOI
- Three-tier summaries, generated on first access
"""

from __future__ import annotations

import math
from typing import Optional

from fastapi import APIRouter, Query

from paperlens import container
from paperlens.api.schemas import PaperResponse, SearchResponse, SummaryResponse
from paperlens.application.services import PaperSearchService, SummaryService
from paperlens.core.exceptions import PaperNotFoundError
from paperlens.domain.search import DEFAULT_LIMIT, SearchFilter
from paperlens.utils.logging_config import LogFiles, Logger, set_trace_id

router = APIRouter()


def _get_search_service() -> PaperSearchService:
    return container.get_search_service()


def _get_summary_service() -> SummaryService:
    return container.get_summary_service()


@router.get("/papers", response_model=SearchResponse)
async def search_papers(
    query: Optional[str] = Query(None),
    platform: Optional[str] = Query(None),
    domain: Optional[str] = Query(None),
    author: Optional[str] = Query(None),
    journal: Optional[str] = Query(None),
    date_range: Optional[str] = Query(None, alias="dateRange"),
    custom_start_date: Optional[str] = Query(None, alias="customStartDate"),
    custom_end_date: Optional[str] = Query(None, alias="customEndDate"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    page: int = Query(1),
    limit: int = Query(DEFAULT_LIMIT),
):
    set_trace_id()
    search_filter = SearchFilter(
        query=query,
        platform=platform,
        domain=domain,
        author=author,
        journal=journal,
        date_range=date_range,
        custom_start_date=custom_start_date,
        custom_end_date=custom_end_date,
        sort_by=sort_by,
        page=page,
        limit=limit,
    )
    Logger.info(
        f"search query={search_filter.query!r} filters={search_filter.to_snapshot()} "
        f"page={search_filter.page} limit={search_filter.limit}",
        file=LogFiles.SEARCH,
    )

    outcome = await _get_search_service().search(search_filter)
    Logger.info(
        f"search done source={outcome.source} total={outcome.total} error={outcome.error}",
        file=LogFiles.SEARCH,
    )
    return SearchResponse(
        papers=[PaperResponse.from_domain(p) for p in outcome.papers],
        total=outcome.total,
        page=search_filter.page,
        limit=search_filter.limit,
        pages=math.ceil(outcome.total / search_filter.limit),
        source=outcome.source,
        error=outcome.error,
    )


@router.get("/papers/doi/{doi:path}", response_model=PaperResponse)
async def get_paper_by_doi(doi: str):
    set_trace_id()
    paper = await _get_search_service().lookup_doi(doi)
    if paper is None:
        raise PaperNotFoundError(doi=doi)
    return PaperResponse.from_domain(paper)


@router.get("/papers/{paper_id}", response_model=PaperResponse)
async def get_paper(paper_id: int):
    paper = container.get_repository().get_paper(paper_id)
    if paper is None:
        raise PaperNotFoundError(paper_id)
    return PaperResponse.from_domain(paper)


@router.get("/papers/{paper_id}/summary", response_model=SummaryResponse)
async def get_summary(paper_id: int):
    set_trace_id()
    summary = await _get_summary_service().get_or_create(paper_id)
    Logger.info(f"summary paper_id={paper_id} summary_id={summary.id}", file=LogFiles.SUMMARY)
    return SummaryResponse.from_domain(summary)


@router.post("/papers/{paper_id}/regenerate-summary", response_model=SummaryResponse)
async def regenerate_summary(paper_id: int):
    set_trace_id()
    summary = await _get_summary_service().regenerate(paper_id)
    Logger.info(f"summary regenerated paper_id={paper_id}", file=LogFiles.SUMMARY)
    return SummaryResponse.from_domain(summary)
