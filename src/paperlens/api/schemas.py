"""Wire models shared by the routers. Field names are camelCase on the wire."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from paperlens.domain.library import RecentSearch, SavedPaper, Summary
from paperlens.domain.paper import Paper


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaperResponse(CamelModel):
    id: int
    title: str
    authors: List[str] = Field(default_factory=list)
    abstract: str = ""
    doi: Optional[str] = None
    url: str
    pdf_url: Optional[str] = None
    platform: str
    domain: str
    journal: Optional[str] = None
    published_date: datetime
    page_count: Optional[int] = None
    view_count: int = 0
    citation_count: int = 0
    created_at: datetime

    @classmethod
    def from_domain(cls, paper: Paper) -> "PaperResponse":
        return cls(
            id=paper.id,
            title=paper.title,
            authors=list(paper.authors),
            abstract=paper.abstract,
            doi=paper.doi,
            url=paper.url,
            pdf_url=paper.pdf_url,
            platform=paper.platform.value,
            domain=paper.domain.value,
            journal=paper.journal,
            published_date=paper.published_date,
            page_count=paper.page_count,
            view_count=paper.view_count,
            citation_count=paper.citation_count,
            created_at=paper.created_at,
        )


class SearchResponse(CamelModel):
    papers: List[PaperResponse]
    total: int
    page: int
    limit: int
    pages: int
    source: str
    error: Optional[str] = None


class SummaryResponse(CamelModel):
    id: int
    paper_id: int
    short_summary: Optional[str] = None
    medium_summary: Optional[str] = None
    detailed_summary: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, summary: Summary) -> "SummaryResponse":
        return cls(
            id=summary.id,
            paper_id=summary.paper_id,
            short_summary=summary.short_summary,
            medium_summary=summary.medium_summary,
            detailed_summary=summary.detailed_summary,
            created_at=summary.created_at,
            updated_at=summary.updated_at,
        )


class SavedPaperResponse(CamelModel):
    id: int
    user_id: int
    paper_id: int
    created_at: datetime

    @classmethod
    def from_domain(cls, saved: SavedPaper) -> "SavedPaperResponse":
        return cls(
            id=saved.id, user_id=saved.user_id, paper_id=saved.paper_id, created_at=saved.created_at
        )


class RecentSearchResponse(CamelModel):
    id: int
    user_id: int
    query: str
    filters: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @classmethod
    def from_domain(cls, search: RecentSearch) -> "RecentSearchResponse":
        return cls(
            id=search.id,
            user_id=search.user_id,
            query=search.query,
            filters=dict(search.filters),
            created_at=search.created_at,
        )


class SavePaperRequest(CamelModel):
    paper_id: int


class IsSavedResponse(CamelModel):
    is_saved: bool


class RecentSearchRequest(CamelModel):
    query: str = ""
    filters: Dict[str, Any] = Field(default_factory=dict)
