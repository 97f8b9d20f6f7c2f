"""
IEEE Xplore adapter.

Uses the IEEE Xplore Metadata API when ``IEEE_API_KEY`` is configured and a
simulated placeholder otherwise.
"""

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional

from paperlens.application.services.normalization import (
    extract_authors,
    map_category_to_domain,
    parse_page_range,
    parse_published_date,
)
from paperlens.domain.paper import Domain, PaperCandidate, Platform
from paperlens.domain.search import SearchFilter, SortBy
from paperlens.infrastructure.adapters.base import (
    SimulatedSourceMixin,
    SourceAdapter,
    capitalize_first,
    sort_candidates,
)
from paperlens.infrastructure.api_clients.base import APIClient

DOMAIN_TO_INDEX_TERMS: Dict[str, str] = {
    "artificial intelligence": "Artificial intelligence",
    "computer science": "Computer science",
    "engineering": "Engineering",
    "medicine": "Biomedical engineering",
    "physics": "Physics",
    "mathematics": "Mathematics",
    "materials science": "Materials science",
    "environmental science": "Environmental monitoring",
}

SIMULATED_DOMAINS = [
    Domain.ARTIFICIAL_INTELLIGENCE,
    Domain.COMPUTER_SCIENCE,
    Domain.ENGINEERING,
    Domain.MEDICINE,
    Domain.PHYSICS,
]
SIMULATED_AUTHORS = ["Jane Smith", "Robert Johnson", "Maria Garcia"]


class IeeeAdapter(SimulatedSourceMixin, SourceAdapter):
    PLATFORM = Platform.IEEE
    BASE_URL = "https://ieeexploreapi.ieee.org/api/v1/search"

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        client: Optional[APIClient] = None,
        rng: Optional[random.Random] = None,
        timeout: float = 30,
    ):
        super().__init__(rng=rng)
        self._api_key = api_key
        self._client = client or APIClient(self.BASE_URL, source="ieee", timeout=timeout)

    @property
    def simulated(self) -> bool:
        return not self._api_key

    async def _fetch(self, search_filter: SearchFilter) -> List[PaperCandidate]:
        if self.simulated:
            return self.simulate(search_filter)
        data = await self._client.get_json("articles", self.build_params(search_filter))
        return [self.to_candidate(a) for a in (data.get("articles") or []) if isinstance(a, dict)]

    def build_params(self, search_filter: SearchFilter) -> Dict[str, str]:
        params: Dict[str, str] = {
            "apikey": self._api_key or "",
            "format": "json",
            # 1-based record offset
            "start_record": str(search_filter.skip + 1),
            "max_records": str(search_filter.limit),
        }
        if search_filter.query:
            params["querytext"] = search_filter.query
        index_term = DOMAIN_TO_INDEX_TERMS.get((search_filter.domain or "").lower())
        if index_term:
            params["index_terms"] = index_term
        if search_filter.author:
            params["author"] = search_filter.author
        if search_filter.journal:
            params["publication_title"] = search_filter.journal

        window = search_filter.date_window()
        if window:
            params["start_date"] = window[0].strftime("%Y%m%d")
            params["end_date"] = window[1].strftime("%Y%m%d")

        if search_filter.sort_by is SortBy.DATE_DESC:
            params["sort_field"] = "publication_year"
            params["sort_order"] = "desc"
        elif search_filter.sort_by is SortBy.DATE_ASC:
            params["sort_field"] = "publication_year"
            params["sort_order"] = "asc"
        return params

    @staticmethod
    def to_candidate(article: Dict[str, Any]) -> PaperCandidate:
        authors = (article.get("authors") or {}).get("authors") or []
        index_terms = article.get("index_terms") or {}
        terms: List[str] = []
        for group in index_terms.values():
            if isinstance(group, dict):
                terms.extend(str(t) for t in group.get("terms") or [])

        pages = ""
        if article.get("start_page") and article.get("end_page"):
            pages = f"{article['start_page']}-{article['end_page']}"
        elif article.get("start_page"):
            pages = str(article["start_page"])

        number = article.get("article_number") or ""
        return PaperCandidate(
            title=article.get("title") or "Untitled",
            authors=extract_authors(authors),
            abstract=article.get("abstract") or "",
            doi=article.get("doi"),
            url=article.get("html_url") or f"https://ieeexplore.ieee.org/document/{number}",
            pdf_url=article.get("pdf_url"),
            platform=Platform.IEEE,
            domain=map_category_to_domain("ieee", terms),
            journal=article.get("publication_title"),
            published_date=parse_published_date(
                article.get("publication_date") or article.get("publication_year")
            ),
            page_count=parse_page_range(pages),
            view_count=0,
            citation_count=article.get("citing_paper_count") or 0,
        )

    def simulate(self, search_filter: SearchFilter) -> List[PaperCandidate]:
        """Synthesize papers that satisfy the filter (no API key configured)."""
        papers: List[PaperCandidate] = []
        for _ in range(self._batch_size(search_filter)):
            paper_id = self._random_id()
            published = self._days_ago(30 * 6)

            title = "IEEE Research on Advanced Technologies"
            if search_filter.query:
                title = f"IEEE Research on {capitalize_first(search_filter.query)}"
            if search_filter.domain:
                title += f" in {search_filter.domain}"

            domain = (
                Domain.parse(search_filter.domain)
                if search_filter.domain
                else self._pick(SIMULATED_DOMAINS)
            )
            authors = list(SIMULATED_AUTHORS)
            if search_filter.author:
                authors = [search_filter.author, SIMULATED_AUTHORS[0]]

            topic = f"related to {search_filter.query} " if search_filter.query else ""
            papers.append(
                PaperCandidate(
                    title=f"{title} #{paper_id}",
                    authors=authors,
                    abstract=(
                        f"This IEEE paper explores advanced technologies {topic}with applications "
                        f"in {domain.value}. The research presents novel approaches to solving "
                        "complex problems in the field."
                    ),
                    doi=f"10.1109/IEEECONF.2023.{paper_id}",
                    url=f"https://ieeexplore.ieee.org/document/{paper_id}",
                    pdf_url=f"https://ieeexplore.ieee.org/stamp/stamp.jsp?tp=&arnumber={paper_id}",
                    platform=Platform.IEEE,
                    domain=domain,
                    journal=search_filter.journal or "IEEE Transactions on Information Theory",
                    published_date=published,
                    page_count=8 + self._rng.randrange(20),
                    view_count=self._rng.randrange(5000),
                    citation_count=self._rng.randrange(200),
                )
            )
        return sort_candidates(papers, search_filter.sort_by)

    async def close(self) -> None:
        await self._client.close()
