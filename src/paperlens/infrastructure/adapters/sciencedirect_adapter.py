"""
ScienceDirect adapter.

Uses the Elsevier ScienceDirect Search API when ``ELSEVIER_API_KEY`` is
configured and a simulated placeholder otherwise.
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
from paperlens.utils.timeutil import utcnow

DOMAIN_TO_SUBJECT_AREA: Dict[str, str] = {
    "artificial intelligence": "Artificial Intelligence",
    "computer science": "Computer Science",
    "medicine": "Medicine and Dentistry",
    "physics": "Physics and Astronomy",
    "astronomy": "Physics and Astronomy",
    "chemistry": "Chemistry",
    "biology": "Biochemistry, Genetics and Molecular Biology",
    "environmental science": "Environmental Science",
    "materials science": "Materials Science",
    "engineering": "Engineering",
    "mathematics": "Mathematics",
    "psychology": "Psychology",
    "social sciences": "Social Sciences",
    "economics": "Economics, Econometrics and Finance",
}

SIMULATED_DOMAINS = [
    Domain.ARTIFICIAL_INTELLIGENCE,
    Domain.MEDICINE,
    Domain.PHYSICS,
    Domain.CHEMISTRY,
    Domain.BIOLOGY,
    Domain.ENVIRONMENTAL_SCIENCE,
    Domain.MATERIALS_SCIENCE,
    Domain.ENGINEERING,
    Domain.MATHEMATICS,
    Domain.PSYCHOLOGY,
    Domain.SOCIAL_SCIENCES,
    Domain.COMPUTER_SCIENCE,
]

JOURNALS_BY_DOMAIN: Dict[Domain, List[str]] = {
    Domain.ARTIFICIAL_INTELLIGENCE: ["Artificial Intelligence", "Neural Networks", "Pattern Recognition"],
    Domain.MEDICINE: ["The Lancet", "Journal of Advanced Research", "Biomedical Journal"],
    Domain.PHYSICS: ["Physics Reports", "Nuclear Physics", "Astroparticle Physics"],
    Domain.CHEMISTRY: [
        "Journal of Molecular Structure",
        "Chemical Physics",
        "Journal of Organometallic Chemistry",
    ],
    Domain.BIOLOGY: ["Cell", "Current Biology", "Journal of Theoretical Biology"],
    Domain.ENVIRONMENTAL_SCIENCE: [
        "Environmental Pollution",
        "Science of The Total Environment",
        "Ecological Indicators",
    ],
}
DEFAULT_JOURNALS = ["ScienceDirect Journal"]
SIMULATED_AUTHORS = ["Elizabeth Chen", "Mohammed Al-Farsi", "Julia Kowalski", "Benjamin Taylor"]


def _dollar(value: Any) -> str:
    """Elsevier wraps scalars as ``{"$": "..."}`` in some payloads."""
    if isinstance(value, dict):
        return str(value.get("$") or "")
    return str(value or "")


class ScienceDirectAdapter(SimulatedSourceMixin, SourceAdapter):
    PLATFORM = Platform.SCIENCEDIRECT
    BASE_URL = "https://api.elsevier.com/content/search"

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
        self._client = client or APIClient(
            self.BASE_URL,
            source="sciencedirect",
            timeout=timeout,
            headers={"X-ELS-APIKey": api_key, "Accept": "application/json"} if api_key else None,
        )

    @property
    def simulated(self) -> bool:
        return not self._api_key

    async def _fetch(self, search_filter: SearchFilter) -> List[PaperCandidate]:
        if self.simulated:
            return self.simulate(search_filter)
        data = await self._client.get_json("sciencedirect", self.build_params(search_filter))
        entries = (data.get("search-results") or {}).get("entry") or []
        # An empty result set comes back as a single entry carrying only "error".
        return [
            self.to_candidate(e) for e in entries if isinstance(e, dict) and "error" not in e
        ]

    def build_params(self, search_filter: SearchFilter) -> Dict[str, str]:
        clauses: List[str] = []
        if search_filter.query:
            clauses.append(search_filter.query)
        subject = DOMAIN_TO_SUBJECT_AREA.get((search_filter.domain or "").lower())
        if subject:
            clauses.append(f'SUBJAREA("{subject}")')
        if search_filter.author:
            clauses.append(f'AUTHOR-NAME("{search_filter.author}")')
        if search_filter.journal:
            clauses.append(f'SRCTITLE("{search_filter.journal}")')

        params: Dict[str, str] = {
            "query": " AND ".join(clauses) or "science",
            "start": str(search_filter.skip),
            "count": str(search_filter.limit),
        }
        window = search_filter.date_window()
        if window:
            params["date"] = f"{window[0].year}-{window[1].year}"
        if search_filter.sort_by is SortBy.DATE_DESC:
            params["sort"] = "-date"
        elif search_filter.sort_by is SortBy.DATE_ASC:
            params["sort"] = "date"
        else:
            params["sort"] = "relevance"
        return params

    @staticmethod
    def to_candidate(entry: Dict[str, Any]) -> PaperCandidate:
        authors_block = entry.get("authors") or {}
        raw_authors = authors_block.get("author") if isinstance(authors_block, dict) else authors_block
        if not raw_authors and entry.get("dc:creator"):
            raw_authors = [entry.get("dc:creator")]
        if isinstance(raw_authors, (str, dict)):
            raw_authors = [raw_authors]
        authors = extract_authors(
            [_dollar(a) if isinstance(a, dict) and "$" in a else a for a in raw_authors or []]
        )

        url = pdf_url = None
        for link in entry.get("link") or []:
            if not isinstance(link, dict):
                continue
            if link.get("@ref") == "scidir" and not url:
                url = link.get("@href")
        if url and "/pii/" in url:
            pdf_url = f"{url.rstrip('/')}/pdfft"

        pages = "-".join(
            p for p in (_dollar(entry.get("prism:startingPage")), _dollar(entry.get("prism:endingPage"))) if p
        )
        subjects = [
            _dollar(area) for area in entry.get("subject-area") or [] if isinstance(area, dict)
        ]
        return PaperCandidate(
            title=_dollar(entry.get("dc:title")) or "Untitled",
            authors=authors,
            abstract=_dollar(entry.get("dc:description")),
            doi=_dollar(entry.get("prism:doi")) or None,
            url=url or _dollar(entry.get("prism:url")),
            pdf_url=pdf_url,
            platform=Platform.SCIENCEDIRECT,
            domain=map_category_to_domain("sciencedirect", subjects),
            journal=_dollar(entry.get("prism:publicationName")) or None,
            published_date=parse_published_date(_dollar(entry.get("prism:coverDate"))),
            page_count=parse_page_range(pages),
            view_count=0,
            citation_count=_dollar(entry.get("citedby-count")) or 0,
        )

    def simulate(self, search_filter: SearchFilter) -> List[PaperCandidate]:
        papers: List[PaperCandidate] = []
        year = utcnow().year
        for _ in range(self._batch_size(search_filter)):
            paper_id = self._random_id()
            published = self._days_ago(365)

            title = "Recent Developments in Scientific Research"
            if search_filter.query:
                title = f"{capitalize_first(search_filter.query)}: A Comprehensive Review"

            domain = (
                Domain.parse(search_filter.domain)
                if search_filter.domain
                else self._pick(SIMULATED_DOMAINS)
            )
            journal = search_filter.journal or self._pick(
                JOURNALS_BY_DOMAIN.get(domain, DEFAULT_JOURNALS)
            )
            authors = list(SIMULATED_AUTHORS)
            if search_filter.author:
                authors = [search_filter.author, *SIMULATED_AUTHORS[:2]]

            papers.append(
                PaperCandidate(
                    title=title,
                    authors=authors,
                    abstract=(
                        "This ScienceDirect publication presents a comprehensive analysis of "
                        f"{search_filter.query or 'recent advances'} in the field of "
                        f"{domain.value}. The research explores key methodologies, results, and "
                        "implications for future studies."
                    ),
                    doi=f"10.1016/j.scidirect.{year}.{paper_id}",
                    url=f"https://www.sciencedirect.com/science/article/abs/pii/S{paper_id}",
                    pdf_url=f"https://www.sciencedirect.com/science/article/pii/S{paper_id}/pdfft",
                    platform=Platform.SCIENCEDIRECT,
                    domain=domain,
                    journal=journal,
                    published_date=published,
                    page_count=12 + self._rng.randrange(18),
                    view_count=self._rng.randrange(4000),
                    citation_count=self._rng.randrange(300),
                )
            )
        return sort_candidates(papers, search_filter.sort_by)

    async def close(self) -> None:
        await self._client.close()
