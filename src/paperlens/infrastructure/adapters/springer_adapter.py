"""
Springer Nature adapter.

Uses the Springer Nature Meta API (v2, JSON) when ``SPRINGER_API_KEY`` is
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

DOMAIN_TO_SUBJECT: Dict[str, str] = {
    "artificial intelligence": "Computer Science",
    "computer science": "Computer Science",
    "medicine": "Medicine & Public Health",
    "biology": "Life Sciences",
    "physics": "Physics",
    "chemistry": "Chemistry",
    "mathematics": "Mathematics",
    "engineering": "Engineering",
    "economics": "Economics",
    "psychology": "Psychology",
    "environmental science": "Environment",
    "social sciences": "Social Sciences",
}

SIMULATED_DOMAINS = [
    Domain.ARTIFICIAL_INTELLIGENCE,
    Domain.COMPUTER_SCIENCE,
    Domain.MEDICINE,
    Domain.BIOLOGY,
    Domain.PHYSICS,
    Domain.CHEMISTRY,
    Domain.MATHEMATICS,
    Domain.ENGINEERING,
    Domain.ECONOMICS,
    Domain.PSYCHOLOGY,
    Domain.ENVIRONMENTAL_SCIENCE,
    Domain.SOCIAL_SCIENCES,
]

JOURNALS_BY_DOMAIN: Dict[Domain, List[str]] = {
    Domain.ARTIFICIAL_INTELLIGENCE: [
        "Journal of Artificial Intelligence Research",
        "AI and Ethics",
        "Cognitive Computation",
    ],
    Domain.COMPUTER_SCIENCE: [
        "Journal of Computer Science and Technology",
        "Scientific Computing",
        "Software Quality Journal",
    ],
    Domain.MEDICINE: [
        "BMC Medicine",
        "European Journal of Clinical Pharmacology",
        "Journal of Neurology",
    ],
    Domain.PHYSICS: [
        "European Physical Journal",
        "Applied Physics",
        "Quantum Information Processing",
    ],
    Domain.BIOLOGY: [
        "Journal of Molecular Evolution",
        "Plant Cell Reports",
        "Marine Biology",
    ],
}
DEFAULT_JOURNALS = ["Springer Journal"]
SIMULATED_AUTHORS = ["Daniel Weber", "Susan Richards", "Takashi Yamamoto", "Elena Popov"]


def _quote(value: str) -> str:
    return f'"{value}"' if " " in value else value


class SpringerAdapter(SimulatedSourceMixin, SourceAdapter):
    PLATFORM = Platform.SPRINGER
    BASE_URL = "https://api.springernature.com/meta/v2"

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
        self._client = client or APIClient(self.BASE_URL, source="springer", timeout=timeout)

    @property
    def simulated(self) -> bool:
        return not self._api_key

    async def _fetch(self, search_filter: SearchFilter) -> List[PaperCandidate]:
        if self.simulated:
            return self.simulate(search_filter)
        data = await self._client.get_json("json", self.build_params(search_filter))
        return [self.to_candidate(r) for r in (data.get("records") or []) if isinstance(r, dict)]

    def build_params(self, search_filter: SearchFilter) -> Dict[str, str]:
        constraints: List[str] = []
        if search_filter.query:
            constraints.append(_quote(search_filter.query))
        subject = DOMAIN_TO_SUBJECT.get((search_filter.domain or "").lower())
        if subject:
            constraints.append(f"subject:{_quote(subject)}")
        if search_filter.author:
            constraints.append(f"name:{_quote(search_filter.author)}")
        if search_filter.journal:
            constraints.append(f"journal:{_quote(search_filter.journal)}")

        window = search_filter.date_window()
        if window:
            constraints.append(f"onlinedatefrom:{window[0].strftime('%Y-%m-%d')}")
            constraints.append(f"onlinedateto:{window[1].strftime('%Y-%m-%d')}")
        # Springer can only order newest first; other orders fall back to relevance.
        if search_filter.sort_by is SortBy.DATE_DESC:
            constraints.append("sort:date")

        return {
            "api_key": self._api_key or "",
            "q": " ".join(constraints) or "*",
            # 1-based record offset
            "s": str(search_filter.skip + 1),
            "p": str(search_filter.limit),
        }

    @staticmethod
    def to_candidate(record: Dict[str, Any]) -> PaperCandidate:
        html_url = pdf_url = None
        for link in record.get("url") or []:
            if not isinstance(link, dict):
                continue
            if link.get("format") == "html" and not html_url:
                html_url = link.get("value")
            elif link.get("format") == "pdf" and not pdf_url:
                pdf_url = link.get("value")

        abstract = record.get("abstract") or ""
        if isinstance(abstract, dict):
            abstract = " ".join(str(v) for v in abstract.values() if isinstance(v, str))

        pages = "-".join(
            str(p) for p in (record.get("startingPage"), record.get("endingPage")) if p
        )
        doi = record.get("doi")
        return PaperCandidate(
            title=record.get("title") or "Untitled",
            authors=extract_authors(record.get("creators") or []),
            abstract=abstract,
            doi=doi,
            url=html_url or (f"https://link.springer.com/{doi}" if doi else ""),
            pdf_url=pdf_url,
            platform=Platform.SPRINGER,
            domain=map_category_to_domain(
                "springer", record.get("subjects") or record.get("disciplines") or []
            ),
            journal=record.get("publicationName"),
            published_date=parse_published_date(
                record.get("publicationDate") or record.get("onlineDate")
            ),
            page_count=parse_page_range(pages),
            view_count=0,
            citation_count=0,
        )

    def simulate(self, search_filter: SearchFilter) -> List[PaperCandidate]:
        papers: List[PaperCandidate] = []
        for _ in range(self._batch_size(search_filter)):
            paper_id = self._random_id()
            published = self._days_ago(365)

            title = "Advances in Research Methodology"
            if search_filter.query:
                title = f"{capitalize_first(search_filter.query)}: Advances and Applications"

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

            doi = f"10.1007/s11432-{paper_id}"
            papers.append(
                PaperCandidate(
                    title=title,
                    authors=authors,
                    abstract=(
                        "This research paper published by Springer explores "
                        f"{search_filter.query or 'important advances'} in the field of "
                        f"{domain.value}. The study provides comprehensive analysis and presents "
                        "new methodologies for future research directions."
                    ),
                    doi=doi,
                    url=f"https://link.springer.com/article/{doi}",
                    pdf_url=f"https://link.springer.com/content/pdf/{doi}.pdf",
                    platform=Platform.SPRINGER,
                    domain=domain,
                    journal=journal,
                    published_date=published,
                    page_count=10 + self._rng.randrange(15),
                    view_count=self._rng.randrange(3000),
                    citation_count=self._rng.randrange(150),
                )
            )
        return sort_candidates(papers, search_filter.sort_by)

    async def close(self) -> None:
        await self._client.close()
