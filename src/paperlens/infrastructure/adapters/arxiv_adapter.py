"""
arXiv adapter.

Uses the arXiv Atom API: https://export.arxiv.org/api/query
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from defusedxml import ElementTree as ET

from paperlens.application.services.normalization import (
    map_category_to_domain,
    parse_published_date,
)
from paperlens.core.exceptions import UpstreamError
from paperlens.domain.paper import PaperCandidate, Platform
from paperlens.domain.search import SearchFilter, SortBy
from paperlens.infrastructure.adapters.base import SourceAdapter
from paperlens.infrastructure.api_clients.base import APIClient

ATOM_NS = "{http://www.w3.org/2005/Atom}"
ARXIV_NS = "{http://arxiv.org/schemas/atom}"

DOMAIN_TO_CATEGORIES: Dict[str, List[str]] = {
    "artificial intelligence": ["cs.AI"],
    "computer science": ["cs"],
    "physics": ["physics"],
    "mathematics": ["math"],
    "biology": ["q-bio"],
    "engineering": ["cs.SE", "eess"],
    "economics": ["econ"],
    "medicine": ["q-bio.TO"],
    "psychology": ["q-bio.NC"],
    "chemistry": ["physics.chem-ph"],
    "social sciences": ["econ", "q-bio.PE"],
    "environmental science": ["physics.ao-ph"],
    "materials science": ["cond-mat.mtrl-sci"],
    "astronomy": ["astro-ph"],
}

_WS_RX = re.compile(r"\s+")


def _text(node, tag: str) -> str:
    child = node.find(tag)
    if child is None or child.text is None:
        return ""
    return _WS_RX.sub(" ", child.text).strip()


class ArxivAdapter(SourceAdapter):
    """arXiv source. No API key; citation counts are not available."""

    PLATFORM = Platform.ARXIV
    BASE_URL = "https://export.arxiv.org/api"

    def __init__(self, client: Optional[APIClient] = None, *, timeout: float = 30):
        self._client = client or APIClient(self.BASE_URL, source="arxiv", timeout=timeout)

    def build_params(self, search_filter: SearchFilter) -> Optional[Dict[str, str]]:
        """Translate a filter into query parameters, or None if nothing to ask."""
        clauses: List[str] = []
        if search_filter.query:
            clauses.append(f"all:{search_filter.query}")

        categories = DOMAIN_TO_CATEGORIES.get((search_filter.domain or "").lower(), [])
        if categories:
            cat_clause = " OR ".join(f"cat:{c}" for c in categories)
            clauses.append(f"({cat_clause})" if len(categories) > 1 else cat_clause)
        if search_filter.author:
            clauses.append(f'au:"{search_filter.author}"')
        if search_filter.journal:
            clauses.append(f'jr:"{search_filter.journal}"')
        if not clauses:
            return None

        window = search_filter.date_window()
        if window:
            start, end = window
            clauses.append(
                f"submittedDate:[{start.strftime('%Y%m%d%H%M')} TO {end.strftime('%Y%m%d%H%M')}]"
            )

        params = {
            "search_query": " AND ".join(clauses),
            "start": str(search_filter.skip),
            "max_results": str(search_filter.limit),
        }
        if search_filter.sort_by is SortBy.DATE_DESC:
            params["sortBy"] = "submittedDate"
            params["sortOrder"] = "descending"
        elif search_filter.sort_by is SortBy.DATE_ASC:
            params["sortBy"] = "submittedDate"
            params["sortOrder"] = "ascending"
        else:
            params["sortBy"] = "relevance"
            params["sortOrder"] = "descending"
        return params

    async def _fetch(self, search_filter: SearchFilter) -> List[PaperCandidate]:
        params = self.build_params(search_filter)
        if params is None:
            return []
        xml_text = await self._client.get_text("query", params)
        return self.parse_feed(xml_text)

    @staticmethod
    def parse_feed(xml_text: str) -> List[PaperCandidate]:
        """Map an Atom feed to candidates."""
        try:
            root = ET.fromstring(xml_text)
        except ET.ParseError as exc:
            raise UpstreamError("arXiv returned malformed XML", source="arxiv") from exc

        papers: List[PaperCandidate] = []
        for entry in root.findall(f"{ATOM_NS}entry"):
            authors = [
                _text(author, f"{ATOM_NS}name") for author in entry.findall(f"{ATOM_NS}author")
            ]

            doi = _text(entry, f"{ARXIV_NS}doi")
            pdf_url = ""
            for link in entry.findall(f"{ATOM_NS}link"):
                href = link.get("href") or ""
                if not doi and link.get("rel") == "related" and "doi.org" in href:
                    doi = href
                if not pdf_url and link.get("title") == "pdf":
                    pdf_url = href

            category = entry.find(f"{ATOM_NS}category")
            term = category.get("term", "") if category is not None else ""

            papers.append(
                PaperCandidate(
                    title=_text(entry, f"{ATOM_NS}title") or "Untitled",
                    authors=authors,
                    abstract=_text(entry, f"{ATOM_NS}summary"),
                    doi=doi or None,
                    url=_text(entry, f"{ATOM_NS}id"),
                    pdf_url=pdf_url or None,
                    platform=Platform.ARXIV,
                    domain=map_category_to_domain("arxiv", term),
                    journal="ArXiv",
                    published_date=parse_published_date(_text(entry, f"{ATOM_NS}published")),
                    page_count=0,
                    view_count=0,
                    citation_count=0,
                )
            )
        return papers

    async def close(self) -> None:
        await self._client.close()
