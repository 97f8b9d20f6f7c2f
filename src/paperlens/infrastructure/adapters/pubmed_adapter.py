"""
PubMed adapter over NCBI E-utilities.

esearch (ids) -> esummary (metadata) -> efetch (abstracts, one request per id).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from defusedxml import ElementTree as ET

from paperlens.application.services.normalization import (
    extract_authors,
    map_category_to_domain,
    parse_published_date,
)
from paperlens.domain.paper import PaperCandidate, Platform
from paperlens.domain.search import SearchFilter, SortBy
from paperlens.infrastructure.adapters.base import SourceAdapter
from paperlens.infrastructure.api_clients.base import APIClient

logger = logging.getLogger(__name__)

DOMAIN_TO_MESH: Dict[str, str] = {
    "medicine": "Medicine[MeSH]",
    "biology": "Biology[MeSH]",
    "chemistry": "Chemistry[MeSH]",
    "physics": "Physics[MeSH]",
    "artificial intelligence": "Artificial Intelligence[MeSH]",
    "psychology": "Psychology[MeSH]",
    "environmental science": "Environment[MeSH]",
}

FALLBACK_TERM = "science[All Fields]"


class PubMedAdapter(SourceAdapter):
    PLATFORM = Platform.PUBMED
    BASE_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"

    def __init__(
        self,
        client: Optional[APIClient] = None,
        *,
        api_key: Optional[str] = None,
        email: Optional[str] = None,
        timeout: float = 30,
    ):
        self._client = client or APIClient(self.BASE_URL, source="pubmed", timeout=timeout)
        self._api_key = api_key
        self._email = email

    def _common_params(self) -> Dict[str, str]:
        params = {"db": "pubmed", "tool": "paperlens"}
        if self._api_key:
            params["api_key"] = self._api_key
        if self._email:
            params["email"] = self._email
        return params

    @staticmethod
    def build_term(search_filter: SearchFilter) -> str:
        terms: List[str] = []
        if search_filter.query:
            terms.append(f"{search_filter.query}[All Fields]")
        mesh = DOMAIN_TO_MESH.get((search_filter.domain or "").lower())
        if mesh:
            terms.append(mesh)
        if search_filter.author:
            terms.append(f"{search_filter.author}[Author]")
        if search_filter.journal:
            terms.append(f"{search_filter.journal}[Journal]")

        window = search_filter.date_window()
        if window:
            start, end = window
            terms.append(
                f'("{start.strftime("%Y/%m/%d")}"[Date - Publication] : '
                f'"{end.strftime("%Y/%m/%d")}"[Date - Publication])'
            )
        return " AND ".join(terms) if terms else FALLBACK_TERM

    @staticmethod
    def sort_param(sort_by: SortBy) -> str:
        # esearch only sorts publication date newest first.
        if sort_by is SortBy.DATE_DESC:
            return "pub_date"
        return "relevance"

    async def _fetch(self, search_filter: SearchFilter) -> List[PaperCandidate]:
        search_params = {
            **self._common_params(),
            "term": self.build_term(search_filter),
            "retmode": "json",
            "retstart": str(search_filter.skip),
            "retmax": str(search_filter.limit),
            "sort": self.sort_param(search_filter.sort_by),
        }
        search_data = await self._client.get_json("esearch.fcgi", search_params)
        ids = [str(i) for i in (search_data.get("esearchresult") or {}).get("idlist") or []]
        if not ids:
            return []

        summary_data = await self._client.get_json(
            "esummary.fcgi",
            {**self._common_params(), "id": ",".join(ids), "retmode": "json"},
        )
        result = summary_data.get("result") or {}

        abstracts = await asyncio.gather(*(self._fetch_abstract(pmid) for pmid in ids))
        abstract_by_id = dict(zip(ids, abstracts))

        papers: List[PaperCandidate] = []
        for pmid in ids:
            article = result.get(pmid)
            if not isinstance(article, dict):
                continue
            papers.append(self.to_candidate(pmid, article, abstract_by_id.get(pmid, "")))
        return papers

    async def _fetch_abstract(self, pmid: str) -> str:
        params = {**self._common_params(), "id": pmid, "retmode": "xml", "rettype": "abstract"}
        try:
            xml_text = await self._client.get_text("efetch.fcgi", params)
            root = ET.fromstring(xml_text)
        except Exception as exc:
            logger.debug("PubMed abstract %s unavailable: %s", pmid, exc)
            return ""
        parts = ["".join(node.itertext()).strip() for node in root.iter("AbstractText")]
        return " ".join(p for p in parts if p)

    @staticmethod
    def to_candidate(pmid: str, article: Dict[str, Any], abstract: str = "") -> PaperCandidate:
        doi = None
        for article_id in article.get("articleids") or []:
            if isinstance(article_id, dict) and article_id.get("idtype") == "doi":
                doi = article_id.get("value")
                break

        journal = article.get("fulljournalname") or article.get("source") or ""
        classification_terms = [
            *(article.get("keywords") or []),
            *(article.get("meshterms") or []),
            journal,
        ]
        url = f"https://pubmed.ncbi.nlm.nih.gov/{pmid}/"
        return PaperCandidate(
            title=article.get("title") or "Untitled",
            authors=extract_authors(article.get("authors") or []),
            abstract=abstract or article.get("abstract") or "",
            doi=doi,
            url=url,
            pdf_url=url,
            platform=Platform.PUBMED,
            domain=map_category_to_domain("pubmed", classification_terms),
            journal=journal,
            published_date=parse_published_date(
                article.get("pubdate") or article.get("sortpubdate")
            ),
            page_count=0,
            view_count=0,
            citation_count=0,
        )

    async def close(self) -> None:
        await self._client.close()
