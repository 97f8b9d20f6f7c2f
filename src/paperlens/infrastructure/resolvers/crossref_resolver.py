"""CrossRef DOI resolver."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Dict, Optional

from paperlens.application.services.normalization import (
    extract_authors,
    map_category_to_domain,
    parse_page_range,
    parse_published_date,
)
from paperlens.domain.paper import PaperCandidate, Platform
from paperlens.infrastructure.connectors.crossref_connector import CrossrefConnector

logger = logging.getLogger(__name__)

_TAG_RX = re.compile(r"</?[^>]+(>|$)")

# Publisher substring -> platform, first hit wins.
PUBLISHER_PLATFORMS = (
    ("Elsevier", Platform.SCIENCEDIRECT),
    ("IEEE", Platform.IEEE),
    ("Springer", Platform.SPRINGER),
    ("PubMed", Platform.PUBMED),
    ("NCBI", Platform.PUBMED),
    ("arXiv", Platform.ARXIV),
)


def _first(values: Any) -> str:
    if isinstance(values, list) and values:
        return str(values[0] or "")
    if isinstance(values, str):
        return values
    return ""


class CrossrefDoiResolver:
    """DoiResolverPort over the blocking CrossRef connector."""

    def __init__(self, connector: Optional[CrossrefConnector] = None):
        self._connector = connector or CrossrefConnector()

    async def resolve(self, doi: str) -> Optional[PaperCandidate]:
        try:
            work = await asyncio.to_thread(self._connector.get_work, doi)
        except Exception as exc:
            logger.warning("CrossRef lookup for %s failed: %s", doi, exc)
            return None
        if not work:
            logger.info("DOI not found in CrossRef: %s", doi)
            return None
        return self.to_candidate(doi, work)

    @staticmethod
    def to_candidate(doi: str, work: Dict[str, Any]) -> PaperCandidate:
        publisher = str(work.get("publisher") or "")
        platform = Platform.OTHER
        for needle, candidate_platform in PUBLISHER_PLATFORMS:
            if needle in publisher:
                platform = candidate_platform
                break

        pdf_url = None
        for link in work.get("link") or []:
            if isinstance(link, dict) and link.get("content-type") == "application/pdf":
                pdf_url = link.get("URL")
                break

        return PaperCandidate(
            title=_first(work.get("title")) or "Untitled",
            authors=extract_authors(work.get("author") or []),
            abstract=_TAG_RX.sub("", str(work.get("abstract") or "")),
            doi=work.get("DOI") or doi,
            url=work.get("URL") or f"https://doi.org/{doi}",
            pdf_url=pdf_url,
            platform=platform,
            domain=map_category_to_domain("crossref", work.get("subject") or []),
            journal=_first(work.get("container-title")) or _first(work.get("journal-title")),
            published_date=parse_published_date(
                work.get("published") or work.get("published-print") or work.get("issued")
            ),
            page_count=parse_page_range(work.get("page")),
            view_count=0,
            citation_count=work.get("is-referenced-by-count") or 0,
        )

    async def close(self) -> None:
        pass
