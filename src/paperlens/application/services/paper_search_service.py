"""PaperSearchService: store-first search with best-effort fan-out to the platforms."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from paperlens.application.ports.doi_resolver_port import DoiResolverPort
from paperlens.application.ports.paper_repository_port import PaperRepository
from paperlens.application.ports.paper_source_port import PaperSourcePort
from paperlens.domain.paper import Paper, PaperCandidate, Platform
from paperlens.domain.search import SearchFilter, SearchOutcome

logger = logging.getLogger(__name__)

ALL_SOURCES_FAILED = "Failed to fetch additional papers from external sources"


class PaperSearchService:
    """Answers searches from the store and tops it up from the source adapters.

    A search the store can fill on its own never touches the network. Otherwise
    every selected adapter runs concurrently; failed adapters are logged and
    dropped, new papers are ingested once per DOI, and the store is queried
    again for the final page.
    """

    def __init__(
        self,
        adapters: Dict[Platform, PaperSourcePort],
        repository: PaperRepository,
        resolver: Optional[DoiResolverPort] = None,
    ):
        self._adapters = adapters
        self._repository = repository
        self._resolver = resolver
        self._ingest_lock = asyncio.Lock()

    async def search(self, search_filter: SearchFilter) -> SearchOutcome:
        papers, total = self._repository.search_papers(search_filter)
        if len(papers) >= search_filter.limit:
            return SearchOutcome(papers=papers, total=total, source="database")

        selected = self._select_adapters(search_filter.platform)
        if not selected:
            return SearchOutcome(papers=papers, total=total, source="database")

        results = await asyncio.gather(
            *(adapter.fetch(search_filter) for adapter in selected),
            return_exceptions=True,
        )

        fetched: List[PaperCandidate] = []
        failed: List[str] = []
        for adapter, result in zip(selected, results):
            if isinstance(result, BaseException):
                logger.warning("Adapter %s failed: %s", adapter.platform.value, result)
                failed.append(adapter.platform.value)
                continue
            fetched.extend(result)

        if failed:
            logger.info(
                "Search degraded: %d/%d sources failed (%s)",
                len(failed),
                len(selected),
                ", ".join(failed),
            )

        created = await self._ingest(fetched)
        logger.info("Ingested %d new papers from %d candidates", created, len(fetched))

        papers, total = self._repository.search_papers(search_filter)
        error = ALL_SOURCES_FAILED if len(failed) == len(selected) else None
        return SearchOutcome(papers=papers, total=total, source="mixed", error=error)

    async def _ingest(self, candidates: List[PaperCandidate]) -> int:
        """Persist candidates not already on file; returns how many were new."""
        created = 0
        async with self._ingest_lock:
            for candidate in candidates:
                if candidate.doi and self._repository.get_paper_by_doi(candidate.doi) is not None:
                    continue
                self._repository.create_paper(candidate)
                created += 1
        return created

    def _select_adapters(self, platform: Optional[Platform]) -> List[PaperSourcePort]:
        if platform is None:
            return list(self._adapters.values())
        adapter = self._adapters.get(platform)
        return [adapter] if adapter is not None else []

    async def lookup_doi(self, doi: str) -> Optional[Paper]:
        """Stored paper for a DOI, falling back to a live resolver lookup."""
        paper = self._repository.get_paper_by_doi(doi)
        if paper is not None or self._resolver is None:
            return paper

        try:
            candidate = await self._resolver.resolve(doi)
        except Exception as exc:
            logger.warning("DOI lookup failed for %s: %s", doi, exc)
            return None
        if candidate is None:
            return None
        async with self._ingest_lock:
            return self._repository.create_paper(candidate)

    async def close(self) -> None:
        for adapter in self._adapters.values():
            try:
                await adapter.close()
            except Exception as exc:
                logger.debug("Adapter %s close failed: %s", adapter.platform.value, exc)
        if self._resolver is not None:
            try:
                await self._resolver.close()
            except Exception as exc:
                logger.debug("Resolver close failed: %s", exc)
