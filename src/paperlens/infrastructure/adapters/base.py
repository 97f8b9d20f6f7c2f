"""Shared behaviour for the platform adapters."""

from __future__ import annotations

import logging
import random
from datetime import timedelta
from typing import List, Optional

from paperlens.domain.paper import PaperCandidate, Platform
from paperlens.domain.search import SearchFilter, SortBy
from paperlens.utils.timeutil import utcnow

logger = logging.getLogger(__name__)

SIMULATED_BATCH_MAX = 10


def sort_candidates(papers: List[PaperCandidate], sort_by: SortBy) -> List[PaperCandidate]:
    """Order a batch the way the caller asked; relevance keeps source order."""
    if sort_by is SortBy.DATE_DESC:
        return sorted(papers, key=lambda p: p.published_date, reverse=True)
    if sort_by is SortBy.DATE_ASC:
        return sorted(papers, key=lambda p: p.published_date)
    if sort_by is SortBy.CITATIONS:
        return sorted(papers, key=lambda p: p.citation_count or 0, reverse=True)
    return list(papers)


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:] if text else text


class SourceAdapter:
    """
    Base class for platform adapters.

    Subclasses implement ``_fetch``; ``fetch`` turns any failure into an
    empty batch and a warning so one broken source never sinks a search.
    """

    PLATFORM: Platform = Platform.OTHER

    @property
    def platform(self) -> Platform:
        return self.PLATFORM

    async def fetch(self, search_filter: SearchFilter) -> List[PaperCandidate]:
        try:
            papers = await self._fetch(search_filter)
        except Exception as exc:
            logger.warning("%s fetch failed: %s", self.PLATFORM.value, exc)
            return []
        logger.debug("%s returned %d papers", self.PLATFORM.value, len(papers))
        return papers

    async def _fetch(self, search_filter: SearchFilter) -> List[PaperCandidate]:
        raise NotImplementedError

    async def close(self) -> None:
        pass


class SimulatedSourceMixin:
    """
    Placeholder results for platforms whose API key is not configured.

    The random source is injectable so tests can pin ids, dates and counters.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def _batch_size(self, search_filter: SearchFilter) -> int:
        return min(search_filter.limit, SIMULATED_BATCH_MAX)

    def _random_id(self) -> int:
        return self._rng.randrange(1_000_000)

    def _days_ago(self, max_days: int):
        return utcnow() - timedelta(days=self._rng.randrange(max_days))

    def _pick(self, options):
        return options[self._rng.randrange(len(options))]
