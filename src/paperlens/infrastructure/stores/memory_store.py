"""
In-process paper repository.

Default backend: everything lives in dicts guarded by a single lock, ids are
assigned from per-entity counters starting at 1.
"""

from __future__ import annotations

import copy
import threading
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from paperlens.core.exceptions import AlreadySavedError
from paperlens.domain.library import GeneratedSummary, RecentSearch, SavedPaper, Summary, User
from paperlens.domain.paper import Paper, PaperCandidate
from paperlens.domain.paper_identity import normalize_doi
from paperlens.domain.search import SearchFilter, SortBy
from paperlens.utils.timeutil import utcnow


def _matches_text(paper: Paper, needle: str) -> bool:
    return (
        needle in paper.title.lower()
        or needle in (paper.abstract or "").lower()
        or any(needle in author.lower() for author in paper.authors)
    )


def filter_papers(
    papers: List[Paper], search_filter: SearchFilter, *, now: Optional[datetime] = None
) -> List[Paper]:
    """Apply the filter predicates in their documented order."""
    result = list(papers)
    if search_filter.query:
        needle = search_filter.query.lower()
        result = [p for p in result if _matches_text(p, needle)]
    if search_filter.platform is not None:
        result = [p for p in result if p.platform == search_filter.platform]
    if search_filter.domain:
        wanted = search_filter.domain.lower()
        result = [p for p in result if p.domain.value.lower() == wanted]
    if search_filter.author:
        needle = search_filter.author.lower()
        result = [p for p in result if any(needle in a.lower() for a in p.authors)]
    if search_filter.journal:
        needle = search_filter.journal.lower()
        result = [p for p in result if p.journal and needle in p.journal.lower()]

    window = search_filter.date_window(now)
    if window:
        start, end = window
        result = [p for p in result if start <= p.published_date <= end]
    return result


def sort_papers(papers: List[Paper], sort_by: SortBy) -> List[Paper]:
    """Stable sort with id as the tie-breaker; relevance is insertion order."""
    if sort_by is SortBy.CITATIONS:
        return sorted(papers, key=lambda p: (-(p.citation_count or 0), p.id))
    if sort_by is SortBy.DATE_DESC:
        return sorted(papers, key=lambda p: (-p.published_date.timestamp(), p.id))
    if sort_by is SortBy.DATE_ASC:
        return sorted(papers, key=lambda p: (p.published_date.timestamp(), p.id))
    return sorted(papers, key=lambda p: p.id)


class InMemoryPaperStore:
    """PaperRepository backed by process memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: Dict[int, User] = {}
        self._papers: Dict[int, Paper] = {}
        self._doi_index: Dict[str, int] = {}
        self._saved: Dict[int, SavedPaper] = {}
        self._summaries: Dict[int, Summary] = {}
        self._searches: Dict[int, RecentSearch] = {}
        self._next_ids = {"user": 1, "paper": 1, "saved": 1, "summary": 1, "search": 1}

    def _next_id(self, kind: str) -> int:
        value = self._next_ids[kind]
        self._next_ids[kind] = value + 1
        return value

    # ------------------------------------------------------------------ users

    def create_user(self, *, username: str, email: Optional[str] = None) -> User:
        with self._lock:
            user = User(id=self._next_id("user"), username=username, email=email, created_at=utcnow())
            self._users[user.id] = user
            return copy.copy(user)

    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return copy.copy(user) if user else None

    # ----------------------------------------------------------------- papers

    def create_paper(self, candidate: PaperCandidate) -> Paper:
        """Insert a paper; a DOI already on file returns the stored paper unchanged."""
        with self._lock:
            if candidate.doi:
                existing_id = self._doi_index.get(candidate.doi)
                if existing_id is not None:
                    return copy.deepcopy(self._papers[existing_id])
            paper = Paper.from_candidate(candidate, paper_id=self._next_id("paper"))
            self._papers[paper.id] = paper
            if paper.doi:
                self._doi_index[paper.doi] = paper.id
            return copy.deepcopy(paper)

    def get_paper(self, paper_id: int) -> Optional[Paper]:
        with self._lock:
            paper = self._papers.get(paper_id)
            return copy.deepcopy(paper) if paper else None

    def get_paper_by_doi(self, doi: str) -> Optional[Paper]:
        key = normalize_doi(doi)
        if not key:
            return None
        with self._lock:
            paper_id = self._doi_index.get(key)
            return copy.deepcopy(self._papers[paper_id]) if paper_id is not None else None

    def search_papers(self, search_filter: SearchFilter) -> Tuple[List[Paper], int]:
        with self._lock:
            papers = list(self._papers.values())
        matched = sort_papers(filter_papers(papers, search_filter), search_filter.sort_by)
        start = search_filter.skip
        page = matched[start : start + search_filter.limit]
        return [copy.deepcopy(p) for p in page], len(matched)

    def count_papers(self) -> int:
        with self._lock:
            return len(self._papers)

    # ------------------------------------------------------------ saved papers

    def get_saved_papers(self, user_id: int) -> List[Paper]:
        """Bookmarked papers, most recently saved first."""
        with self._lock:
            rows = sorted(
                (s for s in self._saved.values() if s.user_id == user_id),
                key=lambda s: (s.created_at, s.id),
                reverse=True,
            )
            return [copy.deepcopy(self._papers[s.paper_id]) for s in rows if s.paper_id in self._papers]

    def save_paper(self, user_id: int, paper_id: int) -> SavedPaper:
        with self._lock:
            if any(s.user_id == user_id and s.paper_id == paper_id for s in self._saved.values()):
                raise AlreadySavedError(user_id, paper_id)
            saved = SavedPaper(
                id=self._next_id("saved"), user_id=user_id, paper_id=paper_id, created_at=utcnow()
            )
            self._saved[saved.id] = saved
            return copy.copy(saved)

    def remove_saved_paper(self, user_id: int, paper_id: int) -> bool:
        with self._lock:
            for saved_id, saved in list(self._saved.items()):
                if saved.user_id == user_id and saved.paper_id == paper_id:
                    del self._saved[saved_id]
                    return True
            return False

    def is_saved_paper(self, user_id: int, paper_id: int) -> bool:
        with self._lock:
            return any(s.user_id == user_id and s.paper_id == paper_id for s in self._saved.values())

    # -------------------------------------------------------------- summaries

    def _find_summary(self, paper_id: int) -> Optional[Summary]:
        for summary in self._summaries.values():
            if summary.paper_id == paper_id:
                return summary
        return None

    def get_summary(self, paper_id: int) -> Optional[Summary]:
        with self._lock:
            summary = self._find_summary(paper_id)
            return copy.copy(summary) if summary else None

    def create_summary(self, paper_id: int, summary: GeneratedSummary) -> Summary:
        with self._lock:
            existing = self._find_summary(paper_id)
            if existing is not None:
                return copy.copy(existing)
            now = utcnow()
            row = Summary(
                id=self._next_id("summary"),
                paper_id=paper_id,
                created_at=now,
                updated_at=now,
                short_summary=summary.short_summary or None,
                medium_summary=summary.medium_summary or None,
                detailed_summary=summary.detailed_summary or None,
            )
            self._summaries[row.id] = row
            return copy.copy(row)

    def update_summary(self, paper_id: int, summary: GeneratedSummary) -> Optional[Summary]:
        with self._lock:
            row = self._find_summary(paper_id)
            if row is None:
                return None
            row.short_summary = summary.short_summary or None
            row.medium_summary = summary.medium_summary or None
            row.detailed_summary = summary.detailed_summary or None
            row.updated_at = max(utcnow(), row.updated_at + timedelta(microseconds=1))
            return copy.copy(row)

    # -------------------------------------------------------- recent searches

    def get_recent_searches(self, user_id: int, *, limit: Optional[int] = None) -> List[RecentSearch]:
        with self._lock:
            rows = sorted(
                (s for s in self._searches.values() if s.user_id == user_id),
                key=lambda s: (s.created_at, s.id),
                reverse=True,
            )
            if limit is not None:
                rows = rows[: max(0, limit)]
            return [copy.deepcopy(s) for s in rows]

    def save_recent_search(
        self, user_id: int, query: str, filters: Optional[Dict[str, Any]] = None
    ) -> RecentSearch:
        with self._lock:
            row = RecentSearch(
                id=self._next_id("search"),
                user_id=user_id,
                query=query,
                created_at=utcnow(),
                filters=dict(filters or {}),
            )
            self._searches[row.id] = row
            return copy.deepcopy(row)

    def clear_recent_searches(self, user_id: int) -> int:
        with self._lock:
            doomed = [sid for sid, s in self._searches.items() if s.user_id == user_id]
            for sid in doomed:
                del self._searches[sid]
            return len(doomed)

    def close(self) -> None:
        pass
