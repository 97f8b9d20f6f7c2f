"""PaperRepository: persistence interface for papers and user-owned records."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from paperlens.domain.library import GeneratedSummary, RecentSearch, SavedPaper, Summary, User
from paperlens.domain.paper import Paper, PaperCandidate
from paperlens.domain.search import SearchFilter


@runtime_checkable
class PaperRepository(Protocol):
    # users
    def create_user(self, *, username: str, email: Optional[str] = None) -> User: ...

    def get_user(self, user_id: int) -> Optional[User]: ...

    # papers
    def create_paper(self, candidate: PaperCandidate) -> Paper: ...

    def get_paper(self, paper_id: int) -> Optional[Paper]: ...

    def get_paper_by_doi(self, doi: str) -> Optional[Paper]: ...

    def search_papers(self, search_filter: SearchFilter) -> Tuple[List[Paper], int]: ...

    def count_papers(self) -> int: ...

    # saved papers
    def get_saved_papers(self, user_id: int) -> List[Paper]: ...

    def save_paper(self, user_id: int, paper_id: int) -> SavedPaper: ...

    def remove_saved_paper(self, user_id: int, paper_id: int) -> bool: ...

    def is_saved_paper(self, user_id: int, paper_id: int) -> bool: ...

    # summaries
    def get_summary(self, paper_id: int) -> Optional[Summary]: ...

    def create_summary(self, paper_id: int, summary: GeneratedSummary) -> Summary: ...

    def update_summary(self, paper_id: int, summary: GeneratedSummary) -> Optional[Summary]: ...

    # recent searches
    def get_recent_searches(self, user_id: int, *, limit: Optional[int] = None) -> List[RecentSearch]: ...

    def save_recent_search(
        self, user_id: int, query: str, filters: Optional[Dict[str, Any]] = None
    ) -> RecentSearch: ...

    def clear_recent_searches(self, user_id: int) -> int: ...

    def close(self) -> None: ...
