"""Per-user bookmarks and search history."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from paperlens.application.ports.paper_repository_port import PaperRepository
from paperlens.core.exceptions import PaperNotFoundError, UserNotFoundError
from paperlens.domain.library import RecentSearch, SavedPaper, User
from paperlens.domain.paper import Paper

logger = logging.getLogger(__name__)


class LibraryService:
    def __init__(self, repository: PaperRepository):
        self._repository = repository

    def require_user(self, user_id: int) -> User:
        user = self._repository.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    # ------------------------------------------------------------ saved papers

    def _require_paper(self, paper_id: int) -> Paper:
        paper = self._repository.get_paper(paper_id)
        if paper is None:
            raise PaperNotFoundError(paper_id)
        return paper

    def saved_papers(self, user_id: int) -> List[Paper]:
        self.require_user(user_id)
        return self._repository.get_saved_papers(user_id)

    def save_paper(self, user_id: int, paper_id: int) -> SavedPaper:
        """Bookmark a paper. Raises AlreadySavedError for a repeat save."""
        self.require_user(user_id)
        self._require_paper(paper_id)
        saved = self._repository.save_paper(user_id, paper_id)
        logger.info("User %s saved paper %s", user_id, paper_id)
        return saved

    def is_saved(self, user_id: int, paper_id: int) -> bool:
        self.require_user(user_id)
        self._require_paper(paper_id)
        return self._repository.is_saved_paper(user_id, paper_id)

    def remove_saved_paper(self, user_id: int, paper_id: int) -> bool:
        """Drop a bookmark. Removing a pair that is not saved is a no-op."""
        self.require_user(user_id)
        self._require_paper(paper_id)
        return self._repository.remove_saved_paper(user_id, paper_id)

    # -------------------------------------------------------- recent searches

    def recent_searches(self, user_id: int, *, limit: Optional[int] = None) -> List[RecentSearch]:
        self.require_user(user_id)
        return self._repository.get_recent_searches(user_id, limit=limit)

    def record_search(
        self, user_id: int, query: str, filters: Optional[Dict[str, Any]] = None
    ) -> RecentSearch:
        self.require_user(user_id)
        return self._repository.save_recent_search(user_id, query, filters or {})

    def clear_searches(self, user_id: int) -> int:
        self.require_user(user_id)
        removed = self._repository.clear_recent_searches(user_id)
        logger.info("Cleared %d recent searches for user %s", removed, user_id)
        return removed
