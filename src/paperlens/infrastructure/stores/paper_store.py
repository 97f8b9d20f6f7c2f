from __future__ import annotations

from contextlib import contextmanager
from datetime import timedelta
from typing import Any, Dict, Iterator, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from paperlens.core.exceptions import AlreadySavedError, StoreError
from paperlens.domain.library import GeneratedSummary, RecentSearch, SavedPaper, Summary, User
from paperlens.domain.paper import Domain, Paper, PaperCandidate, Platform
from paperlens.domain.paper_identity import normalize_doi
from paperlens.domain.search import SearchFilter, SortBy
from paperlens.infrastructure.stores.models import (
    Base,
    PaperAuthorModel,
    PaperModel,
    RecentSearchModel,
    SavedPaperModel,
    SummaryModel,
    UserModel,
)
from paperlens.infrastructure.stores.sqlalchemy_db import SessionProvider, get_db_url
from paperlens.utils.timeutil import as_utc, utcnow


def _like(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _paper_from_row(row: PaperModel) -> Paper:
    return Paper(
        id=int(row.id),
        title=row.title,
        url=row.url or "",
        platform=Platform.parse(row.platform) or Platform.OTHER,
        domain=Domain.parse(row.domain),
        published_date=as_utc(row.published_at),
        created_at=as_utc(row.created_at),
        authors=row.get_authors(),
        abstract=row.abstract or "",
        doi=row.doi,
        pdf_url=row.pdf_url,
        journal=row.journal,
        page_count=row.page_count,
        view_count=int(row.view_count or 0),
        citation_count=int(row.citation_count or 0),
    )


def _summary_from_row(row: SummaryModel) -> Summary:
    return Summary(
        id=int(row.id),
        paper_id=int(row.paper_id),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
        short_summary=row.short_summary,
        medium_summary=row.medium_summary,
        detailed_summary=row.detailed_summary,
    )


def _search_from_row(row: RecentSearchModel) -> RecentSearch:
    return RecentSearch(
        id=int(row.id),
        user_id=int(row.user_id),
        query=row.query or "",
        created_at=as_utc(row.created_at),
        filters=row.get_filters(),
    )


class SqlAlchemyPaperStore:
    """
    PaperRepository on a relational database.

    DOI uniqueness is enforced by a unique index; a concurrent insert that
    loses the race resolves to the row that won.
    """

    def __init__(self, db_url: Optional[str] = None, *, auto_create_schema: bool = True):
        self.db_url = db_url or get_db_url()
        self._provider = SessionProvider(self.db_url)
        if auto_create_schema:
            Base.metadata.create_all(self._provider.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self._provider.session() as session:
                yield session
        except SQLAlchemyError as exc:
            raise StoreError(f"Database error: {exc.__class__.__name__}") from exc

    # ------------------------------------------------------------------ users

    def create_user(self, *, username: str, email: Optional[str] = None) -> User:
        with self._session() as session:
            row = UserModel(username=username, email=email, created_at=utcnow())
            session.add(row)
            session.commit()
            return User(id=row.id, username=row.username, email=row.email, created_at=as_utc(row.created_at))

    def get_user(self, user_id: int) -> Optional[User]:
        with self._session() as session:
            row = session.get(UserModel, user_id)
            if row is None:
                return None
            return User(id=row.id, username=row.username, email=row.email, created_at=as_utc(row.created_at))

    # ----------------------------------------------------------------- papers

    def create_paper(self, candidate: PaperCandidate) -> Paper:
        if candidate.doi:
            existing = self.get_paper_by_doi(candidate.doi)
            if existing is not None:
                return existing

        row = PaperModel(
            title=candidate.title,
            abstract=candidate.abstract,
            doi=candidate.doi,
            url=candidate.url,
            pdf_url=candidate.pdf_url,
            platform=candidate.platform.value,
            domain=candidate.domain.value,
            journal=candidate.journal,
            published_at=candidate.published_date,
            page_count=candidate.page_count,
            view_count=candidate.view_count,
            citation_count=candidate.citation_count,
            created_at=utcnow(),
        )
        row.set_authors(candidate.authors)
        try:
            with self._provider.session() as session:
                session.add(row)
                session.commit()
                return _paper_from_row(row)
        except IntegrityError:
            if candidate.doi:
                existing = self.get_paper_by_doi(candidate.doi)
                if existing is not None:
                    return existing
            raise StoreError("Paper could not be stored")
        except SQLAlchemyError as exc:
            raise StoreError(f"Database error: {exc.__class__.__name__}") from exc

    def get_paper(self, paper_id: int) -> Optional[Paper]:
        with self._session() as session:
            row = session.get(PaperModel, paper_id)
            return _paper_from_row(row) if row else None

    def get_paper_by_doi(self, doi: str) -> Optional[Paper]:
        key = normalize_doi(doi)
        if not key:
            return None
        with self._session() as session:
            row = session.execute(select(PaperModel).where(PaperModel.doi == key)).scalar_one_or_none()
            return _paper_from_row(row) if row else None

    def search_papers(self, search_filter: SearchFilter) -> Tuple[List[Paper], int]:
        """Filter, sort and paginate. Returns (page, total before pagination)."""
        stmt = select(PaperModel)

        if search_filter.query:
            pattern = _like(search_filter.query)
            stmt = stmt.where(
                or_(
                    PaperModel.title.ilike(pattern, escape="\\"),
                    PaperModel.abstract.ilike(pattern, escape="\\"),
                    PaperModel.author_rows.any(PaperAuthorModel.name.ilike(pattern, escape="\\")),
                )
            )
        if search_filter.platform is not None:
            stmt = stmt.where(PaperModel.platform == search_filter.platform.value)
        if search_filter.domain:
            stmt = stmt.where(func.lower(PaperModel.domain) == search_filter.domain.lower())
        if search_filter.author:
            pattern = _like(search_filter.author)
            stmt = stmt.where(
                PaperModel.author_rows.any(PaperAuthorModel.name.ilike(pattern, escape="\\"))
            )
        if search_filter.journal:
            stmt = stmt.where(PaperModel.journal.ilike(_like(search_filter.journal), escape="\\"))

        window = search_filter.date_window()
        if window:
            start, end = window
            stmt = stmt.where(PaperModel.published_at >= start, PaperModel.published_at <= end)

        if search_filter.sort_by is SortBy.CITATIONS:
            stmt = stmt.order_by(PaperModel.citation_count.desc(), PaperModel.id.asc())
        elif search_filter.sort_by is SortBy.DATE_DESC:
            stmt = stmt.order_by(PaperModel.published_at.desc(), PaperModel.id.asc())
        elif search_filter.sort_by is SortBy.DATE_ASC:
            stmt = stmt.order_by(PaperModel.published_at.asc(), PaperModel.id.asc())
        else:
            stmt = stmt.order_by(PaperModel.id.asc())

        with self._session() as session:
            count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
            total = session.execute(count_stmt).scalar() or 0
            rows = (
                session.execute(stmt.offset(search_filter.skip).limit(search_filter.limit))
                .scalars()
                .all()
            )
            return [_paper_from_row(r) for r in rows], int(total)

    def count_papers(self) -> int:
        with self._session() as session:
            return int(session.execute(select(func.count(PaperModel.id))).scalar() or 0)

    # ------------------------------------------------------------ saved papers

    def get_saved_papers(self, user_id: int) -> List[Paper]:
        with self._session() as session:
            rows = session.execute(
                select(PaperModel)
                .join(SavedPaperModel, SavedPaperModel.paper_id == PaperModel.id)
                .where(SavedPaperModel.user_id == user_id)
                .order_by(SavedPaperModel.created_at.desc(), SavedPaperModel.id.desc())
            ).scalars().all()
            return [_paper_from_row(r) for r in rows]

    def save_paper(self, user_id: int, paper_id: int) -> SavedPaper:
        if self.is_saved_paper(user_id, paper_id):
            raise AlreadySavedError(user_id, paper_id)
        row = SavedPaperModel(user_id=user_id, paper_id=paper_id, created_at=utcnow())
        try:
            with self._provider.session() as session:
                session.add(row)
                session.commit()
        except IntegrityError as exc:
            raise AlreadySavedError(user_id, paper_id) from exc
        except SQLAlchemyError as exc:
            raise StoreError(f"Database error: {exc.__class__.__name__}") from exc
        return SavedPaper(
            id=row.id, user_id=row.user_id, paper_id=row.paper_id, created_at=as_utc(row.created_at)
        )

    def remove_saved_paper(self, user_id: int, paper_id: int) -> bool:
        with self._session() as session:
            result = session.execute(
                delete(SavedPaperModel).where(
                    SavedPaperModel.user_id == user_id,
                    SavedPaperModel.paper_id == paper_id,
                )
            )
            session.commit()
            return (result.rowcount or 0) > 0

    def is_saved_paper(self, user_id: int, paper_id: int) -> bool:
        with self._session() as session:
            found = session.execute(
                select(SavedPaperModel.id).where(
                    SavedPaperModel.user_id == user_id,
                    SavedPaperModel.paper_id == paper_id,
                )
            ).first()
            return found is not None

    # -------------------------------------------------------------- summaries

    def get_summary(self, paper_id: int) -> Optional[Summary]:
        with self._session() as session:
            row = session.execute(
                select(SummaryModel).where(SummaryModel.paper_id == paper_id)
            ).scalar_one_or_none()
            return _summary_from_row(row) if row else None

    def create_summary(self, paper_id: int, summary: GeneratedSummary) -> Summary:
        existing = self.get_summary(paper_id)
        if existing is not None:
            return existing
        now = utcnow()
        row = SummaryModel(
            paper_id=paper_id,
            short_summary=summary.short_summary or None,
            medium_summary=summary.medium_summary or None,
            detailed_summary=summary.detailed_summary or None,
            created_at=now,
            updated_at=now,
        )
        try:
            with self._provider.session() as session:
                session.add(row)
                session.commit()
                return _summary_from_row(row)
        except IntegrityError:
            existing = self.get_summary(paper_id)
            if existing is not None:
                return existing
            raise StoreError("Summary could not be stored")
        except SQLAlchemyError as exc:
            raise StoreError(f"Database error: {exc.__class__.__name__}") from exc

    def update_summary(self, paper_id: int, summary: GeneratedSummary) -> Optional[Summary]:
        with self._session() as session:
            row = session.execute(
                select(SummaryModel).where(SummaryModel.paper_id == paper_id)
            ).scalar_one_or_none()
            if row is None:
                return None
            row.short_summary = summary.short_summary or None
            row.medium_summary = summary.medium_summary or None
            row.detailed_summary = summary.detailed_summary or None
            previous = as_utc(row.updated_at)
            row.updated_at = max(utcnow(), previous + timedelta(microseconds=1))
            session.commit()
            return _summary_from_row(row)

    # -------------------------------------------------------- recent searches

    def get_recent_searches(self, user_id: int, *, limit: Optional[int] = None) -> List[RecentSearch]:
        stmt = (
            select(RecentSearchModel)
            .where(RecentSearchModel.user_id == user_id)
            .order_by(RecentSearchModel.created_at.desc(), RecentSearchModel.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(max(0, limit))
        with self._session() as session:
            return [_search_from_row(r) for r in session.execute(stmt).scalars().all()]

    def save_recent_search(
        self, user_id: int, query: str, filters: Optional[Dict[str, Any]] = None
    ) -> RecentSearch:
        with self._session() as session:
            row = RecentSearchModel(user_id=user_id, query=query or "", created_at=utcnow())
            row.set_filters(filters or {})
            session.add(row)
            session.commit()
            return _search_from_row(row)

    def clear_recent_searches(self, user_id: int) -> int:
        with self._session() as session:
            result = session.execute(
                delete(RecentSearchModel).where(RecentSearchModel.user_id == user_id)
            )
            session.commit()
            return int(result.rowcount or 0)

    def close(self) -> None:
        self._provider.dispose()
