from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(128), unique=True)
    email: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class PaperModel(Base):
    __tablename__ = "papers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text)
    authors_json: Mapped[str] = mapped_column(Text, default="[]")
    abstract: Mapped[str] = mapped_column(Text, default="")

    # Unique index: one paper per normalized DOI. NULLs are not compared.
    doi: Mapped[Optional[str]] = mapped_column(String(256), nullable=True, unique=True)
    url: Mapped[str] = mapped_column(Text, default="")
    pdf_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    platform: Mapped[str] = mapped_column(String(32), index=True)
    domain: Mapped[str] = mapped_column(String(64), index=True, default="Other")
    journal: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    page_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    view_count: Mapped[int] = mapped_column(Integer, default=0)
    citation_count: Mapped[int] = mapped_column(Integer, default=0, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    author_rows = relationship(
        "PaperAuthorModel",
        back_populates="paper",
        cascade="all, delete-orphan",
        order_by="PaperAuthorModel.position",
    )

    def set_authors(self, values: List[str]) -> None:
        names = [str(v) for v in (values or [])]
        self.authors_json = json.dumps(names, ensure_ascii=False)
        self.author_rows = [
            PaperAuthorModel(position=i, name=name) for i, name in enumerate(names)
        ]

    def get_authors(self) -> List[str]:
        try:
            data = json.loads(self.authors_json or "[]")
        except Exception:
            return []
        return [str(v) for v in data] if isinstance(data, list) else []


class PaperAuthorModel(Base):
    """One author name per row; author filters match names individually."""

    __tablename__ = "paper_authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    paper_id: Mapped[int] = mapped_column(Integer, ForeignKey("papers.id"), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(Text, default="")

    paper = relationship("PaperModel", back_populates="author_rows")


class SavedPaperModel(Base):
    __tablename__ = "saved_papers"
    __table_args__ = (UniqueConstraint("user_id", "paper_id", name="uq_saved_papers_user_paper"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    paper_id: Mapped[int] = mapped_column(Integer, ForeignKey("papers.id"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class SummaryModel(Base):
    __tablename__ = "summaries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    paper_id: Mapped[int] = mapped_column(Integer, ForeignKey("papers.id"), unique=True)
    short_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    medium_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    detailed_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class RecentSearchModel(Base):
    __tablename__ = "recent_searches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    query: Mapped[str] = mapped_column(Text, default="")
    filters_json: Mapped[str] = mapped_column(Text, default="{}")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)

    def set_filters(self, data: Dict[str, Any]) -> None:
        self.filters_json = json.dumps(data or {}, ensure_ascii=False)

    def get_filters(self) -> Dict[str, Any]:
        try:
            data = json.loads(self.filters_json or "{}")
        except Exception:
            return {}
        return data if isinstance(data, dict) else {}
