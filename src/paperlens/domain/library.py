"""User-owned records: users, bookmarks, summaries and search history."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class User:
    id: int
    username: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class SavedPaper:
    id: int
    user_id: int
    paper_id: int
    created_at: datetime


@dataclass
class GeneratedSummary:
    """Three summary tiers as produced by the generator (not yet persisted)."""

    short_summary: Optional[str] = None
    medium_summary: Optional[str] = None
    detailed_summary: Optional[str] = None


@dataclass
class Summary:
    """Persisted summary; one live record per paper."""

    id: int
    paper_id: int
    created_at: datetime
    updated_at: datetime
    short_summary: Optional[str] = None
    medium_summary: Optional[str] = None
    detailed_summary: Optional[str] = None


@dataclass
class RecentSearch:
    id: int
    user_id: int
    query: str
    created_at: datetime
    filters: Dict[str, Any] = field(default_factory=dict)
