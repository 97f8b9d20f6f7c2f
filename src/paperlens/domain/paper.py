"""
Paper domain models.

- Platform: Enum of supported paper sources
- Domain: Enum of research fields
- PaperCandidate: Unified paper format produced by a source adapter
- Paper: A candidate persisted by the store (id + created_at assigned)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from paperlens.domain.paper_identity import normalize_doi
from paperlens.utils.timeutil import as_utc, utcnow


class Platform(str, Enum):
    """Academic platforms a paper can come from."""

    ARXIV = "ArXiv"
    IEEE = "IEEE Xplore"
    SPRINGER = "Springer"
    PUBMED = "PubMed"
    SCIENCEDIRECT = "ScienceDirect"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: Any) -> Optional["Platform"]:
        """Case-insensitive lookup by value or member name."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if not text:
            return None
        for member in cls:
            if text in (member.value.lower(), member.name.lower()):
                return member
        return None


class Domain(str, Enum):
    """Research fields used for classification and filtering."""

    ARTIFICIAL_INTELLIGENCE = "Artificial Intelligence"
    MEDICINE = "Medicine"
    PHYSICS = "Physics"
    CHEMISTRY = "Chemistry"
    BIOLOGY = "Biology"
    COMPUTER_SCIENCE = "Computer Science"
    MATHEMATICS = "Mathematics"
    ENGINEERING = "Engineering"
    ECONOMICS = "Economics"
    PSYCHOLOGY = "Psychology"
    SOCIAL_SCIENCES = "Social Sciences"
    ENVIRONMENTAL_SCIENCE = "Environmental Science"
    MATERIALS_SCIENCE = "Materials Science"
    ASTRONOMY = "Astronomy"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: Any) -> "Domain":
        """Case-insensitive lookup; anything unknown becomes OTHER."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if text == member.value.lower():
                return member
        return cls.OTHER


def _non_negative(value: Any, default: Optional[int] = 0) -> Optional[int]:
    if value is None:
        return default
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return default


@dataclass
class PaperCandidate:
    """
    Paper as returned by a source adapter, before it is persisted.

    Required fields: title, url, platform
    Counters default to 0 so downstream sorting never sees None.
    """

    title: str
    url: str
    platform: Platform
    published_date: datetime = field(default_factory=utcnow)
    authors: List[str] = field(default_factory=list)
    abstract: str = ""
    doi: Optional[str] = None
    pdf_url: Optional[str] = None
    journal: Optional[str] = None
    domain: Domain = Domain.OTHER
    page_count: Optional[int] = 0
    view_count: int = 0
    citation_count: int = 0

    def __post_init__(self) -> None:
        self.title = (self.title or "").strip() or "Untitled"
        self.url = (self.url or "").strip()
        self.platform = Platform.parse(self.platform) or Platform.OTHER
        self.domain = Domain.parse(self.domain)
        self.published_date = as_utc(self.published_date) or utcnow()
        self.authors = [str(a).strip() for a in (self.authors or []) if str(a or "").strip()]
        self.abstract = (self.abstract or "").strip()
        self.doi = normalize_doi(self.doi)
        self.pdf_url = (self.pdf_url or "").strip() or None
        self.journal = (self.journal or "").strip() or None
        self.page_count = _non_negative(self.page_count, default=None)
        self.view_count = _non_negative(self.view_count) or 0
        self.citation_count = _non_negative(self.citation_count) or 0


@dataclass
class Paper:
    """Persisted paper. Immutable once stored."""

    id: int
    title: str
    url: str
    platform: Platform
    domain: Domain
    published_date: datetime
    created_at: datetime
    authors: List[str] = field(default_factory=list)
    abstract: str = ""
    doi: Optional[str] = None
    pdf_url: Optional[str] = None
    journal: Optional[str] = None
    page_count: Optional[int] = None
    view_count: int = 0
    citation_count: int = 0

    @classmethod
    def from_candidate(
        cls, candidate: PaperCandidate, *, paper_id: int, created_at: Optional[datetime] = None
    ) -> "Paper":
        return cls(
            id=paper_id,
            title=candidate.title,
            url=candidate.url,
            platform=candidate.platform,
            domain=candidate.domain,
            published_date=candidate.published_date,
            created_at=as_utc(created_at) or utcnow(),
            authors=list(candidate.authors),
            abstract=candidate.abstract,
            doi=candidate.doi,
            pdf_url=candidate.pdf_url,
            journal=candidate.journal,
            page_count=candidate.page_count,
            view_count=candidate.view_count,
            citation_count=candidate.citation_count,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["platform"] = self.platform.value
        data["domain"] = self.domain.value
        data["published_date"] = self.published_date.isoformat()
        data["created_at"] = self.created_at.isoformat()
        return data
