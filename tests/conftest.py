# tests/conftest.py
"""
Pytest configuration and shared fixtures.
Adds src to sys.path so `import paperlens` works without installing.
"""

import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

import pytest

project_root = Path(__file__).parent.parent
src_root = project_root / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

# Route file logs away from the working tree during test runs.
os.environ.setdefault("PAPERLENS_LOG_DIR", tempfile.mkdtemp(prefix="paperlens-logs-"))
os.environ.setdefault("PAPERLENS_STORE", "memory")

from paperlens.domain.paper import Domain, PaperCandidate, Platform  # noqa: E402
from paperlens.domain.search import SearchFilter  # noqa: E402
from paperlens.infrastructure.stores.memory_store import InMemoryPaperStore  # noqa: E402

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_candidate(
    title: str = "Test Paper",
    *,
    doi: Optional[str] = None,
    platform: Platform = Platform.ARXIV,
    domain: Domain = Domain.COMPUTER_SCIENCE,
    authors: Optional[List[str]] = None,
    abstract: str = "A test abstract.",
    journal: Optional[str] = None,
    published_date: Optional[datetime] = None,
    citation_count: int = 0,
    page_count: int = 10,
) -> PaperCandidate:
    return PaperCandidate(
        title=title,
        url=f"https://example.com/{title.replace(' ', '-').lower()}",
        platform=platform,
        domain=domain,
        authors=authors if authors is not None else ["Alice Smith"],
        abstract=abstract,
        doi=doi,
        journal=journal,
        published_date=published_date or NOW - timedelta(days=3),
        citation_count=citation_count,
        page_count=page_count,
    )


class FakeAdapter:
    """PaperSourcePort test double: returns a fixed batch or raises."""

    def __init__(self, platform: Platform, papers=None, error: Optional[Exception] = None):
        self._platform = platform
        self.papers = list(papers or [])
        self.error = error
        self.calls: List[SearchFilter] = []
        self.closed = False

    @property
    def platform(self) -> Platform:
        return self._platform

    async def fetch(self, search_filter: SearchFilter) -> List[PaperCandidate]:
        self.calls.append(search_filter)
        if self.error is not None:
            raise self.error
        return list(self.papers)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def memory_store():
    store = InMemoryPaperStore()
    yield store
    store.close()


@pytest.fixture
def candidate_factory():
    return make_candidate


@pytest.fixture
def fake_adapter_cls():
    return FakeAdapter


@pytest.fixture
def fixed_now():
    return NOW
