"""
SqlAlchemyPaperStore integration tests.

Runs against a temporary SQLite database: paper dedup, search, the user
library and demo seeding.
"""

from datetime import datetime, timedelta, timezone

import pytest

from paperlens.core.exceptions import AlreadySavedError
from paperlens.domain.library import GeneratedSummary
from paperlens.domain.paper import Domain, Platform
from paperlens.domain.search import SearchFilter
from paperlens.infrastructure.stores.paper_store import SqlAlchemyPaperStore
from paperlens.infrastructure.stores.seed import (
    DEMO_USER_ID,
    SAMPLE_QUERIES,
    ensure_demo_user,
    seed_demo_data,
)
from paperlens.utils.timeutil import utcnow


@pytest.fixture
def paper_store(tmp_path):
    """Create a store with a temporary SQLite database."""
    db_url = f"sqlite:///{tmp_path / 'test_papers.db'}"
    store = SqlAlchemyPaperStore(db_url=db_url, auto_create_schema=True)
    yield store
    store.close()


@pytest.fixture
def user(paper_store):
    return ensure_demo_user(paper_store)


@pytest.fixture
def physics_store(paper_store, candidate_factory):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i in range(12):
        paper_store.create_paper(
            candidate_factory(
                f"Physics Paper {i}",
                doi=f"10.5555/phys.{i}",
                domain=Domain.PHYSICS,
                platform=Platform.ARXIV if i % 2 == 0 else Platform.SPRINGER,
                authors=["Marie Curie"] if i % 3 == 0 else ["Niels Bohr"],
                citation_count=(i * 7) % 13 + i * 20,
                published_date=base + timedelta(days=i),
            )
        )
    paper_store.create_paper(
        candidate_factory(
            "Gene Regulation",
            doi="10.5555/bio.0",
            domain=Domain.BIOLOGY,
            platform=Platform.PUBMED,
            journal="Nature Genetics",
            abstract="Studies 100% of known_promoters.",
            published_date=base + timedelta(days=40),
        )
    )
    return paper_store


class TestCreatePaper:
    """Paper insertion and DOI deduplication."""

    def test_round_trips_fields(self, paper_store, candidate_factory):
        """Stored fields come back unchanged, with timezone-aware dates."""
        published = datetime(2023, 5, 1, 8, 30, tzinfo=timezone.utc)
        paper = paper_store.create_paper(
            candidate_factory(
                "Quantum Widgets",
                doi="10.1000/QW",
                authors=["Ada Lovelace", "Zoë Ångström"],
                journal="Widget Letters",
                published_date=published,
                citation_count=7,
            )
        )
        loaded = paper_store.get_paper(paper.id)
        assert loaded.title == "Quantum Widgets"
        assert loaded.doi == "10.1000/qw"
        assert loaded.authors == ["Ada Lovelace", "Zoë Ångström"]
        assert loaded.published_date == published
        assert loaded.published_date.tzinfo is not None
        assert loaded.citation_count == 7
        assert loaded.platform is Platform.ARXIV

    def test_duplicate_doi_returns_existing(self, paper_store, candidate_factory):
        """A second insert with the same DOI (any case) returns the first row."""
        original = paper_store.create_paper(candidate_factory("Original", doi="10.1/x"))
        again = paper_store.create_paper(candidate_factory("Different", doi="10.1/X"))
        assert again.id == original.id
        assert again.title == "Original"
        assert paper_store.count_papers() == 1

    def test_papers_without_doi_are_kept_apart(self, paper_store, candidate_factory):
        paper_store.create_paper(candidate_factory("Same"))
        paper_store.create_paper(candidate_factory("Same"))
        assert paper_store.count_papers() == 2

    def test_lookup_by_doi_normalizes(self, paper_store, candidate_factory):
        paper = paper_store.create_paper(candidate_factory("Lookup", doi="10.2000/abc"))
        assert paper_store.get_paper_by_doi("https://doi.org/10.2000/ABC").id == paper.id
        assert paper_store.get_paper_by_doi("10.2000/missing") is None
        assert paper_store.get_paper(9999) is None


class TestSearchPapers:
    """Filtering, sorting and pagination in SQL."""

    def test_physics_by_citations_page_two(self, physics_store):
        """Page 2 of the citation ranking holds ranks 6-10."""
        papers, total = physics_store.search_papers(
            SearchFilter(domain="Physics", sort_by="citations", page=2, limit=5)
        )
        everything, _ = physics_store.search_papers(SearchFilter(domain="physics", limit=100))
        ranked = sorted(everything, key=lambda p: p.citation_count, reverse=True)

        assert total == 12
        assert [p.id for p in papers] == [p.id for p in ranked[5:10]]

    def test_filters_compose(self, physics_store):
        papers, total = physics_store.search_papers(
            SearchFilter(domain="Physics", platform="ArXiv", author="curie")
        )
        assert total == 2
        assert {p.title for p in papers} == {"Physics Paper 0", "Physics Paper 6"}

    def test_query_matches_title_abstract_and_authors(self, physics_store):
        assert physics_store.search_papers(SearchFilter(query="gene regulation"))[1] == 1
        assert physics_store.search_papers(SearchFilter(query="BOHR"))[1] == 8

    def test_like_wildcards_are_literal(self, physics_store):
        assert physics_store.search_papers(SearchFilter(query="100%"))[1] == 1
        assert physics_store.search_papers(SearchFilter(query="known_promoters"))[1] == 1
        assert physics_store.search_papers(SearchFilter(query="known%promoters"))[1] == 0
        assert physics_store.search_papers(SearchFilter(query="Paper _"))[1] == 0

    def test_journal_substring(self, physics_store):
        papers, total = physics_store.search_papers(SearchFilter(journal="genetics"))
        assert total == 1
        assert papers[0].title == "Gene Regulation"

    def test_date_sorts(self, physics_store):
        newest, _ = physics_store.search_papers(SearchFilter(sort_by="date_desc", limit=2))
        oldest, _ = physics_store.search_papers(SearchFilter(sort_by="date_asc", limit=2))
        assert [p.title for p in newest] == ["Gene Regulation", "Physics Paper 11"]
        assert [p.title for p in oldest] == ["Physics Paper 0", "Physics Paper 1"]

    def test_custom_date_range_is_inclusive(self, physics_store):
        papers, total = physics_store.search_papers(
            SearchFilter(
                date_range="custom",
                custom_start_date="2024-01-03",
                custom_end_date="2024-01-05",
                sort_by="date_asc",
            )
        )
        assert total == 3
        assert [p.title for p in papers] == ["Physics Paper 2", "Physics Paper 3", "Physics Paper 4"]

    def test_relative_range_excludes_old_papers(self, physics_store, candidate_factory):
        physics_store.create_paper(
            candidate_factory("Fresh Result", published_date=utcnow() - timedelta(days=2))
        )
        papers, total = physics_store.search_papers(SearchFilter(date_range="7d"))
        assert total == 1
        assert papers[0].title == "Fresh Result"

    def test_page_past_end_is_empty(self, physics_store):
        papers, total = physics_store.search_papers(SearchFilter(page=5, limit=10))
        assert papers == []
        assert total == 13


class TestSavedPapers:
    """Bookmarks per user."""

    def test_save_list_remove(self, paper_store, user, candidate_factory):
        first = paper_store.create_paper(candidate_factory("First"))
        second = paper_store.create_paper(candidate_factory("Second"))

        saved = paper_store.save_paper(user.id, first.id)
        paper_store.save_paper(user.id, second.id)
        assert saved.user_id == user.id
        assert saved.paper_id == first.id

        assert [p.title for p in paper_store.get_saved_papers(user.id)] == ["Second", "First"]
        assert paper_store.is_saved_paper(user.id, first.id)

        assert paper_store.remove_saved_paper(user.id, first.id) is True
        assert paper_store.remove_saved_paper(user.id, first.id) is False
        assert not paper_store.is_saved_paper(user.id, first.id)

    def test_duplicate_save_raises(self, paper_store, user, candidate_factory):
        paper = paper_store.create_paper(candidate_factory("Once"))
        paper_store.save_paper(user.id, paper.id)
        with pytest.raises(AlreadySavedError):
            paper_store.save_paper(user.id, paper.id)


class TestSummaries:
    """One live summary per paper."""

    def test_create_is_idempotent(self, paper_store, candidate_factory):
        paper = paper_store.create_paper(candidate_factory("Summarized"))
        first = paper_store.create_summary(paper.id, GeneratedSummary("a", "b", "c"))
        second = paper_store.create_summary(paper.id, GeneratedSummary("x", "y", "z"))
        assert second.id == first.id
        assert second.short_summary == "a"

    def test_update_in_place(self, paper_store, candidate_factory):
        paper = paper_store.create_paper(candidate_factory("Summarized"))
        created = paper_store.create_summary(paper.id, GeneratedSummary("a", "b", "c"))

        updated = paper_store.update_summary(paper.id, GeneratedSummary("x", "y", "z"))
        again = paper_store.update_summary(paper.id, GeneratedSummary("x2", "y2", "z2"))

        assert updated.id == again.id == created.id
        assert again.created_at == created.created_at
        assert created.updated_at < updated.updated_at < again.updated_at
        assert paper_store.get_summary(paper.id).detailed_summary == "z2"

    def test_update_missing_returns_none(self, paper_store):
        assert paper_store.update_summary(404, GeneratedSummary("x", "y", "z")) is None
        assert paper_store.get_summary(404) is None


class TestRecentSearches:
    """Search history per user, newest first."""

    def test_save_list_clear(self, paper_store, user):
        paper_store.save_recent_search(user.id, "qubits", {"platform": "ArXiv"})
        paper_store.save_recent_search(user.id, "proteins")

        searches = paper_store.get_recent_searches(user.id)
        assert [s.query for s in searches] == ["proteins", "qubits"]
        assert searches[1].filters == {"platform": "ArXiv"}
        assert len(paper_store.get_recent_searches(user.id, limit=1)) == 1

        assert paper_store.clear_recent_searches(user.id) == 2
        assert paper_store.get_recent_searches(user.id) == []


class TestSeed:
    """Demo user and sample data."""

    def test_seed_populates_empty_store(self, paper_store):
        assert seed_demo_data(paper_store) == 30
        assert paper_store.count_papers() == 30
        assert paper_store.get_user(DEMO_USER_ID).username == "testuser"

        summarized = [pid for pid in range(1, 31) if paper_store.get_summary(pid) is not None]
        assert len(summarized) == 10

        queries = {s.query for s in paper_store.get_recent_searches(DEMO_USER_ID)}
        assert queries == set(SAMPLE_QUERIES)

    def test_seed_is_skipped_when_papers_exist(self, paper_store, candidate_factory):
        paper_store.create_paper(candidate_factory("Existing"))
        assert seed_demo_data(paper_store) == 0
        assert paper_store.count_papers() == 1
        assert paper_store.get_user(DEMO_USER_ID) is not None


class TestMemoryParity:
    """The SQL filters agree with the in-memory reference implementation."""

    @pytest.fixture
    def both_stores(self, paper_store, memory_store, candidate_factory):
        for store in (paper_store, memory_store):
            store.create_paper(candidate_factory("First", authors=["Ann Lee", "Bo Kim"]))
            store.create_paper(candidate_factory("Second", authors=["Cy Ode"]))
        return paper_store, memory_store

    @pytest.mark.parametrize(
        "criteria",
        [
            {"query": '"'},
            {"query": '", "'},
            {"query": "lee, bo"},
            {"query": "["},
            {"author": '"'},
            {"author": "ee\", \"b"},
            {"author": "kim"},
            {"query": "cy ode"},
        ],
    )
    def test_author_matching_is_per_name(self, both_stores, criteria):
        sql_store, memory_store = both_stores
        sql_papers, sql_total = sql_store.search_papers(SearchFilter(**criteria))
        mem_papers, mem_total = memory_store.search_papers(SearchFilter(**criteria))

        assert sql_total == mem_total
        assert [p.title for p in sql_papers] == [p.title for p in mem_papers]

    def test_json_punctuation_never_matches(self, both_stores):
        sql_store, _ = both_stores
        assert sql_store.search_papers(SearchFilter(query='"'))[1] == 0
        assert sql_store.search_papers(SearchFilter(author='", "'))[1] == 0
        assert sql_store.search_papers(SearchFilter(author="bo kim"))[1] == 1

    def test_relative_range_excludes_future_dates(self, paper_store, memory_store, candidate_factory):
        now = utcnow()
        for store in (paper_store, memory_store):
            store.create_paper(candidate_factory("Yesterday", published_date=now - timedelta(days=1)))
            store.create_paper(candidate_factory("Next Year", published_date=now + timedelta(days=365)))

        for store in (paper_store, memory_store):
            papers, total = store.search_papers(SearchFilter(date_range="7d"))
            assert total == 1
            assert papers[0].title == "Yesterday"
