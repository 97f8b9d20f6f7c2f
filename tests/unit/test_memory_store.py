"""
InMemoryPaperStore unit tests: dedup, filtering, sorting, pagination and user records.
"""

from datetime import datetime, timedelta, timezone

import pytest

from paperlens.core.exceptions import AlreadySavedError
from paperlens.domain.library import GeneratedSummary
from paperlens.domain.paper import Domain, Platform
from paperlens.domain.search import SearchFilter
from paperlens.infrastructure.stores.memory_store import InMemoryPaperStore
from paperlens.utils.timeutil import utcnow


@pytest.fixture
def populated_store(memory_store, candidate_factory):
    """Twelve Physics papers with distinct citations plus a few others."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i in range(12):
        memory_store.create_paper(
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
    for i in range(4):
        memory_store.create_paper(
            candidate_factory(
                f"Biology Paper {i}",
                doi=f"10.5555/bio.{i}",
                domain=Domain.BIOLOGY,
                platform=Platform.PUBMED,
                authors=["Rosalind Franklin"],
                journal="Nature Genetics",
                citation_count=i,
                published_date=base + timedelta(days=30 + i),
            )
        )
    return memory_store


class TestCreatePaper:
    def test_assigns_sequential_ids(self, memory_store, candidate_factory):
        first = memory_store.create_paper(candidate_factory("One"))
        second = memory_store.create_paper(candidate_factory("Two"))
        assert (first.id, second.id) == (1, 2)
        assert first.created_at is not None

    def test_duplicate_doi_returns_existing(self, memory_store, candidate_factory):
        original = memory_store.create_paper(candidate_factory("Original", doi="10.1/x"))
        again = memory_store.create_paper(candidate_factory("Different", doi="10.1/X"))
        assert again.id == original.id
        assert memory_store.count_papers() == 1
        assert memory_store.get_paper_by_doi("10.1/x").title == "Original"

    def test_papers_without_doi_are_not_deduplicated(self, memory_store, candidate_factory):
        memory_store.create_paper(candidate_factory("Same"))
        memory_store.create_paper(candidate_factory("Same"))
        assert memory_store.count_papers() == 2

    def test_returned_paper_is_a_copy(self, memory_store, candidate_factory):
        paper = memory_store.create_paper(candidate_factory("Immutable"))
        paper.authors.append("Intruder")
        assert memory_store.get_paper(paper.id).authors == ["Alice Smith"]


class TestSearchPapers:
    def test_physics_by_citations_page_two(self, populated_store):
        f = SearchFilter(domain="Physics", sort_by="citations", page=2, limit=5)
        papers, total = populated_store.search_papers(f)

        everything, _ = populated_store.search_papers(
            SearchFilter(domain="Physics", sort_by="citations", limit=100)
        )
        ranked = sorted(everything, key=lambda p: p.citation_count, reverse=True)
        assert total == 12
        assert [p.id for p in papers] == [p.id for p in ranked[5:10]]

    def test_pages_cover_total_without_overlap(self, populated_store):
        seen = []
        page = 1
        while True:
            papers, total = populated_store.search_papers(SearchFilter(page=page, limit=3))
            assert len(papers) <= 3
            if not papers:
                break
            seen.extend(p.id for p in papers)
            page += 1
        assert len(seen) == total == 16
        assert len(set(seen)) == total

    def test_filter_composition_is_intersection(self, populated_store):
        combined, _ = populated_store.search_papers(
            SearchFilter(domain="physics", platform="ArXiv", author="curie", limit=100)
        )
        by_domain, _ = populated_store.search_papers(SearchFilter(domain="Physics", limit=100))
        by_platform, _ = populated_store.search_papers(SearchFilter(platform="arxiv", limit=100))
        by_author, _ = populated_store.search_papers(SearchFilter(author="Curie", limit=100))

        expected = {p.id for p in by_domain} & {p.id for p in by_platform} & {p.id for p in by_author}
        assert {p.id for p in combined} == expected
        assert expected

    def test_date_desc_reversed_equals_date_asc(self, populated_store):
        desc, _ = populated_store.search_papers(SearchFilter(sort_by="date_desc", limit=100))
        asc, _ = populated_store.search_papers(SearchFilter(sort_by="date_asc", limit=100))
        assert [p.id for p in reversed(desc)] == [p.id for p in asc]

    def test_text_query_matches_title_abstract_and_authors(self, populated_store):
        by_title, _ = populated_store.search_papers(SearchFilter(query="biology paper", limit=100))
        by_author, _ = populated_store.search_papers(SearchFilter(query="FRANKLIN", limit=100))
        assert len(by_title) == 4
        assert {p.id for p in by_author} == {p.id for p in by_title}

    def test_journal_substring(self, populated_store):
        papers, total = populated_store.search_papers(SearchFilter(journal="genetics"))
        assert total == 4
        assert all(p.journal == "Nature Genetics" for p in papers)

    def test_relevance_is_insertion_order(self, populated_store):
        papers, _ = populated_store.search_papers(SearchFilter(limit=5))
        assert [p.id for p in papers] == [1, 2, 3, 4, 5]

    def test_relative_date_range(self, memory_store, candidate_factory):
        now = utcnow()
        memory_store.create_paper(candidate_factory("Fresh", published_date=now - timedelta(hours=2)))
        memory_store.create_paper(candidate_factory("Week", published_date=now - timedelta(days=5)))
        memory_store.create_paper(candidate_factory("Old", published_date=now - timedelta(days=40)))

        day, _ = memory_store.search_papers(SearchFilter(date_range="24h"))
        week, _ = memory_store.search_papers(SearchFilter(date_range="7d"))
        month, _ = memory_store.search_papers(SearchFilter(date_range="1m"))
        assert [p.title for p in day] == ["Fresh"]
        assert [p.title for p in week] == ["Fresh", "Week"]
        assert [p.title for p in month] == ["Fresh", "Week"]

    def test_custom_date_range_is_inclusive(self, populated_store):
        papers, total = populated_store.search_papers(
            SearchFilter(
                date_range="custom", custom_start_date="2024-01-02", custom_end_date="2024-01-04"
            )
        )
        assert total == 3
        assert [p.title for p in papers] == ["Physics Paper 1", "Physics Paper 2", "Physics Paper 3"]

    def test_page_beyond_end_is_empty(self, populated_store):
        papers, total = populated_store.search_papers(SearchFilter(page=50))
        assert papers == []
        assert total == 16


class TestSavedPapers:
    def test_save_and_list_newest_first(self, memory_store, candidate_factory):
        user = memory_store.create_user(username="reader")
        a = memory_store.create_paper(candidate_factory("A"))
        b = memory_store.create_paper(candidate_factory("B"))
        memory_store.save_paper(user.id, a.id)
        memory_store.save_paper(user.id, b.id)

        assert [p.id for p in memory_store.get_saved_papers(user.id)] == [b.id, a.id]
        assert memory_store.is_saved_paper(user.id, a.id)

    def test_double_save_raises(self, memory_store, candidate_factory):
        user = memory_store.create_user(username="reader")
        paper = memory_store.create_paper(candidate_factory("A"))
        memory_store.save_paper(user.id, paper.id)
        with pytest.raises(AlreadySavedError):
            memory_store.save_paper(user.id, paper.id)

    def test_remove(self, memory_store, candidate_factory):
        user = memory_store.create_user(username="reader")
        paper = memory_store.create_paper(candidate_factory("A"))
        memory_store.save_paper(user.id, paper.id)

        assert memory_store.remove_saved_paper(user.id, paper.id) is True
        assert memory_store.remove_saved_paper(user.id, paper.id) is False
        assert not memory_store.is_saved_paper(user.id, paper.id)


class TestSummaries:
    def test_update_in_place(self, memory_store, candidate_factory):
        paper = memory_store.create_paper(candidate_factory("A"))
        created = memory_store.create_summary(paper.id, GeneratedSummary("s", "m", "d"))
        updated = memory_store.update_summary(paper.id, GeneratedSummary("s2", "m2", "d2"))

        assert updated.id == created.id
        assert updated.created_at == created.created_at
        assert updated.updated_at > created.updated_at
        assert updated.short_summary == "s2"

    def test_update_missing_returns_none(self, memory_store):
        assert memory_store.update_summary(99, GeneratedSummary("s", "m", "d")) is None

    def test_create_twice_keeps_first(self, memory_store, candidate_factory):
        paper = memory_store.create_paper(candidate_factory("A"))
        first = memory_store.create_summary(paper.id, GeneratedSummary("first"))
        second = memory_store.create_summary(paper.id, GeneratedSummary("second"))
        assert second.id == first.id
        assert memory_store.get_summary(paper.id).short_summary == "first"


class TestRecentSearches:
    def test_newest_first_with_limit_and_clear(self):
        store = InMemoryPaperStore()
        user = store.create_user(username="reader")
        for query in ("one", "two", "three"):
            store.save_recent_search(user.id, query, {"domain": "Physics"})

        assert [s.query for s in store.get_recent_searches(user.id)] == ["three", "two", "one"]
        assert [s.query for s in store.get_recent_searches(user.id, limit=2)] == ["three", "two"]
        assert store.get_recent_searches(user.id)[0].filters == {"domain": "Physics"}

        assert store.clear_recent_searches(user.id) == 3
        assert store.get_recent_searches(user.id) == []
