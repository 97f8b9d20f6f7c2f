"""
PaperSearchService unit tests with in-memory store and fake adapters.
"""

from unittest.mock import AsyncMock

import pytest

from paperlens.application.services.paper_search_service import (
    ALL_SOURCES_FAILED,
    PaperSearchService,
)
from paperlens.core.exceptions import StoreError, UpstreamError
from paperlens.domain.paper import Platform
from paperlens.domain.search import SearchFilter


def _registry(fake_adapter_cls, candidate_factory, failing=()):
    adapters = {}
    for platform in (
        Platform.ARXIV,
        Platform.IEEE,
        Platform.SPRINGER,
        Platform.PUBMED,
        Platform.SCIENCEDIRECT,
    ):
        if platform in failing:
            adapters[platform] = fake_adapter_cls(platform, error=UpstreamError("boom", source="x"))
        else:
            adapters[platform] = fake_adapter_cls(
                platform,
                papers=[
                    candidate_factory(
                        f"{platform.value} result",
                        doi=f"10.9999/{platform.name.lower()}",
                        platform=platform,
                    )
                ],
            )
    return adapters


class TestSearch:
    @pytest.mark.asyncio
    async def test_store_hit_skips_adapters(self, memory_store, candidate_factory, fake_adapter_cls):
        for i in range(3):
            memory_store.create_paper(candidate_factory(f"Stored {i}"))
        adapters = _registry(fake_adapter_cls, candidate_factory)
        service = PaperSearchService(adapters, memory_store)

        outcome = await service.search(SearchFilter(limit=3))

        assert outcome.source == "database"
        assert outcome.total == 3
        assert all(not a.calls for a in adapters.values())

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_successful_sources(
        self, memory_store, candidate_factory, fake_adapter_cls
    ):
        memory_store.create_paper(candidate_factory("Already stored", doi="10.9999/stored"))
        adapters = _registry(
            fake_adapter_cls, candidate_factory, failing=(Platform.IEEE, Platform.PUBMED)
        )
        service = PaperSearchService(adapters, memory_store)

        outcome = await service.search(SearchFilter(limit=20))

        assert outcome.source == "mixed"
        assert outcome.error is None
        assert outcome.total == 4
        titles = {p.title for p in outcome.papers}
        assert titles == {
            "Already stored",
            "ArXiv result",
            "Springer result",
            "ScienceDirect result",
        }

    @pytest.mark.asyncio
    async def test_all_sources_failing_sets_error(
        self, memory_store, candidate_factory, fake_adapter_cls
    ):
        memory_store.create_paper(candidate_factory("Stored"))
        adapters = _registry(fake_adapter_cls, candidate_factory, failing=tuple(Platform))
        service = PaperSearchService(adapters, memory_store)

        outcome = await service.search(SearchFilter())

        assert outcome.source == "mixed"
        assert outcome.error == ALL_SOURCES_FAILED
        assert [p.title for p in outcome.papers] == ["Stored"]

    @pytest.mark.asyncio
    async def test_empty_batches_are_not_failures(self, memory_store, fake_adapter_cls):
        adapters = {Platform.ARXIV: fake_adapter_cls(Platform.ARXIV, papers=[])}
        outcome = await PaperSearchService(adapters, memory_store).search(SearchFilter())
        assert outcome.error is None
        assert outcome.total == 0

    @pytest.mark.asyncio
    async def test_existing_doi_keeps_original_title(
        self, memory_store, candidate_factory, fake_adapter_cls
    ):
        memory_store.create_paper(candidate_factory("Original title", doi="10.1/x"))
        adapters = {
            Platform.ARXIV: fake_adapter_cls(
                Platform.ARXIV, papers=[candidate_factory("Replacement title", doi="10.1/x")]
            )
        }
        service = PaperSearchService(adapters, memory_store)

        await service.search(SearchFilter())

        assert memory_store.count_papers() == 1
        assert memory_store.get_paper_by_doi("10.1/x").title == "Original title"

    @pytest.mark.asyncio
    async def test_same_doi_from_two_sources_ingested_once(
        self, memory_store, candidate_factory, fake_adapter_cls
    ):
        adapters = {
            Platform.ARXIV: fake_adapter_cls(
                Platform.ARXIV, papers=[candidate_factory("From arXiv", doi="10.7/dup")]
            ),
            Platform.SPRINGER: fake_adapter_cls(
                Platform.SPRINGER,
                papers=[candidate_factory("From Springer", doi="10.7/DUP", platform=Platform.SPRINGER)],
            ),
        }
        outcome = await PaperSearchService(adapters, memory_store).search(SearchFilter())
        assert outcome.total == 1
        assert outcome.papers[0].title == "From arXiv"

    @pytest.mark.asyncio
    async def test_platform_filter_selects_one_adapter(
        self, memory_store, candidate_factory, fake_adapter_cls
    ):
        adapters = _registry(fake_adapter_cls, candidate_factory)
        service = PaperSearchService(adapters, memory_store)

        outcome = await service.search(SearchFilter(platform="PubMed"))

        assert [a.platform for a in adapters.values() if a.calls] == [Platform.PUBMED]
        assert [p.platform for p in outcome.papers] == [Platform.PUBMED]

    @pytest.mark.asyncio
    async def test_platform_without_adapter_is_empty_database_result(
        self, memory_store, candidate_factory, fake_adapter_cls
    ):
        adapters = _registry(fake_adapter_cls, candidate_factory)
        outcome = await PaperSearchService(adapters, memory_store).search(
            SearchFilter(platform="Other")
        )
        assert outcome.source == "database"
        assert outcome.total == 0
        assert outcome.error is None

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, fake_adapter_cls):
        class BrokenStore:
            def search_papers(self, search_filter):
                raise StoreError("database unavailable")

        service = PaperSearchService({}, BrokenStore())
        with pytest.raises(StoreError):
            await service.search(SearchFilter())


class TestLookupDoi:
    @pytest.mark.asyncio
    async def test_stored_paper_skips_resolver(self, memory_store, candidate_factory):
        memory_store.create_paper(candidate_factory("Stored", doi="10.1000/abc"))
        resolver = AsyncMock()
        service = PaperSearchService({}, memory_store, resolver=resolver)

        paper = await service.lookup_doi("https://doi.org/10.1000/ABC")

        assert paper.title == "Stored"
        resolver.resolve.assert_not_called()

    @pytest.mark.asyncio
    async def test_resolved_paper_is_persisted(self, memory_store, candidate_factory):
        resolver = AsyncMock()
        resolver.resolve.return_value = candidate_factory("Resolved", doi="10.1000/new")
        service = PaperSearchService({}, memory_store, resolver=resolver)

        paper = await service.lookup_doi("10.1000/new")

        assert paper.id == 1
        assert memory_store.get_paper_by_doi("10.1000/new").title == "Resolved"

    @pytest.mark.asyncio
    async def test_resolver_miss_or_failure_is_none(self, memory_store):
        resolver = AsyncMock()
        resolver.resolve.return_value = None
        service = PaperSearchService({}, memory_store, resolver=resolver)
        assert await service.lookup_doi("10.1000/missing") is None

        resolver.resolve.side_effect = UpstreamError("down", source="crossref")
        assert await service.lookup_doi("10.1000/missing") is None


@pytest.mark.asyncio
async def test_close_closes_adapters_and_resolver(memory_store, candidate_factory, fake_adapter_cls):
    adapters = _registry(fake_adapter_cls, candidate_factory)
    resolver = AsyncMock()
    await PaperSearchService(adapters, memory_store, resolver=resolver).close()
    assert all(a.closed for a in adapters.values())
    resolver.close.assert_awaited_once()
