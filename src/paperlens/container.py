"""
Process-wide wiring: one repository and one instance of each service.

Everything is built lazily from ``Settings.from_env()`` on first use. Tests
swap pieces with ``set_repository`` or by monkeypatching the getters.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from paperlens.application.ports.paper_repository_port import PaperRepository
from paperlens.application.services import (
    LibraryService,
    PaperSearchService,
    SummaryGenerator,
    SummaryService,
)
from paperlens.config import Settings
from paperlens.infrastructure.adapters import build_adapter_registry
from paperlens.infrastructure.llm.openai_text_generator import OpenAITextGenerator
from paperlens.infrastructure.connectors.crossref_connector import CrossrefConnector
from paperlens.infrastructure.resolvers.crossref_resolver import CrossrefDoiResolver
from paperlens.infrastructure.stores.memory_store import InMemoryPaperStore
from paperlens.infrastructure.stores.seed import ensure_demo_user, seed_demo_data

logger = logging.getLogger(__name__)

_settings: Optional[Settings] = None
_repository: Optional[PaperRepository] = None
_search_service: Optional[PaperSearchService] = None
_summary_service: Optional[SummaryService] = None
_library_service: Optional[LibraryService] = None
_retired: List[Union[PaperSearchService, SummaryService]] = []


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def build_repository(settings: Settings) -> PaperRepository:
    """Store selected by ``PAPERLENS_STORE``, with the demo user (and optional sample data)."""
    if settings.store_backend == "sqlalchemy":
        from paperlens.infrastructure.stores.paper_store import SqlAlchemyPaperStore

        repository: PaperRepository = SqlAlchemyPaperStore(settings.db_url)
    else:
        repository = InMemoryPaperStore()

    if settings.seed_demo_data:
        seed_demo_data(repository)
    else:
        ensure_demo_user(repository)
    logger.info("Using %s store", settings.store_backend)
    return repository


def get_repository() -> PaperRepository:
    global _repository
    if _repository is None:
        _repository = build_repository(get_settings())
    return _repository


def set_repository(repository: Optional[PaperRepository]) -> None:
    """Replace the repository. Services built on the old one are closed by ``shutdown``."""
    global _repository, _search_service, _summary_service, _library_service
    _retired.extend(s for s in (_search_service, _summary_service) if s is not None)
    _repository = repository
    _search_service = None
    _summary_service = None
    _library_service = None


def get_search_service() -> PaperSearchService:
    global _search_service
    if _search_service is None:
        settings = get_settings()
        resolver = CrossrefDoiResolver(
            CrossrefConnector(timeout_s=settings.http_timeout, mailto=settings.contact_email)
        )
        _search_service = PaperSearchService(
            build_adapter_registry(settings), get_repository(), resolver=resolver
        )
    return _search_service


def build_summary_generator(settings: Settings) -> SummaryGenerator:
    if not settings.llm_api_key:
        return SummaryGenerator()
    return SummaryGenerator(
        OpenAITextGenerator(
            settings.llm_api_key,
            model=settings.llm_model,
            base_url=settings.llm_base_url,
            timeout=settings.http_timeout,
        )
    )


def get_summary_service() -> SummaryService:
    global _summary_service
    if _summary_service is None:
        _summary_service = SummaryService(
            get_repository(), build_summary_generator(get_settings())
        )
    return _summary_service


def get_library_service() -> LibraryService:
    global _library_service
    if _library_service is None:
        _library_service = LibraryService(get_repository())
    return _library_service


async def shutdown() -> None:
    """Close network clients, including those of replaced services, and the store."""
    global _settings, _search_service, _summary_service
    services = _retired + [s for s in (_search_service, _summary_service) if s is not None]
    _retired.clear()
    _search_service = None
    _summary_service = None
    for service in services:
        await service.close()
    if _repository is not None:
        _repository.close()
    set_repository(None)
    _settings = None
