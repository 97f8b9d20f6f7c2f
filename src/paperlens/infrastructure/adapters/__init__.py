"""PaperSourcePort adapter registry."""

from __future__ import annotations

import random
from typing import Dict, Optional

from paperlens.application.ports.paper_source_port import PaperSourcePort
from paperlens.config import Settings
from paperlens.domain.paper import Platform
from paperlens.infrastructure.adapters.arxiv_adapter import ArxivAdapter
from paperlens.infrastructure.adapters.ieee_adapter import IeeeAdapter
from paperlens.infrastructure.adapters.pubmed_adapter import PubMedAdapter
from paperlens.infrastructure.adapters.sciencedirect_adapter import ScienceDirectAdapter
from paperlens.infrastructure.adapters.springer_adapter import SpringerAdapter


def build_adapter_registry(
    settings: Optional[Settings] = None, *, rng: Optional[random.Random] = None
) -> Dict[Platform, PaperSourcePort]:
    settings = settings or Settings()
    timeout = settings.http_timeout
    return {
        Platform.ARXIV: ArxivAdapter(timeout=timeout),
        Platform.IEEE: IeeeAdapter(settings.ieee_api_key, rng=rng, timeout=timeout),
        Platform.SPRINGER: SpringerAdapter(settings.springer_api_key, rng=rng, timeout=timeout),
        Platform.PUBMED: PubMedAdapter(
            api_key=settings.ncbi_api_key, email=settings.contact_email, timeout=timeout
        ),
        Platform.SCIENCEDIRECT: ScienceDirectAdapter(
            settings.elsevier_api_key, rng=rng, timeout=timeout
        ),
    }


__all__ = [
    "ArxivAdapter",
    "IeeeAdapter",
    "PubMedAdapter",
    "ScienceDirectAdapter",
    "SpringerAdapter",
    "build_adapter_registry",
]
