"""Demo user and sample data for local development."""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta

from paperlens.application.ports.paper_repository_port import PaperRepository
from paperlens.domain.library import GeneratedSummary, User
from paperlens.domain.paper import Domain, PaperCandidate, Platform
from paperlens.utils.timeutil import utcnow

logger = logging.getLogger(__name__)

DEMO_USER_ID = 1
DEMO_USERNAME = "testuser"
DEMO_EMAIL = "test@example.com"

SAMPLE_PAPER_COUNT = 30
SAMPLE_SUMMARY_COUNT = 10
SAMPLE_QUERIES = [
    "machine learning",
    "quantum computing",
    "climate change",
    "neural networks",
    "vaccine research",
]


def ensure_demo_user(repository: PaperRepository) -> User:
    """Make sure user 1 exists; stores hand out ids from 1 so the first create lands there."""
    user = repository.get_user(DEMO_USER_ID)
    if user is not None:
        return user
    user = repository.create_user(username=DEMO_USERNAME, email=DEMO_EMAIL)
    logger.info("Created demo user id=%s", user.id)
    return user


def seed_demo_data(repository: PaperRepository) -> int:
    """Insert sample papers, summaries and searches into an empty store.

    Returns the number of papers created (0 when the store already holds papers).
    """
    user = ensure_demo_user(repository)
    if repository.count_papers() > 0:
        return 0

    platforms = list(Platform)
    domains = list(Domain)
    now = utcnow()
    created = []
    for i in range(SAMPLE_PAPER_COUNT):
        platform = platforms[i % len(platforms)]
        domain = domains[i % len(domains)]
        candidate = PaperCandidate(
            title=f"Sample Research Paper {i + 1} on {domain.value}",
            authors=[f"Author {i + 1}", f"Co-author {i + 1}"],
            abstract=(
                f"This is a sample abstract for research paper {i + 1} "
                f"in the field of {domain.value}."
            ),
            doi=f"10.1234/sample-{uuid.uuid4().hex[:8]}",
            url=f"https://example.com/papers/{i + 1}",
            pdf_url=f"https://example.com/papers/{i + 1}/pdf",
            platform=platform,
            domain=domain,
            journal=f"Journal of {domain.value} Studies",
            published_date=now - timedelta(days=i * 7),
            page_count=10 + i,
            view_count=100 * (i + 1),
            citation_count=10 * (i + 1),
        )
        created.append(repository.create_paper(candidate))

    for paper in created[:SAMPLE_SUMMARY_COUNT]:
        repository.create_summary(
            paper.id,
            GeneratedSummary(
                short_summary=f"Short summary for paper {paper.id} with bullet points.",
                medium_summary=(
                    f"Medium length summary for paper {paper.id} with more detailed information."
                ),
                detailed_summary=(
                    f"Detailed summary for paper {paper.id} with comprehensive analysis of the research."
                ),
            ),
        )

    for i, query in enumerate(SAMPLE_QUERIES):
        repository.save_recent_search(
            user.id,
            query,
            {
                "domain": domains[i % len(domains)].value,
                "platform": platforms[i % len(platforms)].value,
            },
        )

    logger.info("Seeded %d sample papers", len(created))
    return len(created)
