"""
Paper summaries in three tiers (short bullets, medium synthesis, detailed writeup).

The hosted model is optional. When it is missing or any of the three calls
fails, all tiers are produced by local heuristics together, and a minimal
title/abstract fallback covers anything the heuristics choke on.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import List, Optional

from paperlens.application.ports.paper_repository_port import PaperRepository
from paperlens.application.ports.text_generator_port import TextGeneratorPort
from paperlens.application.prompts import PromptRegistry
from paperlens.application.services.normalization import domain_context
from paperlens.core.exceptions import PaperNotFoundError
from paperlens.domain.library import GeneratedSummary, Summary
from paperlens.domain.paper import Paper

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT_RX = re.compile(r"(?<=[.!?])\s+")
_LEADING_PUNCT_RX = re.compile(r"^\s*[,;:]\s*")
_LEADING_WORD_RX = re.compile(r"^(this|the|our|we)\s+", re.IGNORECASE)
_LEADING_PHRASE_RX = re.compile(
    r"^(paper|study|research)\s+(shows|demonstrates|concludes|finds|presents)\s+", re.IGNORECASE
)

INDICATOR_WORDS = (
    "results",
    "conclusion",
    "findings",
    "demonstrate",
    "show",
    "present",
    "develop",
    "propose",
    "novel",
    "new",
    "approach",
    "method",
    "technique",
    "analysis",
    "significant",
    "important",
)
MAX_BULLETS = 5
MIN_BULLETS = 3


def split_sentences(text: str) -> List[str]:
    return [s for s in _SENTENCE_SPLIT_RX.split((text or "").strip()) if s]


def _clean_phrase(sentence: str) -> str:
    cleaned = _LEADING_PUNCT_RX.sub("", sentence)
    cleaned = _LEADING_WORD_RX.sub("", cleaned)
    cleaned = _LEADING_PHRASE_RX.sub("", cleaned).strip()
    return cleaned[:1].upper() + cleaned[1:]


def extract_key_phrases(text: str) -> List[str]:
    """Sentences carrying an indicator word, tidied for use as bullets."""
    phrases: List[str] = []
    for sentence in split_sentences(text):
        lowered = sentence.lower()
        if not any(word in lowered for word in INDICATOR_WORDS):
            continue
        formatted = _clean_phrase(sentence)
        if 10 < len(formatted) < 150 and formatted not in phrases:
            phrases.append(formatted)
    return phrases[:MAX_BULLETS]


def _venue(paper: Paper) -> str:
    return paper.journal or paper.platform.value


def short_summary(paper: Paper) -> str:
    phrases = extract_key_phrases(f"{paper.title}. {paper.abstract}")
    if len(phrases) >= MIN_BULLETS:
        return "\n".join(f"• {phrase}" for phrase in phrases)

    authors = ", ".join(paper.authors[:2])
    if len(paper.authors) > 2:
        authors += " and others"
    return "\n".join(
        [
            f"• Presents research on {paper.title.lower()}",
            f"• Authored by {authors}",
            f"• Published in {_venue(paper)}",
            f"• Focuses on the field of {paper.domain.value}",
            f"• Contains {paper.page_count or 0} pages with {paper.citation_count or 0} citations",
        ]
    )


def medium_summary(paper: Paper) -> str:
    sentences = split_sentences(paper.abstract)
    if len(sentences) <= 3:
        return paper.abstract
    return " ".join([sentences[0], sentences[len(sentences) // 2], sentences[-1]])


def detailed_summary(paper: Paper) -> str:
    by_line = f" by {', '.join(paper.authors)}" if paper.authors else ""
    closing = (
        f"The research was published in {_venue(paper)} and spans "
        f"{paper.page_count or 'several'} pages."
    )
    if paper.citation_count:
        closing += (
            f" This work has been cited {paper.citation_count} times, "
            "indicating its significance in the field."
        )
    return "\n\n".join(
        [
            f'This paper titled "{paper.title}"{by_line} presents a comprehensive study '
            f"in the field of {paper.domain.value}.",
            paper.abstract,
            domain_context(paper.domain),
            closing,
            "The authors provide valuable insights that contribute to the advancement of "
            "knowledge in this area, with potential applications in various related fields.",
        ]
    )


def minimal_summary(paper: Paper) -> GeneratedSummary:
    return GeneratedSummary(
        short_summary=f"This paper discusses {paper.title.lower()}.",
        medium_summary=f"{paper.abstract[:200]}...",
        detailed_summary=paper.abstract,
    )


class SummaryGenerator:
    def __init__(
        self,
        text_generator: Optional[TextGeneratorPort] = None,
        prompt_registry: Optional[PromptRegistry] = None,
    ):
        self._text_generator = text_generator
        self._prompts = prompt_registry or PromptRegistry()

    async def generate(self, paper: Paper) -> GeneratedSummary:
        """Three summary tiers for a paper. Never raises."""
        if self._text_generator is not None:
            try:
                return await self._generate_remote(paper)
            except Exception as exc:
                logger.warning("Remote summary failed for paper %s: %s", paper.id, exc)

        try:
            return self.generate_local(paper)
        except Exception as exc:
            logger.error("Local summary failed for paper %s: %s", paper.id, exc)
            return minimal_summary(paper)

    async def _generate_remote(self, paper: Paper) -> GeneratedSummary:
        values = {
            "title": paper.title,
            "authors": ", ".join(paper.authors) or "Unknown",
            "domain": paper.domain.value,
            "journal": _venue(paper),
            "published": paper.published_date.date().isoformat(),
            "abstract": paper.abstract or "(no abstract available)",
        }
        names = ("short_summary", "medium_summary", "detailed_summary")
        templates = [self._prompts.get(name) for name in names]
        texts = await asyncio.gather(
            *(
                self._text_generator.complete(system=t.system, user=t.render(**values))
                for t in templates
            ),
            return_exceptions=True,
        )
        for name, text in zip(names, texts):
            if isinstance(text, BaseException):
                raise text
            if not (text or "").strip():
                raise ValueError(f"empty {name} completion")
        return GeneratedSummary(
            short_summary=texts[0].strip(),
            medium_summary=texts[1].strip(),
            detailed_summary=texts[2].strip(),
        )

    @staticmethod
    def generate_local(paper: Paper) -> GeneratedSummary:
        return GeneratedSummary(
            short_summary=short_summary(paper),
            medium_summary=medium_summary(paper),
            detailed_summary=detailed_summary(paper),
        )

    async def close(self) -> None:
        if self._text_generator is not None:
            await self._text_generator.close()


class SummaryService:
    """Summaries backed by the repository: generated on first access, replaced on demand."""

    def __init__(self, repository: PaperRepository, generator: Optional[SummaryGenerator] = None):
        self._repository = repository
        self._generator = generator or SummaryGenerator()

    def _require_paper(self, paper_id: int) -> Paper:
        paper = self._repository.get_paper(paper_id)
        if paper is None:
            raise PaperNotFoundError(paper_id)
        return paper

    async def get_or_create(self, paper_id: int) -> Summary:
        paper = self._require_paper(paper_id)
        summary = self._repository.get_summary(paper_id)
        if summary is not None:
            return summary
        generated = await self._generator.generate(paper)
        return self._repository.create_summary(paper_id, generated)

    async def regenerate(self, paper_id: int) -> Summary:
        paper = self._require_paper(paper_id)
        generated = await self._generator.generate(paper)
        summary = self._repository.update_summary(paper_id, generated)
        if summary is None:
            summary = self._repository.create_summary(paper_id, generated)
        return summary

    async def close(self) -> None:
        await self._generator.close()
