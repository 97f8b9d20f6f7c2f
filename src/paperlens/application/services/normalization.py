"""
Normalization helpers shared by the source adapters and the summary generator.

Every function here is pure and total: bad input yields a neutral default
(``Domain.OTHER``, ``0``, ``[]``, ``now``) instead of an exception.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from paperlens.domain.paper import Domain
from paperlens.utils.timeutil import as_utc, utcnow

# arXiv category code -> domain. Exact match first, then the longest prefix.
ARXIV_CATEGORY_DOMAINS: Dict[str, Domain] = {
    "cs.AI": Domain.ARTIFICIAL_INTELLIGENCE,
    "cs.CL": Domain.ARTIFICIAL_INTELLIGENCE,
    "cs.CV": Domain.ARTIFICIAL_INTELLIGENCE,
    "cs.LG": Domain.ARTIFICIAL_INTELLIGENCE,
    "cs.NE": Domain.ARTIFICIAL_INTELLIGENCE,
    "cs": Domain.COMPUTER_SCIENCE,
    "physics": Domain.PHYSICS,
    "math": Domain.MATHEMATICS,
    "q-bio": Domain.BIOLOGY,
    "stat": Domain.MATHEMATICS,
    "econ": Domain.ECONOMICS,
    "astro-ph": Domain.ASTRONOMY,
    "cond-mat": Domain.PHYSICS,
    "eess": Domain.ENGINEERING,
    "quant-ph": Domain.PHYSICS,
}

# Subject keyword containment, checked in order (first hit wins).
SUBJECT_KEYWORD_DOMAINS: Sequence[Tuple[str, Domain]] = (
    ("computer science", Domain.COMPUTER_SCIENCE),
    ("artificial intelligence", Domain.ARTIFICIAL_INTELLIGENCE),
    ("machine learning", Domain.ARTIFICIAL_INTELLIGENCE),
    ("deep learning", Domain.ARTIFICIAL_INTELLIGENCE),
    ("neural networks", Domain.ARTIFICIAL_INTELLIGENCE),
    ("data science", Domain.COMPUTER_SCIENCE),
    ("medicine", Domain.MEDICINE),
    ("medical", Domain.MEDICINE),
    ("clinical", Domain.MEDICINE),
    ("healthcare", Domain.MEDICINE),
    ("nursing", Domain.MEDICINE),
    ("pharmacy", Domain.MEDICINE),
    ("physics", Domain.PHYSICS),
    ("quantum", Domain.PHYSICS),
    ("astrophysics", Domain.ASTRONOMY),
    ("mechanics", Domain.PHYSICS),
    ("chemistry", Domain.CHEMISTRY),
    ("biochemistry", Domain.CHEMISTRY),
    ("chemical", Domain.CHEMISTRY),
    ("molecular", Domain.CHEMISTRY),
    ("biology", Domain.BIOLOGY),
    ("genetics", Domain.BIOLOGY),
    ("microbiology", Domain.BIOLOGY),
    ("ecology", Domain.ENVIRONMENTAL_SCIENCE),
    ("mathematics", Domain.MATHEMATICS),
    ("statistics", Domain.MATHEMATICS),
    ("algebra", Domain.MATHEMATICS),
    ("geometry", Domain.MATHEMATICS),
    ("engineering", Domain.ENGINEERING),
    ("mechanical", Domain.ENGINEERING),
    ("electrical", Domain.ENGINEERING),
    ("psychology", Domain.PSYCHOLOGY),
    ("cognitive", Domain.PSYCHOLOGY),
    ("behavioral", Domain.PSYCHOLOGY),
    ("economics", Domain.ECONOMICS),
    ("finance", Domain.ECONOMICS),
    ("business", Domain.ECONOMICS),
    ("sociology", Domain.SOCIAL_SCIENCES),
    ("anthropology", Domain.SOCIAL_SCIENCES),
    ("political science", Domain.SOCIAL_SCIENCES),
    ("social sciences", Domain.SOCIAL_SCIENCES),
    ("environmental", Domain.ENVIRONMENTAL_SCIENCE),
    ("environment", Domain.ENVIRONMENTAL_SCIENCE),
    ("sustainability", Domain.ENVIRONMENTAL_SCIENCE),
    ("climate", Domain.ENVIRONMENTAL_SCIENCE),
    ("materials", Domain.MATERIALS_SCIENCE),
    ("metallurgy", Domain.MATERIALS_SCIENCE),
    ("polymer", Domain.MATERIALS_SCIENCE),
    ("astronomy", Domain.ASTRONOMY),
    ("cosmology", Domain.ASTRONOMY),
    ("life sciences", Domain.BIOLOGY),
    ("public health", Domain.MEDICINE),
)

PUBMED_KEYWORD_DOMAINS: Sequence[Tuple[Domain, Sequence[str]]] = (
    (
        Domain.MEDICINE,
        ("medicine", "clinical", "patient", "treatment", "therapy", "health", "medical",
         "disease", "healthcare", "drug", "hospital", "physician"),
    ),
    (
        Domain.BIOLOGY,
        ("biology", "cell", "molecular", "gene", "protein", "organism", "tissue",
         "cellular", "genomic", "biological"),
    ),
    (
        Domain.CHEMISTRY,
        ("chemistry", "chemical", "molecule", "compound", "synthesis", "reaction",
         "polymer", "pharmaceutical"),
    ),
    (
        Domain.PSYCHOLOGY,
        ("psychology", "behavior", "cognitive", "mental", "brain", "neurological",
         "psychiatric", "psychological"),
    ),
    (
        Domain.ARTIFICIAL_INTELLIGENCE,
        ("artificial intelligence", "machine learning", "deep learning", "neural network",
         "ai", "algorithm", "computational", "computer", "data science"),
    ),
)

_KEYWORD_SYSTEMS = {"crossref", "springer", "ieee", "sciencedirect"}

DOMAIN_CONTEXT: Dict[Domain, str] = {
    Domain.ARTIFICIAL_INTELLIGENCE: (
        "The field of Artificial Intelligence has been rapidly evolving, with significant "
        "advancements in machine learning algorithms, deep neural networks, and applications "
        "across various industries."
    ),
    Domain.MEDICINE: (
        "Medical research continues to be vital for improving healthcare outcomes, developing "
        "new treatments, and enhancing our understanding of human health and disease."
    ),
    Domain.PHYSICS: (
        "Physics research explores fundamental principles of nature, from quantum mechanics to "
        "cosmology, providing the foundations for technological innovations and our "
        "understanding of the universe."
    ),
    Domain.CHEMISTRY: (
        "Chemistry research enables the development of new materials, drugs, and processes that "
        "address critical challenges in sustainability, healthcare, and industrial applications."
    ),
    Domain.BIOLOGY: (
        "Biological research investigates the complexity of living systems, from molecular "
        "interactions to ecosystem dynamics, with implications for medicine, agriculture, and "
        "environmental conservation."
    ),
    Domain.COMPUTER_SCIENCE: (
        "The field of Computer Science drives technological innovation through advances in "
        "algorithms, data structures, and system architectures that power modern digital "
        "infrastructure."
    ),
    Domain.MATHEMATICS: (
        "Mathematical research provides the language and tools for describing and analyzing "
        "complex systems, with applications spanning all scientific and engineering disciplines."
    ),
    Domain.ENGINEERING: (
        "Engineering research translates scientific principles into practical applications, "
        "developing technologies and systems that address societal needs and challenges."
    ),
    Domain.ECONOMICS: (
        "Economic research examines the production, distribution, and consumption of goods and "
        "services, providing insights for policy makers, businesses, and individuals."
    ),
    Domain.PSYCHOLOGY: (
        "Psychological research investigates human behavior, cognition, and emotion, "
        "contributing to our understanding of mental health, decision-making, and social dynamics."
    ),
    Domain.SOCIAL_SCIENCES: (
        "Research in the social sciences examines human societies, relationships, and "
        "institutions, providing critical insights into social challenges and opportunities."
    ),
    Domain.ENVIRONMENTAL_SCIENCE: (
        "Environmental research studies the interactions between human activities and natural "
        "systems, informing efforts to address climate change, pollution, and resource management."
    ),
    Domain.MATERIALS_SCIENCE: (
        "Materials research develops new substances with novel properties, enabling advances in "
        "electronics, construction, medicine, and energy technologies."
    ),
    Domain.ASTRONOMY: (
        "Astronomical research explores celestial objects and phenomena, expanding our "
        "understanding of the universe and our place within it."
    ),
}

GENERIC_DOMAIN_CONTEXT = (
    "This research contributes valuable insights to its field, building upon existing knowledge "
    "and opening avenues for future investigation."
)

_PAGE_RANGE_RX = re.compile(r"(?:[eE])?(\d+)\s*[-–]\s*(?:[eE])?(\d+)")
_SINGLE_PAGE_RX = re.compile(r"(?:[eE])?(\d+)")
_YEAR_RX = re.compile(r"^(\d{4})$")
_YEAR_MONTH_RX = re.compile(r"^(\d{4})[-/](\d{1,2})$")
_SLASH_DATE_RX = re.compile(r"^\d{4}/\d{2}/\d{2}")
_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}
_PUBMED_DATE_RX = re.compile(r"^(\d{4})(?:\s+([A-Za-z]{3})[a-z]*)?(?:\s+(\d{1,2}))?")


def _as_terms(raw: Any) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, dict):
        return [str(v) for v in raw.values() if isinstance(v, str)]
    if isinstance(raw, Iterable):
        out: List[str] = []
        for item in raw:
            out.extend(_as_terms(item))
        return out
    return [str(raw)]


def _arxiv_domain(raw: Any) -> Domain:
    for category in _as_terms(raw):
        code = category.strip()
        if not code:
            continue
        if code in ARXIV_CATEGORY_DOMAINS:
            return ARXIV_CATEGORY_DOMAINS[code]
        prefixes = [p for p in ARXIV_CATEGORY_DOMAINS if code.startswith(p)]
        if prefixes:
            return ARXIV_CATEGORY_DOMAINS[max(prefixes, key=len)]
    return Domain.OTHER


def _keyword_domain(raw: Any) -> Domain:
    for subject in (t.lower() for t in _as_terms(raw)):
        for keyword, domain in SUBJECT_KEYWORD_DOMAINS:
            if keyword in subject:
                return domain
    return Domain.OTHER


def _pubmed_domain(raw: Any) -> Domain:
    terms = [t.lower() for t in _as_terms(raw) if t]
    for domain, keywords in PUBMED_KEYWORD_DOMAINS:
        for term in terms:
            if any(_contains_keyword(term, kw) for kw in keywords):
                return domain
    return Domain.MEDICINE


def _contains_keyword(term: str, keyword: str) -> bool:
    # Short keywords ("ai") must match whole words so "brain" is not AI.
    if len(keyword) <= 3:
        return re.search(rf"\b{re.escape(keyword)}\b", term) is not None
    return keyword in term


def map_category_to_domain(system: str, raw: Any) -> Domain:
    """Classify a source-specific category, subject list or keyword set.

    ``system`` is one of ``arxiv``, ``pubmed``, ``crossref``, ``springer``,
    ``ieee`` or ``sciencedirect``. Unknown systems classify as ``Other``.
    """
    key = (system or "").strip().lower()
    try:
        if key == "arxiv":
            return _arxiv_domain(raw)
        if key == "pubmed":
            return _pubmed_domain(raw)
        if key in _KEYWORD_SYSTEMS:
            return _keyword_domain(raw)
    except Exception:
        return Domain.OTHER
    return Domain.OTHER


def parse_page_range(raw: Any) -> int:
    """Page count from a range like ``123-145`` or ``e12-e20``.

    A single page counts as 1; empty or unparseable input counts as 0.
    """
    text = str(raw or "").strip()
    if not text:
        return 0
    match = _PAGE_RANGE_RX.search(text)
    if match:
        start, end = int(match.group(1)), int(match.group(2))
        return max(1, end - start + 1)
    if _SINGLE_PAGE_RX.search(text):
        return 1
    return 0


def _author_name(record: Any) -> str:
    if record is None:
        return ""
    if isinstance(record, str):
        return record.strip()
    if not isinstance(record, dict):
        return str(record).strip()

    given = str(record.get("given") or record.get("first_name") or "").strip()
    family = str(record.get("family") or record.get("last_name") or "").strip()
    if given or family:
        return " ".join(part for part in (given, family) if part)

    for key in ("name", "full_name", "preferred_name"):
        value = str(record.get(key) or "").strip()
        if value:
            return value

    creator = str(record.get("creator") or "").strip()
    if creator:
        family, _, given = creator.partition(",")
        return " ".join(part for part in (given.strip(), family.strip()) if part)
    return ""


def extract_authors(records: Any) -> List[str]:
    """Author display names in source order, empties dropped."""
    if records is None:
        return []
    if isinstance(records, (str, dict)):
        records = [records]
    try:
        names = [_author_name(r) for r in records]
    except TypeError:
        return []
    return [n for n in names if n]


def _from_date_parts(raw: Dict[str, Any]) -> Optional[datetime]:
    parts = (raw.get("date-parts") or [[]])[0] or []
    if not parts or parts[0] is None:
        return None
    year = int(parts[0])
    month = int(parts[1]) if len(parts) > 1 and parts[1] else 1
    day = int(parts[2]) if len(parts) > 2 and parts[2] else 1
    return datetime(year, month, day, tzinfo=timezone.utc)


def parse_published_date(raw: Any, default: Optional[datetime] = None) -> datetime:
    """Parse the publication date shapes the sources emit into UTC.

    Handles ISO 8601 strings, bare years, ``YYYY-MM``, PubMed style
    ``2023 Mar 15`` and CrossRef ``{"date-parts": [[2023, 3, 15]]}``.
    """
    fallback = as_utc(default) or utcnow()
    if raw is None or raw == "":
        return fallback
    try:
        if isinstance(raw, datetime):
            return as_utc(raw) or fallback
        if isinstance(raw, dict):
            return _from_date_parts(raw) or fallback

        text = str(raw).strip()
        match = _YEAR_RX.match(text)
        if match:
            return datetime(int(match.group(1)), 1, 1, tzinfo=timezone.utc)
        match = _YEAR_MONTH_RX.match(text)
        if match:
            return datetime(int(match.group(1)), int(match.group(2)), 1, tzinfo=timezone.utc)

        iso = f"{text[:-1]}+00:00" if text.endswith("Z") else text
        if _SLASH_DATE_RX.match(iso):
            iso = iso.replace("/", "-")
        try:
            return as_utc(datetime.fromisoformat(iso)) or fallback
        except ValueError:
            pass

        match = _PUBMED_DATE_RX.match(text)
        if match:
            year = int(match.group(1))
            month = _MONTHS.get((match.group(2) or "jan").lower(), 1)
            day = int(match.group(3) or 1)
            return datetime(year, month, day, tzinfo=timezone.utc)
    except (TypeError, ValueError, IndexError):
        return fallback
    return fallback


def domain_context(domain: Any) -> str:
    """One descriptive paragraph about a research field."""
    if isinstance(domain, Domain):
        return DOMAIN_CONTEXT.get(domain, GENERIC_DOMAIN_CONTEXT)
    text = str(domain or "").strip().lower()
    for member, paragraph in DOMAIN_CONTEXT.items():
        if member.value.lower() == text:
            return paragraph
    return GENERIC_DOMAIN_CONTEXT
