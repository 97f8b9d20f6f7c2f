from __future__ import annotations

import re
from typing import Optional


_DOI_RE = re.compile(r"(?P<doi>10\.\d{4,9}/[-._;()/:A-Z0-9<>\[\]]+)", re.IGNORECASE)
_DOI_PREFIXES = ("https://doi.org/", "http://doi.org/", "https://dx.doi.org/", "http://dx.doi.org/")


def normalize_doi(value: str | None) -> Optional[str]:
    """Canonical form used as the de-duplication key.

    Strips resolver prefixes and a leading ``doi:`` and lower-cases the rest.
    Values that do not look like a registered DOI are kept as cleaned text so
    that short test or legacy identifiers still de-duplicate.
    """
    text = (value or "").strip()
    if not text:
        return None

    lowered = text.lower()
    for prefix in _DOI_PREFIXES:
        if lowered.startswith(prefix):
            text = text[len(prefix) :]
            break
    else:
        for marker in ("doi.org/", "dx.doi.org/"):
            idx = lowered.find(marker)
            if idx >= 0:
                text = text[idx + len(marker) :]
                break

    if text.lower().startswith("doi:"):
        text = text[4:]
    text = text.split("?", 1)[0].strip().strip("/")

    match = _DOI_RE.search(text)
    if match:
        return match.group("doi").strip().lower()
    return text.lower() or None
