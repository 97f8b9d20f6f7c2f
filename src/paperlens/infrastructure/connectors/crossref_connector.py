from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from paperlens.core.exceptions import UpstreamError


class CrossrefConnector:
    """Minimal CrossRef ``/works/{doi}`` lookup."""

    def __init__(
        self,
        *,
        timeout_s: float = 30.0,
        base_url: str = "https://api.crossref.org",
        mailto: Optional[str] = None,
    ):
        self.timeout_s = timeout_s
        self.base_url = base_url.rstrip("/")
        self.mailto = mailto
        self._headers = {"User-Agent": "PaperLens/0.1", "Accept": "application/json"}

    def get_work(self, doi: str) -> Optional[Dict[str, Any]]:
        """Return the ``message`` object for a DOI, or None when CrossRef has no record."""
        doi = (doi or "").strip()
        if not doi:
            return None

        params = {"mailto": self.mailto} if self.mailto else None
        url = f"{self.base_url}/works/{quote(doi, safe='')}"
        try:
            response = requests.get(url, headers=self._headers, params=params, timeout=self.timeout_s)
        except requests.RequestException as exc:
            raise UpstreamError(f"CrossRef request failed: {exc}", source="crossref") from exc

        if response.status_code == 404:
            return None
        if not response.ok:
            raise UpstreamError(
                f"CrossRef returned HTTP {response.status_code}",
                status=response.status_code,
                source="crossref",
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError("CrossRef returned a malformed payload", source="crossref") from exc

        work = payload.get("message") if isinstance(payload, dict) else None
        return work if isinstance(work, dict) else None
