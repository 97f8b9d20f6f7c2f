"""PaperSourcePort: one upstream paper platform."""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from paperlens.domain.paper import PaperCandidate, Platform
from paperlens.domain.search import SearchFilter


@runtime_checkable
class PaperSourcePort(Protocol):
    """Single platform search adapter.

    ``fetch`` is best-effort: implementations return ``[]`` on upstream
    failure instead of raising.
    """

    @property
    def platform(self) -> Platform: ...

    async def fetch(self, search_filter: SearchFilter) -> List[PaperCandidate]: ...

    async def close(self) -> None: ...
