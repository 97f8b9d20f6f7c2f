"""DoiResolverPort: live lookup of a single DOI."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from paperlens.domain.paper import PaperCandidate


@runtime_checkable
class DoiResolverPort(Protocol):
    async def resolve(self, doi: str) -> Optional[PaperCandidate]: ...

    async def close(self) -> None: ...
