"""TextGeneratorPort: hosted generative text model."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TextGeneratorPort(Protocol):
    async def complete(self, *, system: str, user: str) -> str: ...

    async def close(self) -> None: ...
