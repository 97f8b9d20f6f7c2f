from __future__ import annotations

import logging
from typing import Optional

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)


class OpenAITextGenerator:
    """TextGeneratorPort over any OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        temperature: float = 0.3,
        client: Optional[AsyncOpenAI] = None,
    ):
        if client is None:
            if base_url:
                client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)
            else:
                client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._client = client
        self.model = model
        self.temperature = temperature

    async def complete(self, *, system: str, user: str) -> str:
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=self.temperature,
        )
        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()

    async def close(self) -> None:
        await self._client.close()
