"""
Shared async HTTP client for upstream paper APIs.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientTimeout

from paperlens.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

USER_AGENT = "PaperLens/0.1"


class APIClient:
    """Async HTTP API client. One attempt per request, no retries."""

    def __init__(
        self,
        base_url: str,
        *,
        source: str = "",
        timeout: float = 30,
        request_interval: float = 0.0,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.source = source or self.base_url
        self.timeout = ClientTimeout(total=timeout)
        self.request_interval = request_interval
        self._headers = dict(headers or {})
        self._last_request_time = 0.0
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            headers = {"User-Agent": USER_AGENT, **self._headers}
            self._session = aiohttp.ClientSession(timeout=self.timeout, headers=headers)
        return self._session

    async def _wait_for_rate_limit(self) -> None:
        if self.request_interval <= 0:
            return
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self.request_interval:
            await asyncio.sleep(self.request_interval - elapsed)
        self._last_request_time = time.monotonic()

    def _url(self, endpoint: str) -> str:
        if not endpoint:
            return self.base_url
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    async def _request(
        self, endpoint: str, params: Optional[Dict[str, Any]], *, as_json: bool
    ) -> Any:
        await self._wait_for_rate_limit()
        url = self._url(endpoint)
        session = await self._get_session()
        try:
            async with session.get(url, params=params) as response:
                if response.status < 200 or response.status >= 300:
                    text = await response.text()
                    logger.warning("%s HTTP %s for %s: %s", self.source, response.status, url, text[:200])
                    raise UpstreamError(
                        f"{self.source} returned HTTP {response.status}",
                        status=response.status,
                        source=self.source,
                    )
                if as_json:
                    return await response.json(content_type=None)
                return await response.text()
        except asyncio.TimeoutError as exc:
            raise UpstreamError(f"{self.source} request timed out", source=self.source) from exc
        except aiohttp.ClientError as exc:
            raise UpstreamError(f"{self.source} request failed: {exc}", source=self.source) from exc
        except ValueError as exc:
            raise UpstreamError(f"{self.source} returned a malformed payload", source=self.source) from exc

    async def get_json(self, endpoint: str = "", params: Optional[Dict[str, Any]] = None) -> Any:
        """GET and decode a JSON body."""
        return await self._request(endpoint, params, as_json=True)

    async def get_text(self, endpoint: str = "", params: Optional[Dict[str, Any]] = None) -> str:
        """GET and return the body as text (XML feeds)."""
        return await self._request(endpoint, params, as_json=False)

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
