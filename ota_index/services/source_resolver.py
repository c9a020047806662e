"""
Resolve source entries to their JSON array content.

Raw entries resolve to their inline value. URL entries are fetched over HTTP;
any ordinary failure (transport error, timeout, non-success status, non-array
body) resolves to None so the source merges as empty. A body that is not valid
JSON at all raises SourcePayloadError.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, List, Optional, Sequence

import httpx

from ota_index.domain.exceptions import SourcePayloadError
from ota_index.domain.models import SourceEntry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_CONCURRENT_FETCHES = 8


class SourceResolver:
    """
    Fetches source contents using a shared httpx.AsyncClient.

    Pass `client` to reuse an existing client (tests use this with
    httpx.MockTransport); otherwise one is created per `async with` block.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_concurrent_fetches: int = DEFAULT_MAX_CONCURRENT_FETCHES,
    ):
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._max_concurrent_fetches = max_concurrent_fetches

    async def __aenter__(self) -> "SourceResolver":
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True, timeout=self._timeout)
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_json_array(self, url: str) -> Optional[List[Any]]:
        """
        Fetch a URL and return its body if it is a JSON array, else None.
        """
        if self._client is None:
            raise RuntimeError("SourceResolver must be used as an async context manager")

        try:
            logger.info(f"Fetching {url}")
            response = await self._client.get(url, headers={"Cache-Control": "no-store"})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Fetch failed for {url}: {e!r}")
            return None

        if not response.is_success:
            logger.warning(f"Non-OK response from {url}: {response.status_code}")
            return None

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SourcePayloadError(url, str(e)) from e

        if not isinstance(data, list):
            logger.warning(f"JSON from {url} is not an array")
            return None

        logger.info(f"Fetched {len(data)} item(s) from {url}")
        return data

    async def resolve(self, entry: SourceEntry) -> Optional[List[Any]]:
        if entry.kind == "raw":
            return list(entry.value)
        return await self.fetch_json_array(entry.value)

    async def resolve_all(self, entries: Sequence[SourceEntry]) -> List[Optional[List[Any]]]:
        """
        Resolve every entry concurrently; results keep the order of `entries`.

        All fetches finish before the first error (in entry order) is raised,
        so nothing is left running once this returns.
        """
        semaphore = asyncio.Semaphore(self._max_concurrent_fetches)

        async def _bounded(entry: SourceEntry) -> Optional[List[Any]]:
            async with semaphore:
                return await self.resolve(entry)

        results = await asyncio.gather(*(_bounded(entry) for entry in entries), return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)
