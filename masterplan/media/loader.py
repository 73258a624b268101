"""Progressive media loading with per-instance caching.

Each ``MediaLoader`` owns its cache: resolved handles keyed by source URL plus a
map of in-flight fetch tasks, so concurrent requests for one URL share a single
HTTP GET. Failures resolve to ``None`` and are not cached.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

import httpx

from masterplan.utils.config import settings
from masterplan.utils.http_client import build_async_client

logger = logging.getLogger(__name__)

OBJECT_URL_PREFIX = "blob:masterplan/"


@dataclass
class MediaHandle:
    source_url: str
    object_url: str
    content_type: str
    content: bytes = field(repr=False)
    revoked: bool = False

    @property
    def size(self) -> int:
        return len(self.content)

    def revoke(self) -> None:
        self.revoked = True
        self.content = b""


class MediaLoader:
    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        prefetch_delay: Optional[float] = None,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self.prefetch_delay = (
            settings.prefetch_delay_seconds if prefetch_delay is None else prefetch_delay
        )
        self._handles: Dict[str, MediaHandle] = {}
        self._inflight: Dict[str, asyncio.Task] = {}
        self._prefetches: Set[asyncio.Task] = set()
        self._disposed = False
        self.fetch_count = 0

    def cached(self, url: str) -> Optional[MediaHandle]:
        return self._handles.get(url)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = build_async_client()
        return self._client

    async def request(self, url: str) -> Optional[MediaHandle]:
        """Resolve ``url`` to a local handle, sharing any fetch already running."""
        if self._disposed:
            return None
        handle = self._handles.get(url)
        if handle is not None:
            return handle

        task = self._inflight.get(url)
        if task is None:
            task = asyncio.get_running_loop().create_task(self._fetch(url))
            self._inflight[url] = task
            task.add_done_callback(lambda _t, key=url: self._inflight.pop(key, None))

        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                return None
            raise

    async def _fetch(self, url: str) -> Optional[MediaHandle]:
        self.fetch_count += 1
        try:
            response = await self._get_client().get(url)
        except httpx.HTTPError as exc:
            logger.warning(f"Failed to load media {url}: {exc}")
            return None
        if not response.is_success:
            logger.warning(f"Failed to load media {url}: HTTP {response.status_code}")
            return None
        content = response.content
        if not content:
            logger.warning(f"Failed to load media {url}: empty response")
            return None
        if self._disposed:
            return None

        handle = MediaHandle(
            source_url=url,
            object_url=f"{OBJECT_URL_PREFIX}{uuid.uuid4()}",
            content_type=response.headers.get("content-type", "application/octet-stream"),
            content=content,
        )
        self._handles[url] = handle
        logger.debug(f"Cached {url} as {handle.object_url} ({handle.size} bytes)")
        return handle

    def prefetch(self, urls: Iterable[str], delay: Optional[float] = None) -> List[asyncio.Task]:
        """Schedule background requests for ``urls`` after ``delay`` seconds.

        URLs that are already cached or in flight are skipped. Must be called
        from a running event loop.
        """
        if self._disposed:
            return []
        wait = self.prefetch_delay if delay is None else delay
        loop = asyncio.get_running_loop()
        scheduled: List[asyncio.Task] = []
        for url in dict.fromkeys(u for u in urls if u):
            if url in self._handles or url in self._inflight:
                continue
            task = loop.create_task(self._deferred(url, wait))
            self._prefetches.add(task)
            task.add_done_callback(self._prefetches.discard)
            scheduled.append(task)
        return scheduled

    async def _deferred(self, url: str, delay: float) -> Optional[MediaHandle]:
        await asyncio.sleep(delay)
        return await self.request(url)

    def release(self, url: str) -> None:
        """Revoke and forget the handle for ``url``, if any."""
        handle = self._handles.pop(url, None)
        if handle is not None:
            handle.revoke()

    async def dispose(self) -> None:
        """Cancel pending work, revoke every handle and close an owned client."""
        self._disposed = True
        pending = list(self._prefetches) + list(self._inflight.values())
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        for handle in self._handles.values():
            handle.revoke()
        self._handles.clear()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
        logger.debug("Media loader disposed")
