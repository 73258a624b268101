"""Shared httpx client construction for storage fetches."""
from __future__ import annotations

from typing import Optional

import httpx

from masterplan.utils.config import settings


def build_async_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create an async client rooted at the storage base URL.

    Relative asset paths (``/svgs/map.svg``) resolve against ``storage_base_url``;
    absolute URLs pass through untouched.
    """
    timeout = settings.http_timeout_seconds
    return httpx.AsyncClient(
        base_url=settings.storage_base_url,
        timeout=httpx.Timeout(connect=10.0, read=timeout, write=timeout, pool=timeout),
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        follow_redirects=True,
        transport=transport,
    )
