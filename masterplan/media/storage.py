"""Public storage URLs for media assets."""
from __future__ import annotations

from typing import Dict, Optional

import httpx

from masterplan.utils.config import settings

RESPONSIVE_SIZES: Dict[str, Optional[Dict[str, object]]] = {
    "thumbnail": {"width": 150, "height": 150, "quality": 70, "format": "webp"},
    "small": {"width": 400, "quality": 80, "format": "webp"},
    "medium": {"width": 800, "quality": 85, "format": "webp"},
    "large": {"width": 1200, "quality": 90, "format": "webp"},
    "original": None,
}


def storage_public_url(
    path: str,
    bucket: Optional[str] = None,
    transform: Optional[Dict[str, object]] = None,
    base_url: Optional[str] = None,
) -> str:
    """Public URL of ``path`` inside ``bucket``.

    With a ``transform`` (width/height/quality/format) the render endpoint is used
    and the options are passed as query parameters.
    """
    base = (base_url or settings.storage_base_url).rstrip("/")
    bucket = bucket or settings.storage_bucket
    path = path.lstrip("/")
    if not transform:
        return f"{base}/storage/v1/object/public/{bucket}/{path}"
    params = {key: str(value) for key, value in transform.items() if value}
    return str(httpx.URL(f"{base}/storage/v1/render/image/public/{bucket}/{path}", params=params))


def responsive_urls(path: str, bucket: Optional[str] = None) -> Dict[str, str]:
    return {
        name: storage_public_url(path, bucket, transform)
        for name, transform in RESPONSIVE_SIZES.items()
    }


def lot_image_path(lot_slug: str, kind: str = "main") -> str:
    """Storage path for a lot image: ``zona-a-manzana-1-lote-01`` -> ``zona-a/manzana-1/lote-01-main.jpg``."""
    parts = lot_slug.split("-")
    zone = "-".join(parts[0:2])
    block = "-".join(parts[2:4])
    lot = "-".join(parts[4:])
    return f"{zone}/{block}/{lot}-{kind}.jpg"
