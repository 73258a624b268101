from masterplan.media.loader import MediaHandle, MediaLoader
from masterplan.media.storage import responsive_urls, storage_public_url

__all__ = ["MediaHandle", "MediaLoader", "responsive_urls", "storage_public_url"]
