"""
Blob storage for member photos.

Provides the storage interface, the filesystem backend and a lazily created
process-wide instance configured from settings.
"""

import logging
from typing import Optional

from familylinx.config import get_settings
from familylinx.storage.base import BlobStorage, build_photo_path, PHOTOS_PREFIX
from familylinx.storage.local import LocalBlobStorage

logger = logging.getLogger(__name__)

# Singleton instance
_blob_storage: Optional[BlobStorage] = None


def get_blob_storage() -> BlobStorage:
    """Get the configured blob storage, creating it on first use."""
    global _blob_storage
    if _blob_storage is None:
        settings = get_settings()
        _blob_storage = LocalBlobStorage(settings.storage_root, settings.storage_base_url)
        logger.info(f"Using local blob storage at {settings.storage_root}")
    return _blob_storage


def reset_blob_storage() -> None:
    """Drop the cached instance (used by tests)."""
    global _blob_storage
    _blob_storage = None


__all__ = [
    "BlobStorage",
    "LocalBlobStorage",
    "PHOTOS_PREFIX",
    "build_photo_path",
    "get_blob_storage",
    "reset_blob_storage",
]
