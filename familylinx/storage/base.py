"""
Blob storage interface.

Photos are stored under ``photos/{family_id}/{person_id}/{timestamp}_{filename}``
and referenced from person documents by URL. Backends translate between
storage paths and public URLs.
"""

from abc import ABC, abstractmethod
from pathlib import PurePosixPath
from typing import BinaryIO, Optional

from familylinx.utils import current_timestamp_ms

PHOTOS_PREFIX = "photos"


def build_photo_path(
    family_id: str,
    person_id: str,
    filename: str,
    timestamp: Optional[int] = None,
) -> str:
    """
    Build the storage path for an uploaded photo.

    Only the final component of ``filename`` is kept.
    """
    ts = timestamp if timestamp is not None else current_timestamp_ms()
    safe_name = PurePosixPath(filename.replace("\\", "/")).name or "photo"
    return f"{PHOTOS_PREFIX}/{family_id}/{person_id}/{ts}_{safe_name}"


class BlobStorage(ABC):
    """Abstract blob store used for member photos."""

    @abstractmethod
    def upload(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        """
        Store ``data`` at ``path``.

        Returns:
            Public URL of the stored blob

        Raises:
            StorageError: If the blob cannot be written
        """

    @abstractmethod
    def get_url(self, path: str) -> str:
        """Public URL for a storage path."""

    @abstractmethod
    def delete(self, url_or_path: str) -> None:
        """
        Remove a blob.

        Raises:
            StorageError: If the blob does not exist or cannot be removed
        """

    @abstractmethod
    def get_size(self, url_or_path: str) -> int:
        """
        Size of a blob in bytes.

        Raises:
            StorageError: If the blob cannot be found
        """

    @abstractmethod
    def open(self, path: str) -> BinaryIO:
        """Open a blob for reading."""

    @abstractmethod
    def exists(self, url_or_path: str) -> bool:
        """Check if a blob exists."""
