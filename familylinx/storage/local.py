"""
Filesystem blob storage.

Blobs live under a root directory; URLs are ``{base_url}/{path}`` and are
served by the API's ``/storage`` route.
"""

import logging
from pathlib import Path
from typing import BinaryIO, Optional
from urllib.parse import unquote, urlparse

from familylinx.exceptions import StorageError
from familylinx.storage.base import BlobStorage

logger = logging.getLogger(__name__)


class LocalBlobStorage(BlobStorage):
    """
    Blob storage backed by a local directory.

    Paths are confined to the root directory; anything resolving outside it
    is rejected.
    """

    def __init__(self, root: str | Path, base_url: str = "/storage"):
        self.root = Path(root).resolve()
        self.base_url = base_url.rstrip("/")

    def _to_path(self, url_or_path: str) -> str:
        """
        Reduce a reference to a path under the root.

        Only ``{base_url}/...`` and bare relative paths are local; any other
        URL or absolute path belongs to someone else.

        Raises:
            StorageError: The reference is not served by this storage
        """
        value = unquote(url_or_path)
        prefixes = [self.base_url]
        if "://" in self.base_url:
            prefixes.append(urlparse(self.base_url).path.rstrip("/"))

        for prefix in prefixes:
            if value.startswith(prefix + "/"):
                return value[len(prefix) + 1:]

        if "://" in value or value.startswith("/"):
            raise StorageError(f"Not a stored blob: {url_or_path!r}")
        return value

    def _resolve(self, url_or_path: str) -> Path:
        relative = self._to_path(url_or_path)
        if not relative:
            raise StorageError(f"Invalid storage path: {url_or_path!r}")

        target = (self.root / relative).resolve()
        if target != self.root and self.root not in target.parents:
            raise StorageError(f"Path escapes storage root: {url_or_path!r}")
        return target

    def upload(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to write blob {path}", original_error=e) from e

        logger.debug(f"Stored {len(data)} bytes at {path} ({content_type or 'unknown type'})")
        return self.get_url(path)

    def get_url(self, path: str) -> str:
        return f"{self.base_url}/{self._to_path(path)}"

    def delete(self, url_or_path: str) -> None:
        target = self._resolve(url_or_path)
        try:
            target.unlink()
        except FileNotFoundError as e:
            raise StorageError(f"Blob not found: {url_or_path}", original_error=e) from e
        except OSError as e:
            raise StorageError(f"Failed to delete blob {url_or_path}", original_error=e) from e

    def get_size(self, url_or_path: str) -> int:
        target = self._resolve(url_or_path)
        try:
            return target.stat().st_size
        except OSError as e:
            raise StorageError(f"Blob not found: {url_or_path}", original_error=e) from e

    def open(self, path: str) -> BinaryIO:
        target = self._resolve(path)
        try:
            return target.open("rb")
        except OSError as e:
            raise StorageError(f"Blob not found: {path}", original_error=e) from e

    def exists(self, url_or_path: str) -> bool:
        try:
            return self._resolve(url_or_path).is_file()
        except StorageError:
            return False

    def local_path(self, url_or_path: str) -> Path:
        """Filesystem location of a blob (used to serve files)."""
        return self._resolve(url_or_path)
