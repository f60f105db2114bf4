"""
Unit tests for the filesystem blob storage.
"""

import pytest

from familylinx.exceptions import StorageError
from familylinx.config import get_settings
from familylinx.storage import LocalBlobStorage, build_photo_path, get_blob_storage, reset_blob_storage


class TestBuildPhotoPath:

    def test_layout(self):
        assert build_photo_path("fam", "p1", "beach.jpg", 123) == "photos/fam/p1/123_beach.jpg"

    def test_strips_directories(self):
        assert build_photo_path("fam", "p1", "../../etc/passwd", 1) == "photos/fam/p1/1_passwd"
        assert build_photo_path("fam", "p1", "C:\\pics\\me.png", 1) == "photos/fam/p1/1_me.png"


class TestLocalBlobStorage:

    def test_upload_returns_public_url(self, storage: LocalBlobStorage):
        url = storage.upload("photos/fam/p1/1_a.jpg", b"abc", "image/jpeg")

        assert url == "/storage/photos/fam/p1/1_a.jpg"
        assert (storage.root / "photos/fam/p1/1_a.jpg").read_bytes() == b"abc"

    def test_size_and_exists_accept_urls(self, storage: LocalBlobStorage):
        url = storage.upload("photos/a.jpg", b"12345")

        assert storage.exists(url)
        assert storage.get_size(url) == 5
        assert storage.get_size("photos/a.jpg") == 5

    def test_absolute_base_url(self, tmp_path):
        storage = LocalBlobStorage(tmp_path, base_url="http://localhost:8000/storage")
        url = storage.upload("photos/a.jpg", b"12345")

        assert url == "http://localhost:8000/storage/photos/a.jpg"
        assert storage.get_size(url) == 5
        assert storage.get_size("/storage/photos/a.jpg") == 5

    def test_foreign_urls_are_not_local(self, storage: LocalBlobStorage):
        storage.upload("photos/fam/p-siti/1_siti.jpg", b"keep")
        foreign = "https://cdn.example.com/photos/fam/p-siti/1_siti.jpg"

        assert not storage.exists(foreign)
        with pytest.raises(StorageError):
            storage.get_size(foreign)
        with pytest.raises(StorageError):
            storage.delete(foreign)
        with pytest.raises(StorageError):
            storage.delete("/photos/fam/p-siti/1_siti.jpg")
        assert storage.exists("photos/fam/p-siti/1_siti.jpg")

    def test_open(self, storage: LocalBlobStorage):
        storage.upload("photos/a.jpg", b"data")

        with storage.open("photos/a.jpg") as fh:
            assert fh.read() == b"data"

    def test_delete(self, storage: LocalBlobStorage):
        url = storage.upload("photos/a.jpg", b"data")

        storage.delete(url)

        assert not storage.exists(url)

    def test_delete_missing_raises(self, storage: LocalBlobStorage):
        with pytest.raises(StorageError):
            storage.delete("photos/missing.jpg")

    def test_size_of_missing_raises(self, storage: LocalBlobStorage):
        with pytest.raises(StorageError):
            storage.get_size("/storage/photos/missing.jpg")

    def test_paths_cannot_escape_root(self, storage: LocalBlobStorage):
        with pytest.raises(StorageError):
            storage.upload("../outside.txt", b"x")
        assert storage.exists("../../etc/passwd") is False


def test_get_blob_storage_uses_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(get_settings(), "storage_root", str(tmp_path / "configured"))
    reset_blob_storage()
    try:
        storage = get_blob_storage()

        assert isinstance(storage, LocalBlobStorage)
        assert storage is get_blob_storage()
        assert storage.upload("photos/a.jpg", b"x") == "/storage/photos/a.jpg"
        assert (tmp_path / "configured" / "photos" / "a.jpg").exists()
    finally:
        reset_blob_storage()
