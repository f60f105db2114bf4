"""
Unit tests for member and photo endpoints.
"""

import pytest

from familylinx.config import get_settings

MEMBERS = "/families/demo-family/groups/g-ngah/members"


class TestMemberEndpoints:

    def test_get_member(self, client, sample_tree):
        data = client.get("/families/demo-family/groups/g-root/members/p-tok").json()

        assert data["name"] == "Tok Nggal"
        assert data["age_display"] == "70 years (1920 - 1990)"
        assert [p["year_taken"] for p in data["photos"]] == [1950, 1970]

    def test_get_missing_member(self, client, sample_tree):
        response = client.get(f"{MEMBERS}/p-tok")

        assert response.status_code == 404
        assert response.json()["error_type"] == "not_found"

    def test_add_member(self, client, sample_tree):
        response = client.post(MEMBERS, json={"name": "  Aminah ", "relationship": "daughter", "gender": "female"})

        assert response.status_code == 201
        assert response.json()["name"] == "Aminah"
        group = client.get("/families/demo-family/groups/g-ngah").json()
        assert [m["name"] for m in group["members"]] == ["Ali Sulong", "Siti", "Aminah"]

    def test_add_member_validation(self, client, sample_tree):
        assert client.post(MEMBERS, json={"name": "   "}).status_code == 422
        assert client.post(MEMBERS, json={"name": "X", "gender": "other"}).status_code == 422

    def test_update_member(self, client, sample_tree):
        response = client.patch(f"{MEMBERS}/p-siti", json={"year_of_birth": 1986, "relationship": "sister"})

        assert response.status_code == 200
        assert response.json()["year_of_birth"] == 1986
        assert response.json()["name"] == "Siti"

    def test_null_deceased_clears_year_of_death(self, client, sample_tree):
        response = client.patch("/families/demo-family/groups/g-root/members/p-tok", json={"is_deceased": None})

        data = response.json()
        assert data["is_deceased"] is None
        assert data["year_of_death"] is None

    def test_delete_member(self, client, sample_tree):
        response = client.delete(f"{MEMBERS}/p-siti")

        assert response.status_code == 200
        assert response.json()["deleted_ids"] == ["p-siti"]
        assert client.get(f"{MEMBERS}/p-siti").status_code == 404

    def test_create_sub_group(self, client, sample_tree):
        response = client.post(f"{MEMBERS}/p-siti/sub-group")

        assert response.status_code == 201
        group = response.json()
        assert group["name"] == "Siti's Family"
        assert group["parent_group_id"] == "g-ngah"
        assert client.get(f"{MEMBERS}/p-siti").json()["sub_group_id"] == group["id"]

    def test_sub_group_already_exists(self, client, sample_tree):
        assert client.post(f"{MEMBERS}/p-ali/sub-group").status_code == 409

    def test_sub_group_for_member_of_other_group(self, client, sample_tree):
        assert client.post(f"{MEMBERS}/p-adam/sub-group").status_code == 404


class TestPhotoEndpoints:

    def test_upload_one_year_for_all(self, client, sample_tree, storage):
        response = client.post(
            f"{MEMBERS}/p-siti/photos",
            files=[
                ("files", ("a.jpg", b"aaa", "image/jpeg")),
                ("files", ("b.jpg", b"bbb", "image/jpeg")),
            ],
            data={"years": "2005", "captions": ["First", "Second"]},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["failed"] == []
        assert [p["year_taken"] for p in data["uploaded"]] == [2005, 2005]
        assert [p["caption"] for p in data["person"]["photos"]] == ["First", "Second"]
        url = data["uploaded"][0]["url"]
        assert url.startswith("/storage/photos/demo-family/p-siti/")
        assert storage.exists(url)
        assert client.get(url).content == b"aaa"

    def test_upload_year_per_file(self, client, sample_tree):
        response = client.post(
            f"{MEMBERS}/p-siti/photos",
            files=[("files", ("a.jpg", b"a", "image/jpeg")), ("files", ("b.jpg", b"b", "image/jpeg"))],
            data={"years": ["1999", "2001"]},
        )

        assert [p["year_taken"] for p in response.json()["uploaded"]] == [1999, 2001]

    def test_upload_year_count_mismatch(self, client, sample_tree):
        response = client.post(
            f"{MEMBERS}/p-siti/photos",
            files=[("files", ("a.jpg", b"a", "image/jpeg")), ("files", ("b.jpg", b"b", "image/jpeg"))],
            data={"years": ["1999", "2001", "2002"]},
        )

        assert response.status_code == 400

    def test_oversize_file_is_reported(self, client, sample_tree, monkeypatch):
        monkeypatch.setattr(get_settings(), "max_upload_bytes", 4)

        response = client.post(
            f"{MEMBERS}/p-siti/photos",
            files=[("files", ("small.jpg", b"ok", "image/jpeg")), ("files", ("big.jpg", b"too large", "image/jpeg"))],
            data={"years": "2010"},
        )

        data = response.json()
        assert data["failed"] == ["big.jpg"]
        assert len(data["uploaded"]) == 1

    def test_non_image_file_is_reported(self, client, sample_tree):
        response = client.post(
            f"{MEMBERS}/p-siti/photos",
            files=[
                ("files", ("notes.txt", b"hello", "text/plain")),
                ("files", ("raya.png", b"\x89PNG", "image/png")),
                ("files", ("iphone.HEIC", b"heic", "application/octet-stream")),
            ],
            data={"years": "2015"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["failed"] == ["notes.txt"]
        assert len(data["uploaded"]) == 2
        assert all("notes" not in photo["url"] for photo in data["person"]["photos"])

    def test_link_photo(self, client, sample_tree):
        response = client.post(
            f"{MEMBERS}/p-siti/photos/link",
            json={"url": "https://img.example/siti.jpg", "year_taken": 1990, "caption": ""},
        )

        assert response.status_code == 201
        photo = response.json()
        assert photo["caption"] is None
        assert client.get(f"{MEMBERS}/p-siti").json()["photos"][0]["id"] == photo["id"]

    def test_delete_photo_removes_file(self, client, sample_tree, storage):
        uploaded = client.post(
            f"{MEMBERS}/p-siti/photos",
            files=[("files", ("a.jpg", b"a", "image/jpeg"))],
            data={"years": "2000"},
        ).json()["uploaded"][0]

        response = client.delete(f"{MEMBERS}/p-siti/photos/{uploaded['id']}")

        assert response.status_code == 200
        assert not storage.exists(uploaded["url"])
        assert client.get(f"{MEMBERS}/p-siti").json()["photos"] == []

    @pytest.mark.parametrize("photo_id", ["ph-missing", "ph-tok-1"])
    def test_delete_unknown_photo(self, client, sample_tree, photo_id):
        assert client.delete(f"{MEMBERS}/p-ali/photos/{photo_id}").status_code == 404
