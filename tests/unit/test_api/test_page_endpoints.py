"""
Unit tests for slug pages and the admin overview.
"""

from familylinx.models.documents import Person, Photo
from familylinx.services.families import create_family
from familylinx.services.groups import create_group


class TestGroupPages:

    def test_root_page(self, client, sample_tree):
        data = client.get("/pages/toknggal").json()

        assert data["group"]["id"] == "g-root"
        assert data["family"]["id"] == "demo-family"
        assert data["stats"]["total_photos"] == 6
        assert data["stats"]["sub_group_count"] == 2
        assert [c["url"] for c in data["breadcrumbs"]] == ["/toknggal"]

    def test_group_page(self, client, sample_tree):
        data = client.get("/pages/toknggal/alisulong").json()

        assert data["group"]["id"] == "g-ali"
        assert data["parent_person"]["name"] == "Ali Sulong"
        assert data["members"][0]["age_display"].endswith("years")

    def test_photo_filters(self, client, sample_tree):
        data = client.get("/pages/toknggal", params={"year": 2020}).json()

        assert {p["member_name"] for p in data["photos"]} == {"Ali Sulong", "Adam"}
        assert data["available_years"] == [2020, 2000, 1985, 1970, 1950]

    def test_family_id_fallback(self, client, sample_tree):
        assert client.get("/pages/demo-family").json()["group"]["id"] == "g-root"

    def test_unknown_pages(self, client, sample_tree):
        assert client.get("/pages/nobody").status_code == 404
        assert client.get("/pages/toknggal/nobody").status_code == 404


class TestFamilyWidePages:

    def test_calendar_page(self, client, sample_tree):
        client.post("/families/demo-family/calendar", json={
            "title": "Reunion",
            "start_date": "2001-01-01T00:00:00Z",
            "end_date": "2001-01-01T04:00:00Z",
            "created_by": "Tok",
        })

        data = client.get("/pages/toknggal/calendar").json()

        assert data["root_slug"] == "toknggal"
        assert data["upcoming"] == []
        assert [e["title"] for e in data["events"]] == ["Reunion"]

    def test_albums_page(self, client, sample_tree):
        client.post("/families/demo-family/albums", json={"title": "Raya", "url": "https://x/a.jpg", "album_date": "2023-04"})
        client.post("/families/demo-family/albums", json={"title": "Trip", "url": "https://x/b.jpg", "album_date": "2020-04"})

        data = client.get("/pages/toknggal/albums", params={"year": "2020"}).json()

        assert [a["title"] for a in data["albums"]] == ["Trip"]
        assert data["years"] == ["2023", "2020"]

    def test_timeline_page(self, client, sample_tree):
        data = client.get("/pages/toknggal/timeline").json()

        # Only Ali has three photos
        assert [p["id"] for p in data["people"]] == ["p-ali"]
        assert [p["year_taken"] for p in data["people"][0]["photos"]] == [1985, 2000, 2020]

    def test_timeline_query(self, client, sample_tree):
        assert client.get("/pages/toknggal/timeline", params={"q": "siti"}).json()["people"] == []


class TestAdminOverview:

    def test_overview(self, client, sample_tree):
        data = client.get("/admin/overview").json()

        assert data["total_groups"] == 3
        assert data["total_members"] == 5
        assert data["total_photos"] == 6
        assert {row["url"] for row in data["groups"]} == {"/toknggal", "/toknggal/ngahjusoh", "/toknggal/alisulong"}

    def test_sorted_desc(self, client, sample_tree):
        data = client.get("/admin/overview", params={"sort": "photoCount", "direction": "desc"}).json()
        assert [row["photo_count"] for row in data["groups"]] == [3, 2, 1]

    def test_bad_sort_field(self, client, sample_tree):
        assert client.get("/admin/overview", params={"sort": "color"}).status_code == 400

    def test_bad_direction(self, client, sample_tree):
        assert client.get("/admin/overview", params={"direction": "up"}).status_code == 422

    def test_uses_real_blob_sizes(self, client, sample_tree, storage, db_session):
        other = create_family(db_session, "other-family", "Other Family")
        url = storage.upload("photos/other-family/p1/1_a.jpg", b"x" * 3072)
        create_group(db_session, other.id, name="Main")
        create_group(
            db_session,
            other.id,
            name="Second",
            slug="second-root",
            members=[Person(name="Lee", photos=[Photo(url=url, year_taken=2001)])],
        )

        data = client.get("/admin/overview", params={"q": "second"}).json()

        assert [row["group_name"] for row in data["groups"]] == ["Second"]
        lee = next(p for p in data["photos"] if p["member_name"] == "Lee")
        assert lee["estimated_size_kb"] == 3
