"""
Unit tests for the GroupTree aggregation and navigation helpers.

Trees are built from unsaved Group objects; no database is needed.
"""

from datetime import datetime, timezone
from typing import Optional

import pytest

from familylinx.models.documents import Person, Photo
from familylinx.models.family import Group
from familylinx.services.tree import GroupTree


def _group(group_id: str, name: str, slug: Optional[str], parent: Optional[str], members: list[Person],
           created: Optional[datetime] = None) -> Group:
    group = Group(id=group_id, family_id="demo-family", name=name, slug=slug, parent_group_id=parent)
    group.replace_members(members)
    group.created_at = created
    return group


def _photo(photo_id: str, year: int) -> Photo:
    return Photo(id=photo_id, url=f"https://img.example/{photo_id}.jpg", year_taken=year)


@pytest.fixture
def tree() -> GroupTree:
    root = _group("g-root", "Tok Nggal Family", "toknggal", None, [
        Person(id="p-tok", name="Tok Nggal", relationship="grandfather", year_of_birth=1920,
               is_deceased=True, year_of_death=1990, photos=[_photo("tok-1", 1950), _photo("tok-2", 1970)]),
        Person(id="p-ngah", name="Ngah Jusoh", relationship="son", year_of_birth=1950, sub_group_id="g-ngah"),
    ])
    ngah = _group("g-ngah", "Ngah Jusoh's Family", "ngahjusoh", "g-root", [
        Person(id="p-ali", name="Ali Sulong", relationship="son", year_of_birth=1980, sub_group_id="g-ali",
               photos=[_photo("ali-3", 2020), _photo("ali-1", 1985), _photo("ali-2", 2000)]),
        Person(id="p-siti", name="Siti", relationship="daughter", year_of_birth=1985),
    ])
    ali = _group("g-ali", "Ali Sulong's Family", "alisulong", "g-ngah", [
        Person(id="p-adam", name="Adam", relationship="son", year_of_birth=2010, photos=[_photo("adam-1", 2020)]),
    ])
    return GroupTree.from_groups([root, ngah, ali], family_id="demo-family")


class TestAggregation:

    def test_count_members_is_recursive(self, tree: GroupTree):
        assert tree.count_members("g-root") == 5
        assert tree.count_members("g-ngah") == 3
        assert tree.count_members("g-ali") == 1

    def test_collect_photos_in_traversal_order(self, tree: GroupTree):
        photos = tree.collect_photos("g-root")

        assert [p.photo.id for p in photos] == ["tok-1", "tok-2", "ali-3", "ali-1", "ali-2", "adam-1"]
        adam = photos[-1]
        assert adam.member_name == "Adam"
        assert adam.member_year_of_birth == 2010
        assert adam.group_id == "g-ali"

    def test_average_age_uses_year_of_death(self, tree: GroupTree):
        # 70 + 75 + 45 + 15 + 40
        assert tree.average_age("g-root", current_year=2025) == 49.0

    def test_average_age_ignores_unknown_birth_years(self):
        group = _group("g", "G", "g", None, [Person(name="A"), Person(name="B", year_of_birth=2000)])
        tree = GroupTree.from_groups([group])

        assert tree.average_age("g", current_year=2025) == 25.0

    def test_average_age_none_without_known_births(self):
        tree = GroupTree.from_groups([_group("g", "G", "g", None, [Person(name="A")])])
        assert tree.average_age("g") is None

    def test_group_stats(self, tree: GroupTree):
        stats = tree.group_stats("g-root", current_year=2025)

        assert stats.direct_members == 2
        assert stats.total_members == 5
        assert stats.direct_photos == 2
        assert stats.total_photos == 6
        assert stats.average_age == 49.0
        assert stats.sub_group_count == 2

    def test_cycles_terminate(self):
        a = _group("g-a", "A", "a", None, [Person(id="p1", name="One", sub_group_id="g-b")])
        b = _group("g-b", "B", "b", "g-a", [Person(id="p2", name="Two", sub_group_id="g-a")])
        tree = GroupTree.from_groups([a, b])

        assert tree.count_members("g-a") == 2
        assert sorted(tree.expanded_sub_groups("g-a")) == ["g-b"]

    def test_dangling_sub_group_is_ignored(self):
        group = _group("g", "G", "g", None, [Person(name="A", sub_group_id="missing")])
        tree = GroupTree.from_groups([group])

        assert tree.count_members("g") == 1
        assert tree.expanded_sub_groups("g") == []


class TestSearch:

    def test_empty_query_keeps_everyone_oldest_first(self, tree: GroupTree):
        assert [p.name for p in tree.filter_members("g-ngah")] == ["Ali Sulong", "Siti"]

    def test_match_on_name(self, tree: GroupTree):
        assert [p.id for p in tree.filter_members("g-root", "TOK")] == ["p-tok"]

    def test_match_on_relationship(self, tree: GroupTree):
        assert [p.id for p in tree.filter_members("g-ngah", "daughter")] == ["p-siti"]

    def test_member_kept_when_sub_group_matches(self, tree: GroupTree):
        assert [p.id for p in tree.filter_members("g-root", "adam")] == ["p-ngah"]

    def test_has_matching_members(self, tree: GroupTree):
        assert tree.has_matching_members("g-root", "adam") is True
        assert tree.has_matching_members("g-ali", "siti") is False

    def test_expanded_sub_groups(self, tree: GroupTree):
        assert sorted(tree.expanded_sub_groups("g-root")) == ["g-ali", "g-ngah"]

    def test_available_years_newest_first(self, tree: GroupTree):
        assert tree.available_years(tree.collect_photos("g-root")) == [2020, 2000, 1985, 1970, 1950]

    def test_filter_photos_by_member_name(self, tree: GroupTree):
        photos = tree.filter_photos(tree.collect_photos("g-root"), "ali")
        assert {p.photo.id for p in photos} == {"ali-1", "ali-2", "ali-3"}

    def test_filter_photos_by_year_text(self, tree: GroupTree):
        photos = tree.filter_photos(tree.collect_photos("g-root"), "1950")
        assert [p.photo.id for p in photos] == ["tok-1"]

    def test_filter_photos_by_exact_year(self, tree: GroupTree):
        photos = tree.filter_photos(tree.collect_photos("g-root"), year=2020)
        assert [p.photo.id for p in photos] == ["ali-3", "adam-1"]

    def test_timeline_people(self, tree: GroupTree):
        people = tree.timeline_people()

        assert [p.id for p in people] == ["p-ali"]
        assert [ph.year_taken for ph in people[0].photos] == [1985, 2000, 2020]

    def test_timeline_query(self, tree: GroupTree):
        assert tree.timeline_people("tok") == []
        assert len(tree.timeline_people("tok", min_photos=2)) == 1


class TestNavigation:

    def test_parent_person(self, tree: GroupTree):
        assert tree.parent_person("g-ngah").id == "p-ngah"
        assert tree.parent_person("g-root") is None

    def test_find_person(self, tree: GroupTree):
        group, person = tree.find_person("p-adam")
        assert group.id == "g-ali"
        assert person.name == "Adam"
        assert tree.find_person("nobody") is None

    def test_ancestors(self, tree: GroupTree):
        assert [g.id for g in tree.ancestors("g-ali")] == ["g-root", "g-ngah", "g-ali"]

    def test_group_urls(self, tree: GroupTree):
        assert tree.group_url("g-root") == "/toknggal"
        assert tree.group_url("g-ali") == "/toknggal/alisulong"

    def test_root_without_slug_uses_family_id(self):
        tree = GroupTree.from_groups([_group("g", "Main", None, None, [])])
        assert tree.group_url("g") == "/demo-family"

    def test_broken_chain_uses_unknown_root(self):
        orphan = _group("g-orphan", "Orphan", None, "gone", [])
        tree = GroupTree.from_groups([orphan])

        assert tree.find_root("g-orphan") is None
        assert tree.group_url("g-orphan") == "/unknown/g-orphan"

    def test_breadcrumbs(self, tree: GroupTree):
        crumbs = tree.breadcrumbs("g-ali")

        assert [c.url for c in crumbs] == ["/toknggal", "/toknggal/ngahjusoh", "/toknggal/alisulong"]
        assert crumbs[-1].name == "Ali Sulong's Family"

    def test_descendants_breadth_first(self, tree: GroupTree):
        assert [g.id for g in tree.descendants("g-root")] == ["g-ngah", "g-ali"]

    def test_roots_oldest_first(self):
        later = _group("g-2", "Second", "second", None, [], datetime(2025, 2, 1, tzinfo=timezone.utc))
        earlier = _group("g-1", "First", "first", None, [], datetime(2025, 1, 1))
        tree = GroupTree.from_groups([later, earlier])

        assert [g.id for g in tree.roots()] == ["g-1", "g-2"]

    def test_find_by_slug_and_id(self, tree: GroupTree):
        assert tree.find_by_slug("alisulong").id == "g-ali"
        assert tree.find_by_slug("g-ngah").id == "g-ngah"
        assert tree.find_by_slug("nope") is None

    def test_find_by_slug_prefers_descendants_of_root(self):
        other_root = _group("g-x", "Other", "other", None, [], datetime(2024, 1, 1, tzinfo=timezone.utc))
        stray = _group("g-stray", "Stray", "kids", "g-x", [], datetime(2024, 1, 2, tzinfo=timezone.utc))
        root = _group("g-r", "Root", "root", None, [], datetime(2025, 1, 1, tzinfo=timezone.utc))
        mine = _group("g-mine", "Mine", "kids", "g-r", [], datetime(2025, 1, 2, tzinfo=timezone.utc))
        tree = GroupTree.from_groups([other_root, stray, root, mine])

        assert tree.find_by_slug("kids").id == "g-stray"
        assert tree.find_by_slug("kids", under="g-r").id == "g-mine"

    def test_hierarchy(self, tree: GroupTree):
        node = tree.hierarchy("g-root")
        walked = [(depth, n.path, n.member_count) for depth, n in node.walk()]

        assert walked == [
            (0, "toknggal", 2),
            (1, "toknggal/ngahjusoh", 2),
            (2, "toknggal/ngahjusoh/alisulong", 1),
        ]
