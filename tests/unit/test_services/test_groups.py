"""
Unit tests for group CRUD, slug rules and sub-group creation.
"""

import pytest
from sqlalchemy.orm import Session

from familylinx.exceptions import (
    FamilyNotFoundError,
    GroupNotFoundError,
    HierarchyError,
    PersonNotFoundError,
    SlugConflictError,
)
from familylinx.models.documents import Person
from familylinx.models.family import Family
from familylinx.services.families import create_family
from familylinx.services.groups import (
    create_group,
    create_sub_group,
    delete_group,
    get_all_groups,
    get_group,
    is_slug_available,
    load_tree,
    require_group,
    unique_slug,
    update_group,
)


class TestCreateGroup:

    def test_slug_derived_from_name(self, db_session: Session, family: Family):
        group = create_group(db_session, family.id, name="Tok Nggal Family")

        assert group.slug == "tok-nggal-family"
        assert group.is_root
        assert group.members == []

    def test_derived_slug_gets_suffix(self, db_session: Session, family: Family):
        create_group(db_session, family.id, name="Main")
        second = create_group(db_session, family.id, name="Main")
        third = create_group(db_session, family.id, name="Main")

        assert second.slug == "main-2"
        assert third.slug == "main-3"

    def test_explicit_slug_is_normalized(self, db_session: Session, family: Family):
        group = create_group(db_session, family.id, name="Main", slug="Tok Nggal")
        assert group.slug == "tok-nggal"

    def test_punctuation_only_slug_falls_back_to_name(self, db_session: Session, family: Family):
        create_group(db_session, family.id, name="Main")

        group = create_group(db_session, family.id, name="Main", slug="!!!")

        assert group.slug == "main-2"

    def test_explicit_slug_conflict(self, db_session: Session, family: Family):
        create_group(db_session, family.id, name="Main", slug="toknggal")

        with pytest.raises(SlugConflictError):
            create_group(db_session, family.id, name="Other", slug="toknggal")

    def test_root_slug_unique_across_families(self, db_session: Session, family: Family):
        create_group(db_session, family.id, name="Main", slug="toknggal")
        other = create_family(db_session, "other-family", "Other Family")

        with pytest.raises(SlugConflictError):
            create_group(db_session, other.id, name="Main", slug="toknggal")

    def test_child_slug_may_repeat_in_other_family(self, db_session: Session, family: Family):
        root = create_group(db_session, family.id, name="Main", slug="main-a")
        create_group(db_session, family.id, name="Kids", slug="kids", parent_group_id=root.id)
        other = create_family(db_session, "other-family", "Other Family")
        other_root = create_group(db_session, other.id, name="Main", slug="main-b")

        group = create_group(db_session, other.id, name="Kids", slug="kids", parent_group_id=other_root.id)

        assert group.slug == "kids"

    def test_missing_parent(self, db_session: Session, family: Family):
        with pytest.raises(HierarchyError):
            create_group(db_session, family.id, name="Kids", parent_group_id="nope")

    def test_parent_from_other_family(self, db_session: Session, family: Family):
        other = create_family(db_session, "other-family", "Other Family")
        foreign = create_group(db_session, other.id, name="Foreign")

        with pytest.raises(HierarchyError):
            create_group(db_session, family.id, name="Kids", parent_group_id=foreign.id)

    def test_unknown_family(self, db_session: Session):
        with pytest.raises(FamilyNotFoundError):
            create_group(db_session, "ghost", name="Main")

    def test_initial_members(self, db_session: Session, family: Family):
        group = create_group(db_session, family.id, name="Main", members=[Person(name="Ali")])
        assert [p.name for p in group.persons] == ["Ali"]


class TestSlugHelpers:

    def test_is_slug_available_excludes_self(self, db_session: Session, family: Family):
        group = create_group(db_session, family.id, name="Main", slug="main")

        assert is_slug_available(db_session, family.id, "main", True) is False
        assert is_slug_available(db_session, family.id, "main", True, exclude_group_id=group.id) is True

    def test_unique_slug_empty_base(self, db_session: Session, family: Family):
        assert unique_slug(db_session, family.id, "", True) is None


class TestQueries:

    def test_get_group_scoped_to_family(self, db_session: Session, family: Family):
        group = create_group(db_session, family.id, name="Main")

        assert get_group(db_session, family.id, group.id) is group
        assert get_group(db_session, "other", group.id) is None
        with pytest.raises(GroupNotFoundError):
            require_group(db_session, "other", group.id)

    def test_get_all_groups_keyed_by_id(self, sample_tree, db_session: Session):
        groups = get_all_groups(db_session, sample_tree.family.id)
        assert set(groups) == {"g-root", "g-ngah", "g-ali"}


class TestUpdateGroup:

    def test_update_fields(self, db_session: Session, family: Family):
        group = create_group(db_session, family.id, name="Main", slug="main")

        update_group(db_session, family.id, group.id, name="Renamed", description="New", slug="Renamed Slug")

        assert group.name == "Renamed"
        assert group.description == "New"
        assert group.slug == "renamed-slug"

    def test_empty_slug_clears(self, db_session: Session, family: Family):
        group = create_group(db_session, family.id, name="Main", slug="main")

        update_group(db_session, family.id, group.id, slug="")

        assert group.slug is None

    def test_slug_conflict(self, db_session: Session, family: Family):
        create_group(db_session, family.id, name="A", slug="taken")
        group = create_group(db_session, family.id, name="B", slug="free")

        with pytest.raises(SlugConflictError):
            update_group(db_session, family.id, group.id, slug="taken")

    def test_unchanged_slug_is_allowed(self, db_session: Session, family: Family):
        group = create_group(db_session, family.id, name="A", slug="mine")
        update_group(db_session, family.id, group.id, slug="mine")
        assert group.slug == "mine"


class TestDeleteGroup:

    def test_refuses_with_children(self, sample_tree, db_session: Session):
        with pytest.raises(HierarchyError):
            delete_group(db_session, sample_tree.family.id, "g-ngah")

    def test_cascade_removes_descendants(self, sample_tree, db_session: Session):
        removed = delete_group(db_session, sample_tree.family.id, "g-ngah", cascade=True)

        assert set(removed) == {"g-ngah", "g-ali"}
        assert set(get_all_groups(db_session, sample_tree.family.id)) == {"g-root"}

    def test_clears_sub_group_links(self, sample_tree, db_session: Session):
        delete_group(db_session, sample_tree.family.id, "g-ngah", cascade=True)

        root = require_group(db_session, sample_tree.family.id, "g-root")
        ngah = next(p for p in root.persons if p.id == "p-ngah")
        assert ngah.sub_group_id is None

    def test_leaf_delete(self, sample_tree, db_session: Session):
        assert delete_group(db_session, sample_tree.family.id, "g-ali") == ["g-ali"]

    def test_unknown_group(self, family: Family, db_session: Session):
        with pytest.raises(GroupNotFoundError):
            delete_group(db_session, family.id, "nope")


class TestCreateSubGroup:

    def test_creates_and_links(self, sample_tree, db_session: Session):
        sub_group = create_sub_group(db_session, sample_tree.family.id, "p-siti")

        assert sub_group.name == "Siti's Family"
        assert sub_group.description == "Sub-group for Siti"
        assert sub_group.slug == "siti"
        assert sub_group.parent_group_id == "g-ngah"

        tree = load_tree(db_session, sample_tree.family.id)
        assert tree.parent_person(sub_group.id).id == "p-siti"

    def test_slug_made_unique(self, sample_tree, db_session: Session):
        create_group(db_session, sample_tree.family.id, name="x", slug="siti", parent_group_id="g-root")

        sub_group = create_sub_group(db_session, sample_tree.family.id, "p-siti")

        assert sub_group.slug == "siti-2"

    def test_existing_sub_group(self, sample_tree, db_session: Session):
        with pytest.raises(HierarchyError):
            create_sub_group(db_session, sample_tree.family.id, "p-ngah")

    def test_unknown_person(self, sample_tree, db_session: Session):
        with pytest.raises(PersonNotFoundError):
            create_sub_group(db_session, sample_tree.family.id, "nobody")
