"""
Unit tests for the maintenance helpers behind the command line tool.
"""

import pytest
from sqlalchemy.orm import Session

from familylinx.exceptions import GroupNotFoundError
from familylinx.services.groups import load_tree
from familylinx.services.migration import (
    copy_members,
    copy_person,
    resolve_group_path,
    search_groups,
    split_path,
)


def test_split_path():
    assert split_path("/toknggal//ngahjusoh/ ") == ["toknggal", "ngahjusoh"]
    assert split_path("toknggal/ngahjusoh") == ["toknggal", "ngahjusoh"]
    assert split_path("") == []


class TestResolveGroupPath:

    def test_root(self, sample_tree, db_session: Session):
        assert resolve_group_path(db_session, "toknggal").id == "g-root"

    def test_nested(self, sample_tree, db_session: Session):
        assert resolve_group_path(db_session, "/toknggal/ngahjusoh/alisulong").id == "g-ali"

    def test_missing_root(self, sample_tree, db_session: Session):
        with pytest.raises(GroupNotFoundError, match="/nobody root group"):
            resolve_group_path(db_session, "nobody/ngahjusoh")

    def test_missing_segment_names_prefix(self, sample_tree, db_session: Session):
        # alisulong is a grandchild, not a child, of the root
        with pytest.raises(GroupNotFoundError, match="/toknggal/alisulong group"):
            resolve_group_path(db_session, "toknggal/alisulong")

    def test_empty(self, db_session: Session):
        with pytest.raises(GroupNotFoundError):
            resolve_group_path(db_session, " / ")


class TestCopyMembers:

    def test_copy_person_gets_new_ids(self, sample_tree):
        ali = next(p for p in sample_tree.ngah_group.persons if p.id == "p-ali")

        copy = copy_person(ali)

        assert copy.id != ali.id
        assert copy.name == ali.name
        assert copy.sub_group_id is None
        assert [p.url for p in copy.photos] == [p.url for p in ali.photos]
        assert not {p.id for p in copy.photos} & {p.id for p in ali.photos}

    def test_appends_copies(self, sample_tree, db_session: Session):
        copies = copy_members(db_session, sample_tree.ngah_group, sample_tree.ali_group)

        assert [p.name for p in copies] == ["Ali Sulong", "Siti"]
        assert [p.name for p in sample_tree.ali_group.persons] == ["Adam", "Ali Sulong", "Siti"]
        # Source untouched
        assert [p.id for p in sample_tree.ngah_group.persons] == ["p-ali", "p-siti"]

    def test_empty_source(self, sample_tree, db_session: Session):
        sample_tree.ali_group.replace_members([])

        assert copy_members(db_session, sample_tree.ali_group, sample_tree.root) == []
        assert len(sample_tree.root.persons) == 2


def test_search_groups(sample_tree, db_session: Session):
    tree = load_tree(db_session, "demo-family")

    assert [g.id for g in search_groups(tree, "ngahjusoh")] == ["g-ngah"]
    assert {g.id for g in search_groups(tree, "family")} == {"g-root", "g-ngah", "g-ali"}
