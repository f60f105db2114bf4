"""
Page resolution for slug URLs.

``/{root_slug}`` shows a family's root group and ``/{root_slug}/{group_slug}``
any group of that family. A page combines the group with everything its
screen shows: breadcrumbs, the parent person, filtered members, expanded
sub-groups, stats and the filtered photo strip.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.orm import Session

from familylinx.exceptions import GroupNotFoundError
from familylinx.models.documents import Person
from familylinx.models.family import Family, Group
from familylinx.services.families import get_family_by_root_slug
from familylinx.services.groups import load_tree
from familylinx.services.tree import Breadcrumb, GroupStats, GroupTree, PhotoEntry

logger = logging.getLogger(__name__)


@dataclass
class GroupPage:
    family: Family
    group: Group
    url: str
    breadcrumbs: list[Breadcrumb]
    parent_person: Optional[Person]
    members: list[Person]
    expanded_sub_groups: list[str]
    stats: GroupStats
    photos: list[PhotoEntry]
    available_years: list[int]
    query: str = ""
    year: Optional[int] = None
    sub_groups: dict[str, Group] = field(default_factory=dict)


def build_group_page(
    family: Family,
    tree: GroupTree,
    group_id: str,
    query: str = "",
    year: Optional[int] = None,
) -> GroupPage:
    """
    Assemble a group page from a tree snapshot.

    Sub-groups are expanded only while searching.
    """
    group = tree.get(group_id)
    if group is None:
        raise GroupNotFoundError(f"Group {group_id} not found in family {family.id}")

    query = (query or "").strip()
    all_photos = tree.collect_photos(group_id)
    expanded = tree.expanded_sub_groups(group_id) if query else []

    return GroupPage(
        family=family,
        group=group,
        url=tree.group_url(group_id),
        breadcrumbs=tree.breadcrumbs(group_id),
        parent_person=tree.parent_person(group_id),
        members=tree.filter_members(group_id, query),
        expanded_sub_groups=expanded,
        stats=tree.group_stats(group_id),
        photos=tree.filter_photos(all_photos, query, year),
        available_years=tree.available_years(all_photos),
        query=query,
        year=year,
        sub_groups={gid: tree.groups[gid] for gid in expanded},
    )


def resolve_page(
    session: Session,
    root_slug: str,
    group_slug: Optional[str] = None,
    query: str = "",
    year: Optional[int] = None,
) -> GroupPage:
    """
    Resolve a slug URL to a group page.

    Raises:
        FamilyNotFoundError: No root group or family matches ``root_slug``
        GroupNotFoundError: The family has no matching group
    """
    family, root = get_family_by_root_slug(session, root_slug)
    tree = load_tree(session, family.id)

    if group_slug is None:
        if root is None:
            raise GroupNotFoundError(f"Family {family.id} has no root group")
        target = root
    else:
        target = tree.find_by_slug(group_slug, under=root.id if root else None)
        if target is None:
            raise GroupNotFoundError(f"No group '{group_slug}' under /{root_slug}")

    logger.debug(f"Resolved /{root_slug}/{group_slug or ''} to group {target.id}")
    return build_group_page(family, tree, target.id, query, year)
