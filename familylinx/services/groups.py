"""
Group service.

Provides functions for:
- Creating, reading, updating and deleting groups
- Slug availability checks
- Creating a sub-group for a member
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from familylinx.exceptions import (
    FamilyNotFoundError,
    GroupNotFoundError,
    HierarchyError,
    PersonNotFoundError,
    SlugConflictError,
)
from familylinx.models.documents import Person
from familylinx.models.family import Family, Group
from familylinx.services.tree import GroupTree
from familylinx.utils import generate_slug

logger = logging.getLogger(__name__)


# =============================================================================
# Queries
# =============================================================================


def require_family(session: Session, family_id: str) -> Family:
    family = session.get(Family, family_id)
    if family is None:
        raise FamilyNotFoundError(f"Family {family_id} not found")
    return family


def get_group(session: Session, family_id: str, group_id: str) -> Optional[Group]:
    """
    Get a group of a family.

    Returns:
        Group or None if it does not exist or belongs to another family
    """
    group = session.get(Group, group_id)
    if group is None or group.family_id != family_id:
        return None
    return group


def require_group(session: Session, family_id: str, group_id: str) -> Group:
    group = get_group(session, family_id, group_id)
    if group is None:
        raise GroupNotFoundError(f"Group {group_id} not found in family {family_id}")
    return group


def get_all_groups(session: Session, family_id: str) -> dict[str, Group]:
    """
    Get all groups of a family keyed by id.

    Returns:
        ``{group_id: Group}`` in creation order
    """
    stmt = (
        select(Group)
        .where(Group.family_id == family_id)
        .order_by(Group.created_at, Group.id)
    )
    return {group.id: group for group in session.scalars(stmt).all()}


def load_tree(session: Session, family_id: str) -> GroupTree:
    """Snapshot of a family's groups for aggregation and navigation."""
    return GroupTree(get_all_groups(session, family_id), family_id=family_id)


# =============================================================================
# Slugs
# =============================================================================


def is_slug_available(
    session: Session,
    family_id: str,
    slug: str,
    is_root: bool,
    exclude_group_id: Optional[str] = None,
) -> bool:
    """
    Check whether a slug can be used by a group.

    Slugs are unique within a family. Root slugs are also the first URL
    segment, so they must not be used by a root group of any other family.
    """
    conditions = [Group.slug == slug, Group.family_id == family_id]
    if exclude_group_id:
        conditions.append(Group.id != exclude_group_id)
    if session.scalars(select(Group.id).where(*conditions).limit(1)).first():
        return False

    if is_root:
        stmt = select(Group.id).where(Group.slug == slug, Group.parent_group_id.is_(None))
        if exclude_group_id:
            stmt = stmt.where(Group.id != exclude_group_id)
        if session.scalars(stmt.limit(1)).first():
            return False

    return True


def unique_slug(session: Session, family_id: str, base: str, is_root: bool) -> Optional[str]:
    """``base``, or ``base-2``, ``base-3``... whichever is free first."""
    if not base:
        return None
    candidate = base
    suffix = 2
    while not is_slug_available(session, family_id, candidate, is_root):
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


# =============================================================================
# Mutations
# =============================================================================


def create_group(
    session: Session,
    family_id: str,
    name: str,
    description: str = "",
    slug: Optional[str] = None,
    parent_group_id: Optional[str] = None,
    group_id: Optional[str] = None,
    members: Optional[list[Person]] = None,
) -> Group:
    """
    Create a group in a family.

    Args:
        session: Database session
        family_id: Owning family
        name: Group name
        description: Group description
        slug: Explicit slug; derived from the name (and made unique) when omitted
            or when it has no URL-safe characters
        parent_group_id: Parent group in the same family (None for a root)
        group_id: Explicit id (generated when omitted)
        members: Initial members

    Raises:
        FamilyNotFoundError: Family does not exist
        HierarchyError: Parent is missing or in another family
        SlugConflictError: Explicit slug is already taken
    """
    require_family(session, family_id)
    is_root = parent_group_id is None

    if not is_root and get_group(session, family_id, parent_group_id) is None:
        raise HierarchyError(f"Parent group {parent_group_id} not found in family {family_id}")

    slug = generate_slug(slug) if slug else None
    if slug:
        if not is_slug_available(session, family_id, slug, is_root):
            raise SlugConflictError(f"Slug '{slug}' is already in use")
    else:
        slug = unique_slug(session, family_id, generate_slug(name), is_root)

    group = Group(
        family_id=family_id,
        name=name,
        slug=slug,
        description=description or "",
        parent_group_id=parent_group_id,
    )
    if group_id:
        group.id = group_id
    group.replace_members(members or [])

    session.add(group)
    session.flush()

    logger.info(f"Created group {group.id} ('{name}', slug={slug}) in family {family_id}")
    return group


def update_group(
    session: Session,
    family_id: str,
    group_id: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
    slug: Optional[str] = None,
) -> Group:
    """
    Update group info. Only provided fields change.

    An empty ``slug`` string removes the slug.

    Raises:
        GroupNotFoundError: Group does not exist
        SlugConflictError: New slug is already taken
    """
    group = require_group(session, family_id, group_id)

    if name is not None:
        group.name = name
    if description is not None:
        group.description = description
    if slug is not None:
        new_slug = generate_slug(slug) or None
        if new_slug and new_slug != group.slug:
            if not is_slug_available(session, family_id, new_slug, group.is_root, exclude_group_id=group.id):
                raise SlugConflictError(f"Slug '{new_slug}' is already in use")
        group.slug = new_slug

    group.touch()
    session.flush()

    logger.info(f"Updated group {group_id} in family {family_id}")
    return group


def delete_group(
    session: Session,
    family_id: str,
    group_id: str,
    cascade: bool = False,
) -> list[str]:
    """
    Delete a group.

    With ``cascade`` the group's descendants are removed too. Members that
    pointed at a removed group lose their ``sub_group_id``.

    Returns:
        Ids of all removed groups

    Raises:
        GroupNotFoundError: Group does not exist
        HierarchyError: Group has child groups and ``cascade`` is False
    """
    tree = load_tree(session, family_id)
    group = tree.get(group_id)
    if group is None:
        raise GroupNotFoundError(f"Group {group_id} not found in family {family_id}")

    descendants = tree.descendants(group_id)
    if descendants and not cascade:
        raise HierarchyError(
            f"Group {group_id} has {len(descendants)} child group(s); delete them first or cascade"
        )

    # Deepest first
    doomed = [group] + descendants
    removed_ids = [g.id for g in doomed]
    for g in reversed(doomed):
        session.delete(g)

    removed = set(removed_ids)
    for other in tree.groups.values():
        if other.id in removed:
            continue
        persons = other.persons
        if any(p.sub_group_id in removed for p in persons):
            for p in persons:
                if p.sub_group_id in removed:
                    p.sub_group_id = None
            other.replace_members(persons)

    session.flush()
    logger.info(f"Deleted group(s) {removed_ids} from family {family_id}")
    return removed_ids


def create_sub_group(session: Session, family_id: str, person_id: str) -> Group:
    """
    Create a sub-group for a member and link it through ``sub_group_id``.

    The new group is named ``"{name}'s Family"`` and is a child of the group
    holding the member.

    Raises:
        PersonNotFoundError: No group of the family holds the person
        HierarchyError: The person already has a sub-group
    """
    tree = load_tree(session, family_id)
    found = tree.find_person(person_id)
    if found is None:
        raise PersonNotFoundError(f"Person {person_id} not found in family {family_id}")

    parent_group, person = found
    if person.sub_group_id and tree.get(person.sub_group_id) is not None:
        raise HierarchyError(f"{person.name} already has a sub-group ({person.sub_group_id})")

    sub_group = create_group(
        session,
        family_id,
        name=f"{person.name}'s Family",
        description=f"Sub-group for {person.name}",
        slug=unique_slug(session, family_id, generate_slug(person.name), is_root=False),
        parent_group_id=parent_group.id,
    )

    persons = parent_group.persons
    for p in persons:
        if p.id == person_id:
            p.sub_group_id = sub_group.id
    parent_group.replace_members(persons)
    session.flush()

    logger.info(f"Linked {person.name} ({person_id}) to sub-group {sub_group.id}")
    return sub_group
