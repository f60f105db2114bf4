"""
Family service.

Provides functions for:
- Creating, listing and opening families
- Resolving a family from the first URL segment (root group slug)
- JSON export and import of a family's groups
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from familylinx.exceptions import (
    FamilyExistsError,
    FamilyNotFoundError,
    HierarchyError,
    InvalidRequestError,
    SlugConflictError,
)
from familylinx.models.documents import Person
from familylinx.models.family import Family, Group
from familylinx.services.groups import (
    create_group,
    get_all_groups,
    is_slug_available,
    require_family,
)
from familylinx.utils import display_name_from_id

logger = logging.getLogger(__name__)

WELCOME_DESCRIPTION = "Welcome to your family group!"
MAIN_GROUP_DESCRIPTION = "Our wonderful family through the years"


@dataclass
class OpenedFamily:
    """A family with all its groups, as loaded when a family page opens."""

    family: Family
    groups: dict[str, Group]
    root_group_id: Optional[str]
    created: bool = False


# =============================================================================
# Family Queries
# =============================================================================


def get_family(session: Session, family_id: str) -> Optional[Family]:
    return session.get(Family, family_id)


def list_families(session: Session) -> Sequence[Family]:
    stmt = select(Family).order_by(Family.name, Family.id)
    return session.scalars(stmt).all()


def find_root_group_by_slug(session: Session, slug: str) -> Optional[Group]:
    """
    Find a root group by slug across all families.

    Returns:
        The oldest matching root group, or None
    """
    stmt = (
        select(Group)
        .where(Group.slug == slug, Group.parent_group_id.is_(None))
        .order_by(Group.created_at, Group.id)
        .limit(1)
    )
    return session.scalars(stmt).first()


def get_family_by_root_slug(session: Session, slug: str) -> tuple[Family, Optional[Group]]:
    """
    Resolve the first URL segment.

    The segment is a root group slug; when no root group has it, it is tried
    as a family id (the root group is then the family's first root).

    Raises:
        FamilyNotFoundError: Neither a root slug nor a family id matches
    """
    root = find_root_group_by_slug(session, slug)
    if root is not None:
        return root.family, root

    family = session.get(Family, slug)
    if family is None:
        raise FamilyNotFoundError(f"No family found for '{slug}'")
    return family, _first_root(get_all_groups(session, family.id))


def _first_root(groups: dict[str, Group]) -> Optional[Group]:
    return next((g for g in groups.values() if g.parent_group_id is None), None)


# =============================================================================
# Family Mutations
# =============================================================================


def create_family(session: Session, family_id: str, name: str, description: str = "") -> Family:
    """
    Create a family with a caller-chosen id.

    Raises:
        FamilyExistsError: A family with this id already exists
    """
    if session.get(Family, family_id) is not None:
        raise FamilyExistsError(f"Family {family_id} already exists")

    family = Family(id=family_id, name=name, description=description)
    session.add(family)
    session.flush()

    logger.info(f"Created family {family_id} ('{name}')")
    return family


def ensure_family(session: Session, family_id: str) -> OpenedFamily:
    """
    Open a family, creating it with a main group on first visit.

    ``the-smiths`` becomes "The Smiths Family" with a root group of the same
    name.
    """
    family = session.get(Family, family_id)
    if family is not None:
        groups = get_all_groups(session, family_id)
        root = _first_root(groups)
        return OpenedFamily(family=family, groups=groups, root_group_id=root.id if root else None)

    name = f"{display_name_from_id(family_id)} Family"
    family = create_family(session, family_id, name, WELCOME_DESCRIPTION)
    main_group = create_group(
        session,
        family_id,
        name=name,
        description=MAIN_GROUP_DESCRIPTION,
    )
    return OpenedFamily(
        family=family,
        groups={main_group.id: main_group},
        root_group_id=main_group.id,
        created=True,
    )


def delete_family(session: Session, family_id: str) -> None:
    """Delete a family with all its groups, albums and events."""
    family = require_family(session, family_id)
    groups = list(get_all_groups(session, family_id).values())

    parents = {g.id: g.parent_group_id for g in groups}

    # Children before parents
    for group in sorted(groups, key=lambda g: _depth(g.id, parents), reverse=True):
        session.delete(group)
    session.flush()

    session.delete(family)
    session.flush()
    logger.info(f"Deleted family {family_id}")


def _depth(group_id: str, parents: dict[str, Optional[str]]) -> int:
    """Number of parent links above a group, following only known groups."""
    depth = 0
    seen = {group_id}
    parent_id = parents.get(group_id)
    while parent_id and parent_id in parents and parent_id not in seen:
        seen.add(parent_id)
        depth += 1
        parent_id = parents.get(parent_id)
    return depth


# =============================================================================
# Export / Import
# =============================================================================


def export_groups(session: Session, family_id: str) -> dict[str, dict]:
    """Every group of a family as ``{group_id: document}``."""
    require_family(session, family_id)
    return {
        group_id: group.to_document()
        for group_id, group in get_all_groups(session, family_id).items()
    }


def import_groups(session: Session, family_id: str, documents: dict[str, dict]) -> list[str]:
    """
    Upsert groups from an export.

    Groups are written parents first. Existing groups with the same id are
    overwritten; others are created.

    Returns:
        Ids of the written groups

    Raises:
        HierarchyError: A parent is neither in the import nor in the family
        SlugConflictError: A slug is used by another group
        InvalidRequestError: A member document is invalid
    """
    require_family(session, family_id)
    existing = get_all_groups(session, family_id)

    docs = {group_id: {**doc, "id": group_id} for group_id, doc in documents.items()}
    for group_id, doc in docs.items():
        parent_id = doc.get("parent_group_id")
        if parent_id and parent_id not in docs and parent_id not in existing:
            raise HierarchyError(f"Parent group {parent_id} of {group_id} not found")

    parents = {group_id: doc.get("parent_group_id") for group_id, doc in docs.items()}
    written: list[str] = []
    for group_id in sorted(docs, key=lambda gid: _depth(gid, parents)):
        doc = docs[group_id]
        try:
            persons = [Person.model_validate(member) for member in doc.get("members") or []]
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid member in group {group_id}: {e}", original_error=e) from e

        parent_id = doc.get("parent_group_id") or None
        slug = doc.get("slug") or None
        if slug and not is_slug_available(
            session, family_id, slug, is_root=parent_id is None, exclude_group_id=group_id
        ):
            raise SlugConflictError(f"Slug '{slug}' is already in use")

        group = existing.get(group_id)
        if group is None:
            if session.get(Group, group_id) is not None:
                raise InvalidRequestError(f"Group id {group_id} belongs to another family")
            group = Group(id=group_id, family_id=family_id)
            session.add(group)
        group.name = doc.get("name") or group_id
        group.slug = slug
        group.description = doc.get("description") or ""
        group.parent_group_id = parent_id
        group.replace_members(persons)

        # Flush per group so parents exist before children reference them
        session.flush()
        written.append(group_id)

    logger.info(f"Imported {len(written)} group(s) into family {family_id}")
    return written