"""
Maintenance helpers used by the command line tool.

Groups are addressed by slug paths such as ``toknggal/ngahjusoh/alisulong``:
the first segment is a root group slug searched across all families, each
further segment is the slug of a child of the previous group.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from familylinx.exceptions import GroupNotFoundError
from familylinx.models.documents import Person
from familylinx.models.family import Group
from familylinx.services.families import find_root_group_by_slug
from familylinx.services.tree import GroupTree
from familylinx.utils import generate_id

logger = logging.getLogger(__name__)


def split_path(path: str) -> list[str]:
    return [segment for segment in path.strip().split("/") if segment]


def find_group_by_slug_and_parent(
    session: Session,
    family_id: str,
    slug: str,
    parent_group_id: str,
) -> Optional[Group]:
    stmt = (
        select(Group)
        .where(
            Group.family_id == family_id,
            Group.slug == slug,
            Group.parent_group_id == parent_group_id,
        )
        .order_by(Group.created_at, Group.id)
        .limit(1)
    )
    return session.scalars(stmt).first()


def resolve_group_path(session: Session, path: str) -> Group:
    """
    Resolve a slug path to a group.

    Raises:
        GroupNotFoundError: Some prefix of the path does not exist; the
            message names that prefix
    """
    segments = split_path(path)
    if not segments:
        raise GroupNotFoundError("Empty group path")

    group = find_root_group_by_slug(session, segments[0])
    if group is None:
        raise GroupNotFoundError(f"Could not find /{segments[0]} root group")

    for index, slug in enumerate(segments[1:], start=2):
        group = find_group_by_slug_and_parent(session, group.family_id, slug, group.id)
        if group is None:
            raise GroupNotFoundError(f"Could not find /{'/'.join(segments[:index])} group")

    return group


def copy_person(person: Person) -> Person:
    """A copy of a person with new person and photo ids and no sub-group link."""
    return person.model_copy(update={
        "id": generate_id(),
        "sub_group_id": None,
        "photos": [
            photo.model_copy(update={"id": generate_id("photo")})
            for photo in person.photos
        ],
    })


def copy_members(session: Session, source: Group, destination: Group) -> list[Person]:
    """
    Append copies of every member of ``source`` to ``destination``.

    Existing destination members are kept.

    Returns:
        The copied members as written
    """
    copies = [copy_person(person) for person in source.persons]
    if not copies:
        logger.info(f"No members found in group {source.id}")
        return []

    destination.replace_members(destination.persons + copies)
    session.flush()

    logger.info(f"Copied {len(copies)} member(s) from group {source.id} to {destination.id}")
    return copies


def search_groups(tree: GroupTree, text: str) -> list[Group]:
    """Groups whose slug equals ``text`` or whose name contains it."""
    needle = text.lower()
    return [
        group for group in tree.groups.values()
        if group.slug == text or (group.name and needle in group.name.lower())
    ]

