"""
Admin overview.

Walks every group of every family and reports member and photo counts, group
page URLs, per-photo storage sizes and rough storage and document size
estimates.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Optional

from sqlalchemy.orm import Session

from familylinx.exceptions import InvalidRequestError, StorageError
from familylinx.services.families import list_families
from familylinx.services.groups import load_tree
from familylinx.storage import BlobStorage
from familylinx.utils import as_utc

logger = logging.getLogger(__name__)

# Assumed size when a photo's blob cannot be inspected
DEFAULT_PHOTO_SIZE_KB = 500

GROUP_SORT_FIELDS = ("familyName", "groupName", "slug", "url", "memberCount", "photoCount", "createdAt")
PHOTO_SORT_FIELDS = ("memberName", "groupName", "familyName", "yearTaken", "estimatedSize")


@dataclass
class GroupRow:
    family_id: str
    family_name: str
    group_id: str
    group_name: str
    slug: Optional[str]
    url: str
    member_count: int
    photo_count: int
    parent_group_id: Optional[str]
    created_at: Optional[str]


@dataclass
class PhotoRow:
    photo_id: str
    photo_url: str
    member_name: str
    group_name: str
    family_name: str
    year_taken: int
    estimated_size_kb: int


@dataclass
class AdminOverview:
    groups: list[GroupRow] = field(default_factory=list)
    photos: list[PhotoRow] = field(default_factory=list)
    total_members: int = 0
    total_photos: int = 0
    estimated_storage_mb: float = 0.0
    estimated_db_mb: float = 0.0


_GROUP_SORT_KEYS = {
    "familyName": lambda row: row.family_name,
    "groupName": lambda row: row.group_name,
    "slug": lambda row: row.slug or "",
    "url": lambda row: row.url,
    "memberCount": lambda row: row.member_count,
    "photoCount": lambda row: row.photo_count,
    "createdAt": lambda row: row.created_at or "",
}

_PHOTO_SORT_KEYS = {
    "memberName": lambda row: row.member_name,
    "groupName": lambda row: row.group_name,
    "familyName": lambda row: row.family_name,
    "yearTaken": lambda row: row.year_taken,
    "estimatedSize": lambda row: row.estimated_size_kb,
}


def photo_size_kb(storage: Optional[BlobStorage], url: str) -> int:
    """Blob size in KB, or the default when it cannot be read."""
    if storage is None:
        return DEFAULT_PHOTO_SIZE_KB
    try:
        return round(storage.get_size(url) / 1024)
    except StorageError as e:
        logger.warning(f"Error getting size for photo {url}: {e}")
        return DEFAULT_PHOTO_SIZE_KB


def filter_group_rows(rows: list[GroupRow], query: str) -> list[GroupRow]:
    """Case-insensitive match on family name, group name, slug or URL."""
    if not query:
        return list(rows)
    q = query.lower()
    return [
        row for row in rows
        if q in row.family_name.lower()
        or q in row.group_name.lower()
        or (row.slug and q in row.slug.lower())
        or q in row.url.lower()
    ]


def sort_group_rows(rows: list[GroupRow], sort_field: str = "familyName", direction: str = "asc") -> list[GroupRow]:
    if sort_field not in _GROUP_SORT_KEYS:
        raise InvalidRequestError(f"Cannot sort groups by '{sort_field}'")
    return sorted(rows, key=_GROUP_SORT_KEYS[sort_field], reverse=direction == "desc")


def sort_photo_rows(rows: list[PhotoRow], sort_field: str = "memberName", direction: str = "asc") -> list[PhotoRow]:
    if sort_field not in _PHOTO_SORT_KEYS:
        raise InvalidRequestError(f"Cannot sort photos by '{sort_field}'")
    return sorted(rows, key=_PHOTO_SORT_KEYS[sort_field], reverse=direction == "desc")


def build_admin_overview(
    session: Session,
    storage: Optional[BlobStorage] = None,
    query: str = "",
    sort_field: str = "familyName",
    direction: str = "asc",
    photo_sort_field: str = "memberName",
) -> AdminOverview:
    """
    Collect the admin overview across all families.

    Totals and size estimates cover every group; ``query`` and the sort
    options only shape the returned group rows (and photo order).
    """
    if direction not in ("asc", "desc"):
        raise InvalidRequestError(f"Sort direction must be 'asc' or 'desc', got '{direction}'")

    overview = AdminOverview()

    for family in list_families(session):
        family_name = family.name or "Unknown Family"
        tree = load_tree(session, family.id)

        for group_id, group in tree.groups.items():
            persons = tree.persons(group_id)
            member_count = len(persons)
            photo_count = sum(len(p.photos) for p in persons)
            overview.total_members += member_count
            overview.total_photos += photo_count

            for person in persons:
                for photo in person.photos:
                    overview.photos.append(PhotoRow(
                        photo_id=photo.id,
                        photo_url=photo.url,
                        member_name=person.name,
                        group_name=group.name,
                        family_name=family_name,
                        year_taken=photo.year_taken,
                        estimated_size_kb=photo_size_kb(storage, photo.url),
                    ))

            created_at = as_utc(group.created_at)
            overview.groups.append(GroupRow(
                family_id=family.id,
                family_name=family_name,
                group_id=group.id,
                group_name=group.name,
                slug=group.slug,
                url=tree.group_url(group_id),
                member_count=member_count,
                photo_count=photo_count,
                parent_group_id=group.parent_group_id,
                created_at=created_at.isoformat() if created_at else None,
            ))

    total_kb = sum(row.estimated_size_kb for row in overview.photos)
    overview.estimated_storage_mb = round(total_kb / 1024, 2)

    document = json.dumps([asdict(row) for row in overview.groups])
    overview.estimated_db_mb = round(len(document.encode("utf-8")) / (1024 * 1024), 4)

    overview.groups = sort_group_rows(filter_group_rows(overview.groups, query), sort_field, direction)
    overview.photos = sort_photo_rows(overview.photos, photo_sort_field, direction)
    return overview
