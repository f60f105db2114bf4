"""
Group endpoints.

Groups form a forest inside a family. Besides CRUD these routes serve the
group view (members, stats and photos aggregated over the sub-tree) and the
hierarchy outline.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from familylinx.api.dependencies import get_db_session
from familylinx.api.models import (
    DeleteResponse,
    GroupPageResponse,
    GroupResponse,
    HierarchyNodeResponse,
    group_to_response,
    hierarchy_to_response,
    page_to_response,
)
from familylinx.exceptions import GroupNotFoundError
from familylinx.models.documents import Person
from familylinx.services.groups import (
    create_group,
    delete_group,
    get_all_groups,
    is_slug_available,
    load_tree,
    require_family,
    require_group,
    update_group,
)
from familylinx.services.navigation import build_group_page
from familylinx.utils import generate_slug

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/families/{family_id}/groups", tags=["Groups"])


class CreateGroupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    slug: Optional[str] = Field(None, description="Derived from the name when omitted")
    parent_group_id: Optional[str] = Field(None, description="Omit for a root group")
    members: list[Person] = Field(default_factory=list)


class UpdateGroupRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    slug: Optional[str] = Field(None, description="Empty string removes the slug")


class SlugAvailabilityResponse(BaseModel):
    slug: str
    available: bool


@router.get("", response_model=dict[str, GroupResponse], summary="List a family's groups")
def list_groups(family_id: str, db: Session = Depends(get_db_session)):
    require_family(db, family_id)
    return {gid: group_to_response(g) for gid, g in get_all_groups(db, family_id).items()}


@router.post(
    "",
    response_model=GroupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a group",
)
def create_group_endpoint(
    family_id: str,
    request: CreateGroupRequest,
    db: Session = Depends(get_db_session),
):
    group = create_group(
        db,
        family_id,
        name=request.name,
        description=request.description,
        slug=request.slug,
        parent_group_id=request.parent_group_id,
        members=request.members,
    )
    return group_to_response(group)


@router.get(
    "/slug-available",
    response_model=SlugAvailabilityResponse,
    summary="Check whether a slug can be used",
)
def slug_available(
    family_id: str,
    slug: str = Query(..., min_length=1),
    root: bool = Query(False, description="Check as a root group slug"),
    exclude_group_id: Optional[str] = Query(None),
    db: Session = Depends(get_db_session),
):
    normalized = generate_slug(slug)
    available = bool(normalized) and is_slug_available(
        db, family_id, normalized, root, exclude_group_id=exclude_group_id
    )
    return SlugAvailabilityResponse(slug=normalized, available=available)


@router.get("/{group_id}", response_model=GroupResponse, summary="Get a group")
def get_group_endpoint(family_id: str, group_id: str, db: Session = Depends(get_db_session)):
    return group_to_response(require_group(db, family_id, group_id))


@router.patch("/{group_id}", response_model=GroupResponse, summary="Update group info")
def update_group_endpoint(
    family_id: str,
    group_id: str,
    request: UpdateGroupRequest,
    db: Session = Depends(get_db_session),
):
    group = update_group(
        db,
        family_id,
        group_id,
        name=request.name,
        description=request.description,
        slug=request.slug,
    )
    return group_to_response(group)


@router.delete("/{group_id}", response_model=DeleteResponse, summary="Delete a group")
def delete_group_endpoint(
    family_id: str,
    group_id: str,
    cascade: bool = Query(False, description="Also delete descendant groups"),
    db: Session = Depends(get_db_session),
):
    removed = delete_group(db, family_id, group_id, cascade=cascade)
    return DeleteResponse(deleted_ids=removed, message=f"Deleted {len(removed)} group(s)")


@router.get(
    "/{group_id}/view",
    response_model=GroupPageResponse,
    summary="Group view with aggregated members and photos",
)
def view_group(
    family_id: str,
    group_id: str,
    q: str = Query("", description="Member search (name or relationship)"),
    year: Optional[int] = Query(None, description="Only photos taken in this year"),
    db: Session = Depends(get_db_session),
):
    family = require_family(db, family_id)
    page = build_group_page(family, load_tree(db, family_id), group_id, q, year)
    return page_to_response(page)


@router.get(
    "/{group_id}/hierarchy",
    response_model=HierarchyNodeResponse,
    summary="Outline of the group and its descendants",
)
def group_hierarchy(family_id: str, group_id: str, db: Session = Depends(get_db_session)):
    require_family(db, family_id)
    tree = load_tree(db, family_id)
    if tree.get(group_id) is None:
        raise GroupNotFoundError(f"Group {group_id} not found in family {family_id}")
    return hierarchy_to_response(tree.hierarchy(group_id))
