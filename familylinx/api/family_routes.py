"""
Family endpoints.

Families are created explicitly or opened by id (first visit creates the
family with a main group). Export and import move a family's groups as a
single JSON document keyed by group id.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from familylinx.api.dependencies import get_db_session
from familylinx.api.models import (
    DeleteResponse,
    FamilyListResponse,
    FamilyResponse,
    OpenFamilyResponse,
    family_to_response,
    group_to_response,
)
from familylinx.config import get_settings
from familylinx.exceptions import FamilyNotFoundError
from familylinx.services.families import (
    create_family,
    delete_family,
    ensure_family,
    export_groups,
    get_family,
    import_groups,
    list_families,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/families", tags=["Families"])


# =============================================================================
# Request Models
# =============================================================================


class CreateFamilyRequest(BaseModel):
    id: str = Field(..., min_length=1, max_length=100, pattern=r"^[A-Za-z0-9_-]+$")
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)


class ImportGroupsRequest(BaseModel):
    """Group documents keyed by group id, as produced by the export endpoint."""

    groups: dict[str, dict[str, Any]]


class ImportGroupsResponse(BaseModel):
    family_id: str
    imported: list[str]
    total: int


# =============================================================================
# Endpoints
# =============================================================================


@router.get("", response_model=FamilyListResponse, summary="List families")
def list_families_endpoint(db: Session = Depends(get_db_session)):
    families = list_families(db)
    return FamilyListResponse(
        families=[family_to_response(f) for f in families],
        total=len(families),
    )


@router.post(
    "",
    response_model=FamilyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a family",
)
def create_family_endpoint(request: CreateFamilyRequest, db: Session = Depends(get_db_session)):
    family = create_family(db, request.id, request.name, request.description)
    return family_to_response(family)


@router.get("/{family_id}", response_model=FamilyResponse, summary="Get a family")
def get_family_endpoint(family_id: str, db: Session = Depends(get_db_session)):
    family = get_family(db, family_id)
    if family is None:
        raise FamilyNotFoundError(f"Family {family_id} not found")
    return family_to_response(family)


def _open_family(db: Session, family_id: str) -> OpenFamilyResponse:
    opened = ensure_family(db, family_id)
    if opened.created:
        logger.info(f"Family {family_id} created on first visit")
    return OpenFamilyResponse(
        family=family_to_response(opened.family),
        groups={gid: group_to_response(g) for gid, g in opened.groups.items()},
        root_group_id=opened.root_group_id,
        created=opened.created,
    )


@router.post("/open", response_model=OpenFamilyResponse, summary="Open the default family")
def open_default_family_endpoint(db: Session = Depends(get_db_session)):
    return _open_family(db, get_settings().default_family_id)


@router.post(
    "/{family_id}/open",
    response_model=OpenFamilyResponse,
    summary="Open a family, creating it on first visit",
)
def open_family_endpoint(family_id: str, db: Session = Depends(get_db_session)):
    """
    Load a family with all of its groups.

    An unknown id creates ``"{Display Name} Family"`` with one main root group.
    """
    return _open_family(db, family_id)


@router.delete("/{family_id}", response_model=DeleteResponse, summary="Delete a family")
def delete_family_endpoint(family_id: str, db: Session = Depends(get_db_session)):
    delete_family(db, family_id)
    return DeleteResponse(deleted_ids=[family_id], message=f"Family {family_id} deleted")


@router.get("/{family_id}/export", summary="Export all groups as one document")
def export_family_endpoint(family_id: str, db: Session = Depends(get_db_session)) -> dict[str, Any]:
    return {"family_id": family_id, "groups": export_groups(db, family_id)}


@router.post(
    "/{family_id}/import",
    response_model=ImportGroupsResponse,
    summary="Import group documents",
)
def import_family_endpoint(
    family_id: str,
    request: ImportGroupsRequest,
    db: Session = Depends(get_db_session),
):
    """Create or replace groups by id; parents must exist or be part of the import."""
    imported = import_groups(db, family_id, request.groups)
    return ImportGroupsResponse(family_id=family_id, imported=imported, total=len(imported))
