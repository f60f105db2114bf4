"""
Member and photo gallery endpoints.

Members are embedded in their group's document, so every change here
rewrites the group's member list.
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from familylinx.api.dependencies import get_db_session, get_storage
from familylinx.api.models import (
    DeleteResponse,
    GroupResponse,
    PersonResponse,
    PhotoResponse,
    group_to_response,
    person_to_response,
)
from familylinx.config import get_settings
from familylinx.exceptions import InvalidRequestError
from familylinx.models.documents import Person, Photo
from familylinx.services.groups import create_sub_group
from familylinx.services.members import (
    PhotoUpload,
    add_person_to_group,
    add_photo_to_person,
    delete_person,
    get_person,
    remove_photo_from_person,
    update_person,
    upload_photos_for_person,
)
from familylinx.storage import BlobStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/families/{family_id}/groups/{group_id}/members", tags=["Members"])


class UpdatePersonRequest(BaseModel):
    """Fields to change. Sending ``is_deceased`` as false or null also clears ``year_of_death``."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    relationship: Optional[str] = Field(None, max_length=100)
    gender: Optional[Literal["male", "female"]] = None
    year_of_birth: Optional[int] = Field(None, ge=0)
    is_deceased: Optional[bool] = None
    year_of_death: Optional[int] = Field(None, ge=0)
    sub_group_id: Optional[str] = None


class AddPhotoRequest(BaseModel):
    url: str = Field(..., min_length=1)
    year_taken: int
    caption: Optional[str] = None


class UploadPhotosResponse(BaseModel):
    person: PersonResponse
    uploaded: list[PhotoResponse]
    failed: list[str] = Field(default_factory=list, description="Filenames that could not be stored")


@router.get("/{person_id}", response_model=PersonResponse, summary="Get a member")
def get_member(family_id: str, group_id: str, person_id: str, db: Session = Depends(get_db_session)):
    return person_to_response(get_person(db, family_id, group_id, person_id))


@router.post(
    "",
    response_model=PersonResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a member to the group",
)
def add_member(family_id: str, group_id: str, person: Person, db: Session = Depends(get_db_session)):
    return person_to_response(add_person_to_group(db, family_id, group_id, person))


@router.patch("/{person_id}", response_model=PersonResponse, summary="Update a member")
def update_member(
    family_id: str,
    group_id: str,
    person_id: str,
    request: UpdatePersonRequest,
    db: Session = Depends(get_db_session),
):
    # Only fields the client sent, so an explicit null is_deceased still clears
    updates = request.model_dump(exclude_unset=True)
    return person_to_response(update_person(db, family_id, group_id, person_id, updates))


@router.delete("/{person_id}", response_model=DeleteResponse, summary="Remove a member")
def delete_member(
    family_id: str,
    group_id: str,
    person_id: str,
    db: Session = Depends(get_db_session),
    storage: BlobStorage = Depends(get_storage),
):
    removed = delete_person(db, family_id, group_id, person_id, storage=storage)
    return DeleteResponse(deleted_ids=[removed.id], message=f"Removed {removed.name}")


@router.post(
    "/{person_id}/sub-group",
    response_model=GroupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create the member's own family group",
)
def create_member_sub_group(
    family_id: str,
    group_id: str,
    person_id: str,
    db: Session = Depends(get_db_session),
):
    # Confirms the member belongs to this group before linking
    get_person(db, family_id, group_id, person_id)
    return group_to_response(create_sub_group(db, family_id, person_id))


# =============================================================================
# Photos
# =============================================================================


@router.post(
    "/{person_id}/photos",
    response_model=UploadPhotosResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload photos",
)
def upload_member_photos(
    family_id: str,
    group_id: str,
    person_id: str,
    files: list[UploadFile] = File(..., description="Image files"),
    years: list[int] = Form(..., description="Year taken, one per file or one for all"),
    captions: list[str] = Form(default=[], description="Optional caption per file"),
    db: Session = Depends(get_db_session),
    storage: BlobStorage = Depends(get_storage),
):
    """
    Store each file under the member's photo folder and append it to the gallery.

    Files that are too large, are not images or fail to store are reported
    in ``failed``.
    """
    if len(years) not in (1, len(files)):
        raise InvalidRequestError(f"Expected 1 or {len(files)} years, got {len(years)}")
    if len(years) == 1:
        years = years * len(files)

    max_bytes = get_settings().max_upload_bytes
    uploads: list[PhotoUpload] = []
    rejected: list[str] = []
    for index, upload in enumerate(files):
        filename = upload.filename or f"photo-{index + 1}"
        data = upload.file.read()
        if len(data) > max_bytes:
            logger.warning(f"Rejected {filename}: {len(data)} bytes exceeds {max_bytes}")
            rejected.append(filename)
            continue
        uploads.append(PhotoUpload(
            filename=filename,
            data=data,
            year_taken=years[index],
            caption=captions[index] if index < len(captions) else None,
            content_type=upload.content_type,
        ))

    result = upload_photos_for_person(db, storage, family_id, group_id, person_id, uploads)
    return UploadPhotosResponse(
        person=person_to_response(result.person),
        uploaded=[PhotoResponse(**p.model_dump()) for p in result.uploaded],
        failed=rejected + result.failed,
    )


@router.post(
    "/{person_id}/photos/link",
    response_model=PhotoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a photo by URL",
)
def link_member_photo(
    family_id: str,
    group_id: str,
    person_id: str,
    request: AddPhotoRequest,
    db: Session = Depends(get_db_session),
):
    photo = Photo(url=request.url, year_taken=request.year_taken, caption=request.caption or None)
    photo = add_photo_to_person(db, family_id, group_id, person_id, photo)
    return PhotoResponse(**photo.model_dump())


@router.delete(
    "/{person_id}/photos/{photo_id}",
    response_model=DeleteResponse,
    summary="Remove a photo and its file",
)
def delete_member_photo(
    family_id: str,
    group_id: str,
    person_id: str,
    photo_id: str,
    db: Session = Depends(get_db_session),
    storage: BlobStorage = Depends(get_storage),
):
    remove_photo_from_person(db, family_id, group_id, person_id, photo_id, storage=storage)
    return DeleteResponse(deleted_ids=[photo_id], message=f"Photo {photo_id} removed")
