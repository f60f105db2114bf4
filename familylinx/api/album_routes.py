"""
Album endpoints.

Albums link to externally hosted photo or video collections. Responses carry
a resolved thumbnail: the cover image, a platform thumbnail or a placeholder.
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from familylinx.api.dependencies import get_db_session
from familylinx.api.models import (
    AlbumListResponse,
    AlbumResponse,
    DeleteResponse,
    album_to_response,
)
from familylinx.services.albums import (
    album_cards,
    album_years,
    create_album,
    delete_album,
    detect_platform,
    filter_albums,
    get_album,
    get_albums,
    get_albums_by_type,
    get_photo_thumbnail_url,
    get_platform_placeholder,
    get_thumbnail_limitation,
    get_video_thumbnail_url,
    platform_supports_thumbnail,
    update_album,
)
from familylinx.services.groups import require_family

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Albums"])

AlbumType = Literal["photo", "video"]


class CreateAlbumRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    url: str = Field(..., min_length=1)
    type: AlbumType = "photo"
    description: str = Field(default="", max_length=2000)
    album_date: Optional[str] = Field(None, description="YYYY-MM")
    cover_url: Optional[str] = None


class UpdateAlbumRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    url: Optional[str] = Field(None, min_length=1)
    type: Optional[AlbumType] = None
    description: Optional[str] = Field(None, max_length=2000)
    album_date: Optional[str] = Field(None, description="YYYY-MM, empty string clears")
    cover_url: Optional[str] = Field(None, description="Empty string clears")


class ThumbnailPreviewResponse(BaseModel):
    url: str
    platform: str
    supports_thumbnail: bool
    thumbnail_url: str
    limitation: Optional[str] = None


@router.get(
    "/families/{family_id}/albums",
    response_model=AlbumListResponse,
    summary="List albums",
)
def list_albums(
    family_id: str,
    type: Optional[AlbumType] = Query(None, description="Only photo or video albums"),
    q: str = Query("", description="Search title, description and date"),
    year: Optional[str] = Query(None, pattern=r"^\d{4}$"),
    db: Session = Depends(get_db_session),
):
    """Dated albums newest first, then undated albums by creation time."""
    require_family(db, family_id)
    albums = get_albums_by_type(db, family_id, type) if type else get_albums(db, family_id)
    years = album_years(albums)
    albums = filter_albums(albums, q, year)
    return AlbumListResponse(
        albums=[album_to_response(card) for card in album_cards(albums)],
        years=years,
        total=len(albums),
    )


@router.post(
    "/families/{family_id}/albums",
    response_model=AlbumResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an album",
)
def create_album_endpoint(family_id: str, request: CreateAlbumRequest, db: Session = Depends(get_db_session)):
    album = create_album(
        db,
        family_id,
        title=request.title,
        url=request.url,
        album_type=request.type,
        description=request.description,
        album_date=request.album_date,
        cover_url=request.cover_url,
    )
    return album_to_response(album_cards([album])[0])


@router.get(
    "/families/{family_id}/albums/{album_id}",
    response_model=AlbumResponse,
    summary="Get an album",
)
def get_album_endpoint(family_id: str, album_id: str, db: Session = Depends(get_db_session)):
    return album_to_response(album_cards([get_album(db, family_id, album_id)])[0])


@router.patch(
    "/families/{family_id}/albums/{album_id}",
    response_model=AlbumResponse,
    summary="Update an album",
)
def update_album_endpoint(
    family_id: str,
    album_id: str,
    request: UpdateAlbumRequest,
    db: Session = Depends(get_db_session),
):
    album = update_album(db, family_id, album_id, request.model_dump(exclude_unset=True))
    return album_to_response(album_cards([album])[0])


@router.delete(
    "/families/{family_id}/albums/{album_id}",
    response_model=DeleteResponse,
    summary="Delete an album",
)
def delete_album_endpoint(family_id: str, album_id: str, db: Session = Depends(get_db_session)):
    delete_album(db, family_id, album_id)
    return DeleteResponse(deleted_ids=[album_id], message=f"Album {album_id} deleted")


@router.get(
    "/albums/thumbnail",
    response_model=ThumbnailPreviewResponse,
    summary="Preview the thumbnail an album URL would get",
)
def preview_thumbnail(url: str = Query(..., min_length=1), type: AlbumType = Query("photo")):
    thumbnail = get_video_thumbnail_url(url) if type == "video" else get_photo_thumbnail_url(url)
    return ThumbnailPreviewResponse(
        url=url,
        platform=detect_platform(url),
        supports_thumbnail=platform_supports_thumbnail(url),
        thumbnail_url=thumbnail or get_platform_placeholder(url, type),
        limitation=get_thumbnail_limitation(url),
    )
