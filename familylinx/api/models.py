"""
Pydantic response models for the FamilyLinX API.

Request models live next to the routes that accept them; the responses here
are shared between routers.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from familylinx.models import Album, CalendarEvent, Family, Group, Person
from familylinx.services.admin import AdminOverview
from familylinx.services.albums import AlbumCard
from familylinx.services.calendar import EventOccurrence
from familylinx.services.navigation import GroupPage
from familylinx.services.tree import Breadcrumb, GroupStats, HierarchyNode, PhotoEntry
from familylinx.utils import as_utc, get_age_display


def _iso(value: Optional[datetime]) -> Optional[str]:
    value = as_utc(value)
    return value.isoformat() if value else None


# =============================================================================
# Families and Groups
# =============================================================================


class PhotoResponse(BaseModel):
    id: str
    url: str
    year_taken: int
    caption: Optional[str] = None


class PersonResponse(BaseModel):
    """A member with a display age."""

    id: str
    name: str
    relationship: str = ""
    gender: Optional[Literal["male", "female"]] = None
    year_of_birth: int = 0
    is_deceased: Optional[bool] = None
    year_of_death: Optional[int] = None
    photos: list[PhotoResponse] = Field(default_factory=list)
    sub_group_id: Optional[str] = None
    age_display: str = Field("", description="e.g. '45 years' or '80 years (1900 - 1980)'")


class FamilyResponse(BaseModel):
    id: str
    name: str
    description: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class FamilyListResponse(BaseModel):
    families: list[FamilyResponse]
    total: int


class GroupResponse(BaseModel):
    id: str
    family_id: str
    name: str
    slug: Optional[str] = None
    description: str = ""
    members: list[PersonResponse] = Field(default_factory=list)
    parent_group_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class OpenFamilyResponse(BaseModel):
    """A family opened by id, created on first visit."""

    family: FamilyResponse
    groups: dict[str, GroupResponse]
    root_group_id: Optional[str] = None
    created: bool = Field(False, description="True when the family was just created")


class DeleteResponse(BaseModel):
    success: bool = True
    deleted_ids: list[str] = Field(default_factory=list)
    message: str = ""


def person_to_response(person: Person) -> PersonResponse:
    return PersonResponse(
        **person.model_dump(),
        age_display=get_age_display(person.year_of_birth, person.is_deceased, person.year_of_death),
    )


def family_to_response(family: Family) -> FamilyResponse:
    return FamilyResponse(
        id=family.id,
        name=family.name,
        description=family.description or "",
        created_at=_iso(family.created_at),
        updated_at=_iso(family.updated_at),
    )


def group_to_response(group: Group) -> GroupResponse:
    return GroupResponse(
        id=group.id,
        family_id=group.family_id,
        name=group.name,
        slug=group.slug,
        description=group.description or "",
        members=[person_to_response(p) for p in group.persons],
        parent_group_id=group.parent_group_id,
        created_at=_iso(group.created_at),
        updated_at=_iso(group.updated_at),
    )


# =============================================================================
# Group Pages
# =============================================================================


class BreadcrumbResponse(BaseModel):
    id: str
    name: str
    slug: Optional[str] = None
    url: str


class GroupStatsResponse(BaseModel):
    direct_members: int
    total_members: int
    direct_photos: int
    total_photos: int
    average_age: Optional[float] = None
    sub_group_count: int


class PhotoEntryResponse(BaseModel):
    """A photo in the group photo strip, tagged with its member."""

    id: str
    url: str
    year_taken: int
    caption: Optional[str] = None
    member_id: str
    member_name: str
    member_year_of_birth: int
    group_id: str


class GroupPageResponse(BaseModel):
    family: FamilyResponse
    group: GroupResponse
    url: str
    breadcrumbs: list[BreadcrumbResponse]
    parent_person: Optional[PersonResponse] = None
    members: list[PersonResponse]
    expanded_sub_groups: list[str]
    sub_groups: dict[str, GroupResponse] = Field(default_factory=dict)
    stats: GroupStatsResponse
    photos: list[PhotoEntryResponse]
    available_years: list[int]
    query: str = ""
    year: Optional[int] = None


class HierarchyNodeResponse(BaseModel):
    id: str
    name: str
    slug: Optional[str] = None
    path: str
    member_count: int
    children: list["HierarchyNodeResponse"] = Field(default_factory=list)


def breadcrumb_to_response(crumb: Breadcrumb) -> BreadcrumbResponse:
    return BreadcrumbResponse(id=crumb.id, name=crumb.name, slug=crumb.slug, url=crumb.url)


def stats_to_response(stats: GroupStats) -> GroupStatsResponse:
    return GroupStatsResponse(
        direct_members=stats.direct_members,
        total_members=stats.total_members,
        direct_photos=stats.direct_photos,
        total_photos=stats.total_photos,
        average_age=stats.average_age,
        sub_group_count=stats.sub_group_count,
    )


def photo_entry_to_response(entry: PhotoEntry) -> PhotoEntryResponse:
    return PhotoEntryResponse(
        id=entry.photo.id,
        url=entry.photo.url,
        year_taken=entry.photo.year_taken,
        caption=entry.photo.caption,
        member_id=entry.member_id,
        member_name=entry.member_name,
        member_year_of_birth=entry.member_year_of_birth,
        group_id=entry.group_id,
    )


def page_to_response(page: GroupPage) -> GroupPageResponse:
    return GroupPageResponse(
        family=family_to_response(page.family),
        group=group_to_response(page.group),
        url=page.url,
        breadcrumbs=[breadcrumb_to_response(c) for c in page.breadcrumbs],
        parent_person=person_to_response(page.parent_person) if page.parent_person else None,
        members=[person_to_response(p) for p in page.members],
        expanded_sub_groups=page.expanded_sub_groups,
        sub_groups={gid: group_to_response(g) for gid, g in page.sub_groups.items()},
        stats=stats_to_response(page.stats),
        photos=[photo_entry_to_response(e) for e in page.photos],
        available_years=page.available_years,
        query=page.query,
        year=page.year,
    )


def hierarchy_to_response(node: HierarchyNode) -> HierarchyNodeResponse:
    return HierarchyNodeResponse(
        id=node.id,
        name=node.name,
        slug=node.slug,
        path=node.path,
        member_count=node.member_count,
        children=[hierarchy_to_response(child) for child in node.children],
    )


# =============================================================================
# Albums
# =============================================================================


class AlbumResponse(BaseModel):
    id: str
    family_id: str
    title: str
    description: str = ""
    url: str
    type: Literal["photo", "video"]
    album_date: Optional[str] = None
    cover_url: Optional[str] = None
    thumbnail_url: str = Field(..., description="Cover, platform thumbnail or placeholder")
    platform: str
    thumbnail_limitation: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AlbumListResponse(BaseModel):
    albums: list[AlbumResponse]
    years: list[str] = Field(default_factory=list, description="Years of dated albums, newest first")
    total: int


def album_to_response(card: AlbumCard) -> AlbumResponse:
    album: Album = card.album
    return AlbumResponse(
        id=album.id,
        family_id=album.family_id,
        title=album.title,
        description=album.description or "",
        url=album.url,
        type=album.type,
        album_date=album.album_date,
        cover_url=album.cover_url,
        thumbnail_url=card.thumbnail_url,
        platform=card.platform,
        thumbnail_limitation=card.thumbnail_limitation,
        created_at=_iso(album.created_at),
        updated_at=_iso(album.updated_at),
    )


# =============================================================================
# Calendar
# =============================================================================


class CalendarEventResponse(BaseModel):
    id: str
    family_id: str
    title: str
    description: Optional[str] = None
    start_date: str
    end_date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    all_day: bool
    category: str
    color: Optional[str] = None
    location: Optional[str] = None
    attendees: list[str] = Field(default_factory=list)
    created_by: str
    is_recurring: bool = False
    recurrence_rule: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CalendarEventListResponse(BaseModel):
    events: list[CalendarEventResponse]
    total: int


class OccurrenceResponse(BaseModel):
    event: CalendarEventResponse
    start: str
    end: str
    occurrence_id: Optional[str] = None


def event_to_response(event: CalendarEvent) -> CalendarEventResponse:
    return CalendarEventResponse(
        id=event.id,
        family_id=event.family_id,
        title=event.title,
        description=event.description,
        start_date=_iso(event.start_date),
        end_date=_iso(event.end_date),
        start_time=event.start_time,
        end_time=event.end_time,
        all_day=event.all_day,
        category=event.category,
        color=event.color,
        location=event.location,
        attendees=list(event.attendees or []),
        created_by=event.created_by,
        is_recurring=event.is_recurring,
        recurrence_rule=event.recurrence_rule,
        created_at=_iso(event.created_at),
        updated_at=_iso(event.updated_at),
    )


def occurrence_to_response(occurrence: EventOccurrence) -> OccurrenceResponse:
    return OccurrenceResponse(
        event=event_to_response(occurrence.event),
        start=_iso(occurrence.start),
        end=_iso(occurrence.end),
        occurrence_id=occurrence.occurrence_id,
    )


# =============================================================================
# Admin and System
# =============================================================================


class AdminGroupRowResponse(BaseModel):
    family_id: str
    family_name: str
    group_id: str
    group_name: str
    slug: Optional[str] = None
    url: str
    member_count: int
    photo_count: int
    parent_group_id: Optional[str] = None
    created_at: Optional[str] = None


class AdminPhotoRowResponse(BaseModel):
    photo_id: str
    photo_url: str
    member_name: str
    group_name: str
    family_name: str
    year_taken: int
    estimated_size_kb: int


class AdminOverviewResponse(BaseModel):
    groups: list[AdminGroupRowResponse]
    photos: list[AdminPhotoRowResponse]
    total_groups: int
    total_members: int
    total_photos: int
    estimated_storage_mb: float
    estimated_db_mb: float


def overview_to_response(overview: AdminOverview) -> AdminOverviewResponse:
    return AdminOverviewResponse(
        groups=[AdminGroupRowResponse(**vars(row)) for row in overview.groups],
        photos=[AdminPhotoRowResponse(**vars(row)) for row in overview.photos],
        total_groups=len(overview.groups),
        total_members=overview.total_members,
        total_photos=overview.total_photos,
        estimated_storage_mb=overview.estimated_storage_mb,
        estimated_db_mb=overview.estimated_db_mb,
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Health status")
    version: str = Field(..., description="API version")
    database_connected: bool = Field(..., description="Database connection status")


class AboutResponse(BaseModel):
    name: str
    version: str
    description: str
    features: list[str]


class ErrorResponse(BaseModel):
    """Error body returned by every exception handler."""

    error_type: str = Field(..., description="Machine readable error category")
    message: str = Field(..., description="Human readable message")
    retryable: bool = Field(False, description="Whether retrying may succeed")
