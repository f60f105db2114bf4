"""
Slug page endpoints.

``/pages/{root_slug}`` and ``/pages/{root_slug}/{group_slug}`` serve group
pages addressed the way family members share them. ``calendar``, ``albums``
and ``timeline`` under a root are family-wide pages and take precedence over
groups with those slugs.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from familylinx.api.dependencies import get_db_session
from familylinx.api.models import (
    AlbumResponse,
    CalendarEventResponse,
    FamilyResponse,
    GroupPageResponse,
    PersonResponse,
    album_to_response,
    event_to_response,
    family_to_response,
    page_to_response,
    person_to_response,
)
from familylinx.services.albums import album_cards, album_years, filter_albums, get_albums
from familylinx.services.calendar import get_calendar_events, get_upcoming_events
from familylinx.services.families import get_family_by_root_slug
from familylinx.services.groups import load_tree
from familylinx.services.navigation import resolve_page

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pages", tags=["Pages"])


class CalendarPageResponse(BaseModel):
    family: FamilyResponse
    root_slug: str
    upcoming: list[CalendarEventResponse]
    events: list[CalendarEventResponse]


class AlbumsPageResponse(BaseModel):
    family: FamilyResponse
    root_slug: str
    albums: list[AlbumResponse]
    years: list[str]


class TimelinePageResponse(BaseModel):
    family: FamilyResponse
    root_slug: str
    people: list[PersonResponse]


@router.get("/{root_slug}", response_model=GroupPageResponse, summary="Root group page")
def root_page(
    root_slug: str,
    q: str = Query(""),
    year: Optional[int] = Query(None),
    db: Session = Depends(get_db_session),
):
    return page_to_response(resolve_page(db, root_slug, query=q, year=year))


@router.get("/{root_slug}/calendar", response_model=CalendarPageResponse, summary="Family calendar page")
def calendar_page(root_slug: str, db: Session = Depends(get_db_session)):
    family, _ = get_family_by_root_slug(db, root_slug)
    return CalendarPageResponse(
        family=family_to_response(family),
        root_slug=root_slug,
        upcoming=[event_to_response(e) for e in get_upcoming_events(db, family.id)],
        events=[event_to_response(e) for e in get_calendar_events(db, family.id)],
    )


@router.get("/{root_slug}/albums", response_model=AlbumsPageResponse, summary="Family albums page")
def albums_page(
    root_slug: str,
    q: str = Query(""),
    year: Optional[str] = Query(None, pattern=r"^\d{4}$"),
    db: Session = Depends(get_db_session),
):
    family, _ = get_family_by_root_slug(db, root_slug)
    albums = get_albums(db, family.id)
    return AlbumsPageResponse(
        family=family_to_response(family),
        root_slug=root_slug,
        albums=[album_to_response(card) for card in album_cards(filter_albums(albums, q, year))],
        years=album_years(albums),
    )


@router.get("/{root_slug}/timeline", response_model=TimelinePageResponse, summary="Photo timeline page")
def timeline_page(
    root_slug: str,
    q: str = Query("", description="Filter people by name"),
    db: Session = Depends(get_db_session),
):
    """People with at least three photos, each gallery ordered oldest first."""
    family, _ = get_family_by_root_slug(db, root_slug)
    people = load_tree(db, family.id).timeline_people(q)
    return TimelinePageResponse(
        family=family_to_response(family),
        root_slug=root_slug,
        people=[person_to_response(p) for p in people],
    )


@router.get("/{root_slug}/{group_slug}", response_model=GroupPageResponse, summary="Group page")
def group_page(
    root_slug: str,
    group_slug: str,
    q: str = Query(""),
    year: Optional[int] = Query(None),
    db: Session = Depends(get_db_session),
):
    return page_to_response(resolve_page(db, root_slug, group_slug, query=q, year=year))
