"""
Calendar endpoints.

Family events with optional recurrence, date range and upcoming views, and
import of public holidays as all-day events.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from familylinx.api.dependencies import get_db_session
from familylinx.api.models import (
    CalendarEventListResponse,
    CalendarEventResponse,
    DeleteResponse,
    OccurrenceResponse,
    event_to_response,
    occurrence_to_response,
)
from familylinx.exceptions import InvalidRequestError
from familylinx.services.calendar import (
    create_calendar_event,
    delete_calendar_event,
    get_calendar_event,
    get_calendar_events,
    get_event_occurrences,
    get_events_by_date_range,
    get_upcoming_events,
    update_calendar_event,
)
from familylinx.services.groups import require_family
from familylinx.services.holidays import get_holidays, import_holidays, list_countries
from familylinx.utils import as_utc

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Calendar"])

# Widest window the occurrences endpoint expands
MAX_OCCURRENCE_WINDOW = timedelta(days=366)


class CreateEventRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    start_date: datetime
    end_date: datetime
    created_by: str = Field(..., min_length=1)
    all_day: bool = False
    category: str = "other"
    description: Optional[str] = None
    start_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    end_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    color: Optional[str] = None
    location: Optional[str] = None
    attendees: list[str] = Field(default_factory=list)
    is_recurring: bool = False
    recurrence_rule: Optional[str] = Field(None, description="RFC 5545 RRULE")


class UpdateEventRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    all_day: Optional[bool] = None
    category: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    end_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    color: Optional[str] = None
    location: Optional[str] = None
    attendees: Optional[list[str]] = None
    is_recurring: Optional[bool] = None
    recurrence_rule: Optional[str] = None


class HolidayResponse(BaseModel):
    name: str
    date: str
    country: str
    type: str


class HolidayTableResponse(BaseModel):
    country: str
    holidays: list[HolidayResponse]


class ImportHolidaysRequest(BaseModel):
    country: str
    names: Optional[list[str]] = Field(None, description="Holidays to import, all when omitted")


# =============================================================================
# Events
# =============================================================================


@router.get(
    "/families/{family_id}/calendar",
    response_model=CalendarEventListResponse,
    summary="List events, optionally within a date range",
)
def list_events(
    family_id: str,
    start: Optional[datetime] = Query(None, description="Range start (inclusive)"),
    end: Optional[datetime] = Query(None, description="Range end (inclusive)"),
    db: Session = Depends(get_db_session),
):
    require_family(db, family_id)
    if (start is None) != (end is None):
        raise InvalidRequestError("Provide both start and end, or neither")
    if start is not None:
        events = get_events_by_date_range(db, family_id, start, end)
    else:
        events = get_calendar_events(db, family_id)
    return CalendarEventListResponse(events=[event_to_response(e) for e in events], total=len(events))


@router.get(
    "/families/{family_id}/calendar/upcoming",
    response_model=CalendarEventListResponse,
    summary="Events starting in the next days",
)
def upcoming_events(
    family_id: str,
    days: Optional[int] = Query(None, ge=1, le=366),
    db: Session = Depends(get_db_session),
):
    require_family(db, family_id)
    events = get_upcoming_events(db, family_id, days=days)
    return CalendarEventListResponse(events=[event_to_response(e) for e in events], total=len(events))


@router.get(
    "/families/{family_id}/calendar/occurrences",
    response_model=list[OccurrenceResponse],
    summary="Expanded occurrences within a window",
)
def event_occurrences(
    family_id: str,
    start: datetime = Query(...),
    end: datetime = Query(...),
    db: Session = Depends(get_db_session),
):
    """One entry per one-off event and per occurrence of each recurring event."""
    require_family(db, family_id)
    start, end = as_utc(start), as_utc(end)
    if end < start:
        raise InvalidRequestError("Window end must not be before its start")
    if end - start > MAX_OCCURRENCE_WINDOW:
        raise InvalidRequestError("Window may span at most 366 days")
    return [occurrence_to_response(o) for o in get_event_occurrences(db, family_id, start, end)]


@router.post(
    "/families/{family_id}/calendar",
    response_model=CalendarEventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an event",
)
def create_event(family_id: str, request: CreateEventRequest, db: Session = Depends(get_db_session)):
    event = create_calendar_event(db, family_id, **request.model_dump())
    return event_to_response(event)


@router.get(
    "/families/{family_id}/calendar/{event_id}",
    response_model=CalendarEventResponse,
    summary="Get an event",
)
def get_event(family_id: str, event_id: str, db: Session = Depends(get_db_session)):
    return event_to_response(get_calendar_event(db, family_id, event_id))


@router.patch(
    "/families/{family_id}/calendar/{event_id}",
    response_model=CalendarEventResponse,
    summary="Update an event",
)
def update_event(
    family_id: str,
    event_id: str,
    request: UpdateEventRequest,
    db: Session = Depends(get_db_session),
):
    event = update_calendar_event(db, family_id, event_id, request.model_dump(exclude_unset=True))
    return event_to_response(event)


@router.delete(
    "/families/{family_id}/calendar/{event_id}",
    response_model=DeleteResponse,
    summary="Delete an event",
)
def delete_event(family_id: str, event_id: str, db: Session = Depends(get_db_session)):
    delete_calendar_event(db, family_id, event_id)
    return DeleteResponse(deleted_ids=[event_id], message=f"Event {event_id} deleted")


# =============================================================================
# Holidays
# =============================================================================


@router.get("/holidays", response_model=list[str], summary="Countries with holiday tables")
def holiday_countries():
    return list_countries()


@router.get("/holidays/{country}", response_model=HolidayTableResponse, summary="Holidays of a country")
def holiday_table(country: str):
    return HolidayTableResponse(
        country=country,
        holidays=[
            HolidayResponse(name=h.name, date=h.date.isoformat(), country=h.country, type=h.type)
            for h in get_holidays(country)
        ],
    )


@router.post(
    "/families/{family_id}/calendar/holidays",
    response_model=CalendarEventListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Import public holidays as all-day events",
)
def import_holiday_events(
    family_id: str,
    request: ImportHolidaysRequest,
    db: Session = Depends(get_db_session),
):
    events = import_holidays(db, family_id, request.country, request.names)
    return CalendarEventListResponse(events=[event_to_response(e) for e in events], total=len(events))
