"""
Calendar service.

Provides functions for:
- Calendar event CRUD
- Date range and upcoming-event queries
- Expanding recurring events into occurrences for a window

All datetimes are stored in UTC; naive datetimes passed in are taken as UTC.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from familylinx.config import get_settings
from familylinx.exceptions import EventNotFoundError, InvalidRequestError
from familylinx.models.calendar import EVENT_CATEGORIES, CalendarEvent
from familylinx.services.groups import require_family
from familylinx.services.recurrence import expand_occurrences, validate_rrule
from familylinx.utils import as_utc, utcnow

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = (
    "title",
    "description",
    "start_date",
    "end_date",
    "start_time",
    "end_time",
    "all_day",
    "category",
    "color",
    "location",
    "attendees",
    "created_by",
    "is_recurring",
    "recurrence_rule",
)


@dataclass
class EventOccurrence:
    """An event as it appears on a given date (recurring events repeat)."""

    event: CalendarEvent
    start: datetime
    end: datetime
    occurrence_id: Optional[str] = None


def _validate(values: dict[str, Any]) -> None:
    category = values.get("category")
    if category is not None and category not in EVENT_CATEGORIES:
        raise InvalidRequestError(f"Category must be one of {EVENT_CATEGORIES}, got '{category}'")

    start, end = values.get("start_date"), values.get("end_date")
    if start is not None and end is not None and as_utc(end) < as_utc(start):
        raise InvalidRequestError("End date must not be before start date")

    rule = values.get("recurrence_rule")
    if rule:
        valid, error = validate_rrule(rule)
        if not valid:
            raise InvalidRequestError(error or "Invalid recurrence rule")


# =============================================================================
# Queries
# =============================================================================


def get_calendar_events(session: Session, family_id: str) -> Sequence[CalendarEvent]:
    stmt = (
        select(CalendarEvent)
        .where(CalendarEvent.family_id == family_id)
        .order_by(CalendarEvent.start_date, CalendarEvent.id)
    )
    return session.scalars(stmt).all()


def get_calendar_event(session: Session, family_id: str, event_id: str) -> CalendarEvent:
    event = session.get(CalendarEvent, event_id)
    if event is None or event.family_id != family_id:
        raise EventNotFoundError(f"Event {event_id} not found in family {family_id}")
    return event


def get_events_by_date_range(
    session: Session,
    family_id: str,
    start: datetime,
    end: datetime,
) -> Sequence[CalendarEvent]:
    """
    Events whose start date falls within ``[start, end]``.

    Returns:
        Events ordered by start date ascending
    """
    stmt = (
        select(CalendarEvent)
        .where(
            CalendarEvent.family_id == family_id,
            CalendarEvent.start_date >= as_utc(start),
            CalendarEvent.start_date <= as_utc(end),
        )
        .order_by(CalendarEvent.start_date, CalendarEvent.id)
    )
    return session.scalars(stmt).all()


def get_upcoming_events(
    session: Session,
    family_id: str,
    days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Sequence[CalendarEvent]:
    """Events starting between now and ``days`` from now (30 by default)."""
    if days is None:
        days = get_settings().upcoming_event_days
    start = as_utc(now) if now else utcnow()
    return get_events_by_date_range(session, family_id, start, start + timedelta(days=days))


def get_event_occurrences(
    session: Session,
    family_id: str,
    start: datetime,
    end: datetime,
) -> list[EventOccurrence]:
    """
    Everything on the calendar within ``[start, end]``.

    One-off events appear when they start inside the window; recurring
    events appear once per occurrence inside the window.
    """
    start, end = as_utc(start), as_utc(end)
    occurrences: list[EventOccurrence] = []

    for event in get_calendar_events(session, family_id):
        event_start = as_utc(event.start_date)
        event_end = as_utc(event.end_date)

        if event.is_recurring and event.recurrence_rule:
            for occurrence in expand_occurrences(
                event.recurrence_rule, event_start, event_end - event_start, start, end
            ):
                occurrences.append(EventOccurrence(
                    event=event,
                    start=occurrence.start,
                    end=occurrence.end,
                    occurrence_id=occurrence.occurrence_id,
                ))
        elif start <= event_start <= end:
            occurrences.append(EventOccurrence(event=event, start=event_start, end=event_end))

    occurrences.sort(key=lambda o: (o.start, o.event.id))
    return occurrences


# =============================================================================
# Mutations
# =============================================================================


def create_calendar_event(
    session: Session,
    family_id: str,
    title: str,
    start_date: datetime,
    end_date: datetime,
    created_by: str,
    all_day: bool = False,
    category: str = "other",
    description: Optional[str] = None,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    color: Optional[str] = None,
    location: Optional[str] = None,
    attendees: Optional[list[str]] = None,
    is_recurring: bool = False,
    recurrence_rule: Optional[str] = None,
) -> CalendarEvent:
    """
    Create a calendar event.

    All-day events drop ``start_time``/``end_time``.

    Raises:
        FamilyNotFoundError: Family does not exist
        InvalidRequestError: Unknown category, end before start or bad RRULE
    """
    require_family(session, family_id)
    _validate({
        "category": category,
        "start_date": start_date,
        "end_date": end_date,
        "recurrence_rule": recurrence_rule,
    })

    event = CalendarEvent(
        family_id=family_id,
        title=title,
        description=description,
        start_date=as_utc(start_date),
        end_date=as_utc(end_date),
        start_time=None if all_day else start_time,
        end_time=None if all_day else end_time,
        all_day=all_day,
        category=category,
        color=color,
        location=location,
        attendees=list(attendees or []),
        created_by=created_by,
        is_recurring=is_recurring,
        recurrence_rule=recurrence_rule,
    )
    session.add(event)
    session.flush()

    logger.info(f"Created {category} event {event.id} ('{title}') in family {family_id}")
    return event


def update_calendar_event(
    session: Session,
    family_id: str,
    event_id: str,
    updates: dict[str, Any],
) -> CalendarEvent:
    """Apply only the provided (non-None) fields."""
    event = get_calendar_event(session, family_id, event_id)
    values = {k: v for k, v in updates.items() if k in _UPDATABLE_FIELDS and v is not None}

    _validate({
        **values,
        "start_date": values.get("start_date", event.start_date),
        "end_date": values.get("end_date", event.end_date),
    })

    for key, value in values.items():
        if key in ("start_date", "end_date"):
            value = as_utc(value)
        elif key == "attendees":
            value = list(value)
        setattr(event, key, value)

    if event.all_day:
        event.start_time = None
        event.end_time = None

    event.touch()
    session.flush()
    return event


def delete_calendar_event(session: Session, family_id: str, event_id: str) -> None:
    event = get_calendar_event(session, family_id, event_id)
    session.delete(event)
    session.flush()
    logger.info(f"Deleted event {event_id} from family {family_id}")
