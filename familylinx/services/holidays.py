"""
Public holiday import.

Ships a 2025 holiday table for a handful of countries and turns a selection
of it into all-day ``holiday`` calendar events.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from familylinx.exceptions import InvalidRequestError
from familylinx.models.calendar import CalendarEvent
from familylinx.services.calendar import create_calendar_event

logger = logging.getLogger(__name__)

HOLIDAY_COLOR = "#10b981"
HOLIDAY_CREATOR = "system"


@dataclass(frozen=True)
class Holiday:
    name: str
    date: date
    country: str
    type: str = "public"


def _table(country: str, *entries: tuple[str, str]) -> list[Holiday]:
    return [Holiday(name=name, date=date.fromisoformat(day), country=country) for name, day in entries]


HOLIDAY_DATA: dict[str, list[Holiday]] = {
    "United States": _table(
        "United States",
        ("New Year's Day", "2025-01-01"),
        ("Martin Luther King Jr. Day", "2025-01-20"),
        ("Presidents' Day", "2025-02-17"),
        ("Memorial Day", "2025-05-26"),
        ("Independence Day", "2025-07-04"),
        ("Labor Day", "2025-09-01"),
        ("Columbus Day", "2025-10-13"),
        ("Veterans Day", "2025-11-11"),
        ("Thanksgiving", "2025-11-27"),
        ("Christmas Day", "2025-12-25"),
    ),
    "United Kingdom": _table(
        "United Kingdom",
        ("New Year's Day", "2025-01-01"),
        ("Good Friday", "2025-04-18"),
        ("Easter Monday", "2025-04-21"),
        ("Early May Bank Holiday", "2025-05-05"),
        ("Spring Bank Holiday", "2025-05-26"),
        ("Summer Bank Holiday", "2025-08-25"),
        ("Christmas Day", "2025-12-25"),
        ("Boxing Day", "2025-12-26"),
    ),
    "Canada": _table(
        "Canada",
        ("New Year's Day", "2025-01-01"),
        ("Family Day", "2025-02-17"),
        ("Good Friday", "2025-04-18"),
        ("Victoria Day", "2025-05-19"),
        ("Canada Day", "2025-07-01"),
        ("Civic Holiday", "2025-08-04"),
        ("Labour Day", "2025-09-01"),
        ("Thanksgiving", "2025-10-13"),
        ("Remembrance Day", "2025-11-11"),
        ("Christmas Day", "2025-12-25"),
        ("Boxing Day", "2025-12-26"),
    ),
    "Australia": _table(
        "Australia",
        ("New Year's Day", "2025-01-01"),
        ("Australia Day", "2025-01-26"),
        ("Good Friday", "2025-04-18"),
        ("Easter Saturday", "2025-04-19"),
        ("Easter Monday", "2025-04-21"),
        ("Anzac Day", "2025-04-25"),
        ("Queen's Birthday", "2025-06-09"),
        ("Christmas Day", "2025-12-25"),
        ("Boxing Day", "2025-12-26"),
    ),
    "Singapore": _table(
        "Singapore",
        ("New Year's Day", "2025-01-01"),
        ("Chinese New Year", "2025-01-29"),
        ("Chinese New Year (2nd day)", "2025-01-30"),
        ("Good Friday", "2025-04-18"),
        ("Labour Day", "2025-05-01"),
        ("Vesak Day", "2025-05-12"),
        ("Hari Raya Puasa", "2025-03-31"),
        ("Hari Raya Haji", "2025-06-07"),
        ("National Day", "2025-08-09"),
        ("Deepavali", "2025-10-20"),
        ("Christmas Day", "2025-12-25"),
    ),
    "Malaysia": _table(
        "Malaysia",
        ("New Year's Day", "2025-01-01"),
        ("Federal Territory Day", "2025-02-01"),
        ("Chinese New Year", "2025-01-29"),
        ("Chinese New Year (2nd day)", "2025-01-30"),
        ("Labour Day", "2025-05-01"),
        ("Wesak Day", "2025-05-12"),
        ("King's Birthday", "2025-06-07"),
        ("Hari Raya Aidilfitri", "2025-03-31"),
        ("Hari Raya Aidilfitri (2nd day)", "2025-04-01"),
        ("Merdeka Day", "2025-08-31"),
        ("Malaysia Day", "2025-09-16"),
        ("Deepavali", "2025-10-20"),
        ("Christmas Day", "2025-12-25"),
    ),
    "India": _table(
        "India",
        ("New Year's Day", "2025-01-01"),
        ("Republic Day", "2025-01-26"),
        ("Holi", "2025-03-14"),
        ("Good Friday", "2025-04-18"),
        ("Independence Day", "2025-08-15"),
        ("Gandhi Jayanti", "2025-10-02"),
        ("Dussehra", "2025-10-02"),
        ("Diwali", "2025-10-20"),
        ("Christmas Day", "2025-12-25"),
    ),
}


def list_countries() -> list[str]:
    return list(HOLIDAY_DATA)


def get_holidays(country: str) -> list[Holiday]:
    """
    Holidays of a country.

    Raises:
        InvalidRequestError: Country is not in the table
    """
    try:
        return list(HOLIDAY_DATA[country])
    except KeyError:
        raise InvalidRequestError(
            f"No holiday data for '{country}'. Available: {', '.join(HOLIDAY_DATA)}"
        ) from None


def import_holidays(
    session: Session,
    family_id: str,
    country: str,
    names: Optional[Iterable[str]] = None,
) -> list[CalendarEvent]:
    """
    Create all-day holiday events for a country.

    Args:
        session: Database session
        family_id: Target family
        country: Key of ``HOLIDAY_DATA``
        names: Holiday names to import (all when omitted)

    Returns:
        Created events, in table order
    """
    holidays = get_holidays(country)
    if names is not None:
        selected = set(names)
        unknown = selected - {h.name for h in holidays}
        if unknown:
            raise InvalidRequestError(f"Unknown {country} holiday(s): {', '.join(sorted(unknown))}")
        holidays = [h for h in holidays if h.name in selected]

    events = []
    for holiday in holidays:
        day = datetime(holiday.date.year, holiday.date.month, holiday.date.day, tzinfo=timezone.utc)
        events.append(create_calendar_event(
            session,
            family_id,
            title=holiday.name,
            description=f"{country} public holiday",
            start_date=day,
            end_date=day,
            all_day=True,
            category="holiday",
            created_by=HOLIDAY_CREATOR,
            color=HOLIDAY_COLOR,
        ))

    logger.info(f"Imported {len(events)} {country} holiday(s) into family {family_id}")
    return events
