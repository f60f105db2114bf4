"""
Recurrence expansion for calendar events.

Recurring events store an iCalendar RRULE (e.g. ``FREQ=YEARLY`` for a
birthday) on the event itself; occurrences are expanded on demand for a query
window.

Uses python-dateutil for RRULE parsing and expansion.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from dateutil.rrule import rrule, rrulestr

from familylinx.utils import as_utc

# Safety limit for a single expansion
MAX_OCCURRENCES = 500


@dataclass
class Occurrence:
    """One occurrence of an event inside a query window."""

    start: datetime
    end: datetime
    occurrence_id: str


def parse_rrule(rrule_string: str, dtstart: datetime) -> Optional[rrule]:
    """
    Parse an RRULE string anchored at ``dtstart``.

    Args:
        rrule_string: iCalendar RRULE, with or without the ``RRULE:`` prefix
        dtstart: First occurrence (naive values are treated as UTC)

    Returns:
        rrule object or None if parsing fails
    """
    if not rrule_string or not rrule_string.strip():
        return None

    try:
        return rrulestr(rrule_string.strip(), dtstart=as_utc(dtstart))
    except (ValueError, TypeError):
        return None


def validate_rrule(rrule_string: str) -> tuple[bool, Optional[str]]:
    """
    Validate an RRULE string.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not rrule_string or not rrule_string.strip():
        return False, "RRULE string is empty"

    if "FREQ=" not in rrule_string.upper():
        return False, "RRULE must contain FREQ component"

    rule = parse_rrule(rrule_string, datetime(2020, 1, 1, 12, 0, 0))
    if rule is None:
        return False, "Failed to parse RRULE"

    try:
        first = rule.after(as_utc(datetime(2020, 1, 1, 12, 0, 0)), inc=True)
    except (ValueError, OverflowError) as e:
        return False, f"Invalid RRULE: {e}"
    if first is None:
        return False, "RRULE generates no occurrences"
    return True, None


def format_occurrence_id(dt: datetime) -> str:
    """``YYYYMMDDTHHMMSS`` (iCalendar RECURRENCE-ID style)."""
    return dt.strftime("%Y%m%dT%H%M%S")


def expand_occurrences(
    rrule_string: str,
    dtstart: datetime,
    duration: timedelta,
    window_start: datetime,
    window_end: datetime,
    max_occurrences: int = MAX_OCCURRENCES,
) -> list[Occurrence]:
    """
    Occurrences of a recurring event whose start falls inside the window.

    Returns:
        Occurrences in chronological order, empty if the rule is unusable
    """
    rule = parse_rrule(rrule_string, dtstart)
    if rule is None:
        return []

    try:
        starts = rule.between(as_utc(window_start), as_utc(window_end), inc=True)
    except (ValueError, OverflowError, TypeError):
        return []

    return [
        Occurrence(start=start, end=start + duration, occurrence_id=format_occurrence_id(start))
        for start in starts[:max_occurrences]
    ]
