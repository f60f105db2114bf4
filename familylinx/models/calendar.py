"""
CalendarEvent model.

Family calendar entries: meetings, birthdays, anniversaries, imported public
holidays and reminders.
"""

from datetime import datetime
from functools import partial
from typing import Optional, TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from familylinx.models.base import BaseModel, get_json_type
from familylinx.utils import generate_id

if TYPE_CHECKING:
    from familylinx.models.family import Family


EVENT_CATEGORIES = ("meeting", "birthday", "anniversary", "holiday", "reminder", "other")


class CalendarEvent(BaseModel):
    """
    A calendar entry.

    ``start_date``/``end_date`` are stored in UTC. ``start_time``/``end_time``
    hold the wall-clock ``HH:MM`` shown for timed events and are absent for
    all-day events.
    """

    __tablename__ = "calendar_events"

    id: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
        default=partial(generate_id, "event"),
    )

    family_id: Mapped[str] = mapped_column(
        ForeignKey("families.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        doc="Start date (UTC)"
    )

    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        doc="End date (UTC)"
    )

    start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    all_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    category: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="other",
        doc="One of: meeting, birthday, anniversary, holiday, reminder, other"
    )

    color: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)

    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    attendees: Mapped[list] = mapped_column(
        get_json_type(),
        nullable=False,
        default=list,
        doc="Person ids attending"
    )

    created_by: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Person id or user identifier ('system' for imports)"
    )

    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    recurrence_rule: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    family: Mapped["Family"] = relationship("Family", back_populates="calendar_events")

    __table_args__ = (
        Index("idx_calendar_event_family", "family_id"),
        Index("idx_calendar_event_start", "family_id", "start_date"),
        Index("idx_calendar_event_category", "category"),
    )

    def __repr__(self) -> str:
        return f"<CalendarEvent(title='{self.title}', category='{self.category}')>"
