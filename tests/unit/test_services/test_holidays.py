"""
Unit tests for public holiday import.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.orm import Session

from familylinx.exceptions import InvalidRequestError
from familylinx.services.calendar import get_calendar_events
from familylinx.services.holidays import (
    HOLIDAY_COLOR,
    HOLIDAY_DATA,
    get_holidays,
    import_holidays,
    list_countries,
)
from familylinx.utils import as_utc


def test_countries():
    assert "Malaysia" in list_countries()
    assert len(list_countries()) == len(HOLIDAY_DATA)


def test_unknown_country():
    with pytest.raises(InvalidRequestError):
        get_holidays("Atlantis")


class TestImportHolidays:

    def test_import_all(self, family, db_session: Session):
        events = import_holidays(db_session, family.id, "United Kingdom")

        assert len(events) == len(HOLIDAY_DATA["United Kingdom"])
        assert all(e.all_day and e.category == "holiday" for e in events)
        assert len(get_calendar_events(db_session, family.id)) == len(events)

    def test_import_selection(self, family, db_session: Session):
        events = import_holidays(db_session, family.id, "Malaysia", names=["Merdeka Day"])

        assert len(events) == 1
        event = events[0]
        assert event.title == "Merdeka Day"
        assert event.color == HOLIDAY_COLOR
        assert event.created_by == "system"
        assert as_utc(event.start_date) == datetime(2025, 8, 31, tzinfo=timezone.utc)

    def test_unknown_name(self, family, db_session: Session):
        with pytest.raises(InvalidRequestError):
            import_holidays(db_session, family.id, "Malaysia", names=["Christmas Eve"])
