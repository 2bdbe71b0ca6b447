# engine/us_holidays.py
# -----------------------------------------------------------------------------
# Purpose:
#   US federal holiday dates commonly blocked out in project calendars, plus a
#   helper that turns them into a Calendar.
# -----------------------------------------------------------------------------

from __future__ import annotations

import calendar as _cal
from datetime import date, timedelta
from typing import Iterable, List, NamedTuple

from engine.models import Calendar, Holiday


class USHolidayEntry(NamedTuple):
    name: str
    date: str  # YYYY-MM-DD


def _nth_weekday_of_month(year: int, month: int, weekday: int, nth: int) -> date:
    """weekday uses Python numbering (Mon=0 .. Sun=6); nth is 1-based."""
    first = date(year, month, 1)
    diff = (weekday - first.weekday()) % 7
    return first + timedelta(days=diff + (nth - 1) * 7)


def _last_weekday_of_month(year: int, month: int, weekday: int) -> date:
    last = date(year, month, _cal.monthrange(year, month)[1])
    diff = (last.weekday() - weekday) % 7
    return last - timedelta(days=diff)


def us_holidays(year: int) -> List[USHolidayEntry]:
    """The 12 holidays used for US project scheduling in `year`."""
    monday, thursday = 0, 3
    thanksgiving = _nth_weekday_of_month(year, 11, thursday, 4)
    entries = [
        ("New Year's Day", date(year, 1, 1)),
        ("Martin Luther King Jr. Day", _nth_weekday_of_month(year, 1, monday, 3)),
        ("Presidents' Day", _nth_weekday_of_month(year, 2, monday, 3)),
        ("Memorial Day", _last_weekday_of_month(year, 5, monday)),
        ("Independence Day", date(year, 7, 4)),
        ("Labor Day", _nth_weekday_of_month(year, 9, monday, 1)),
        ("Columbus Day", _nth_weekday_of_month(year, 10, monday, 2)),
        ("Veterans Day", date(year, 11, 11)),
        ("Thanksgiving", thanksgiving),
        ("Day After Thanksgiving", thanksgiving + timedelta(days=1)),
        ("Christmas Eve", date(year, 12, 24)),
        ("Christmas Day", date(year, 12, 25)),
    ]
    return [USHolidayEntry(name, d.isoformat()) for name, d in entries]


def calendar_from_us_holidays(years: Iterable[int]) -> Calendar:
    holidays = []
    for year in years:
        for entry in us_holidays(year):
            holidays.append(
                Holiday(
                    start_date=entry.date,
                    end_date=entry.date,
                    name=entry.name,
                    id=f"us-{entry.date}",
                )
            )
    return Calendar(holidays=tuple(holidays))
