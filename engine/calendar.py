# engine/calendar.py
# -----------------------------------------------------------------------------
# Purpose:
#   Working-day arithmetic (Mon-Fri minus holiday ranges) and ISO date helpers.
#
# What this module provides:
#   - is_working_day(date, calendar)
#   - add_working_days / subtract_working_days / count_working_days
#   - format_date_iso / parse_date_iso / format_date_display
#
# Notes:
#   - Every stepping loop is capped at MAX_CALENDAR_ITERATIONS; a calendar that
#     cannot be resolved within the cap raises CalendarIterationLimitError.
#   - Display formatting works on the "YYYY-MM-DD" string directly.
# -----------------------------------------------------------------------------

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from engine.models import Calendar

MAX_CALENDAR_ITERATIONS = 10_000

DATE_FORMATS = ("MM/DD/YYYY", "DD/MM/YYYY", "YYYY-MM-DD")

_ONE_DAY = timedelta(days=1)


class CalendarIterationLimitError(RuntimeError):
    """Raised when working-day stepping exceeds MAX_CALENDAR_ITERATIONS."""


# -----------------------------------------------------------------------------
# ISO helpers
# -----------------------------------------------------------------------------
def format_date_iso(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def parse_date_iso(date_str: str) -> date:
    y, m, d = (int(part) for part in date_str.split("-"))
    return date(y, m, d)


def format_date_display(iso_date: str, fmt: str = "MM/DD/YYYY") -> str:
    """
    Re-arrange a "YYYY-MM-DD" string for display. Unknown formats fall back
    to MM/DD/YYYY.
    """
    y, m, d = iso_date.split("-")
    if fmt == "DD/MM/YYYY":
        return f"{d}/{m}/{y}"
    if fmt == "YYYY-MM-DD":
        return iso_date
    return f"{m}/{d}/{y}"


# -----------------------------------------------------------------------------
# Working days
# -----------------------------------------------------------------------------
def is_working_day(d: date, calendar: Optional[Calendar] = None) -> bool:
    """Weekends are never working days; holiday ranges are inclusive."""
    if d.weekday() >= 5:
        return False
    if calendar is not None and calendar.holidays:
        iso = format_date_iso(d)
        for h in calendar.holidays:
            if h.start_date <= iso <= h.end_date:
                return False
    return True


def _step_working_days(start: date, days: int, step: timedelta, calendar: Optional[Calendar]) -> date:
    result = start
    remaining = days
    iterations = 0
    while remaining > 0:
        iterations += 1
        if iterations > MAX_CALENDAR_ITERATIONS:
            raise CalendarIterationLimitError(
                "Calendar iteration limit exceeded - check for excessive consecutive holidays"
            )
        result = result + step
        if is_working_day(result, calendar):
            remaining -= 1
    return result


def add_working_days(start: date, days: int, calendar: Optional[Calendar] = None) -> date:
    """Return the date `days` working days after `start`; days=0 returns start."""
    return _step_working_days(start, days, _ONE_DAY, calendar)


def subtract_working_days(start: date, days: int, calendar: Optional[Calendar] = None) -> date:
    """Return the date `days` working days before `start`; days=0 returns start."""
    return _step_working_days(start, days, -_ONE_DAY, calendar)


def count_working_days(start: date, end: date, calendar: Optional[Calendar] = None) -> int:
    """Count working days in the half-open interval [start, end)."""
    count = 0
    iterations = 0
    current = start
    while current < end:
        iterations += 1
        if iterations > MAX_CALENDAR_ITERATIONS:
            raise CalendarIterationLimitError(
                "Calendar iteration limit exceeded - date range too large"
            )
        if is_working_day(current, calendar):
            count += 1
        current = current + _ONE_DAY
    return count


def next_working_day_on_or_after(d: date, calendar: Optional[Calendar] = None) -> date:
    """Roll `d` forward until it lands on a working day."""
    iterations = 0
    while not is_working_day(d, calendar):
        iterations += 1
        if iterations > MAX_CALENDAR_ITERATIONS:
            raise CalendarIterationLimitError(
                "Calendar iteration limit exceeded - no working day found"
            )
        d = d + _ONE_DAY
    return d
