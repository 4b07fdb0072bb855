"""
DateTime utilities for console list views.

This module provides lenient parsing of the backend's date fields, day
differences for expiry windows, date-range starts for "today/week/month"
filters and formatting helpers for appointment time slots.
"""

import calendar
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Optional
from zoneinfo import ZoneInfo


class DateRange(Enum):
    """Relative date windows offered by list filters."""

    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


def get_current_utc() -> datetime:
    """Get the current UTC datetime."""
    return datetime.now(ZoneInfo("UTC"))


def get_today(timezone: Optional[str] = None) -> date:
    """Get today's date, in ``timezone`` when given, else local time."""
    if timezone:
        return datetime.now(ZoneInfo(timezone)).date()
    return date.today()


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a backend date field into a ``date``.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings and full ISO
    timestamps (a trailing ``Z`` is understood). Anything else yields None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp; plain dates become midnight. Invalid -> None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())

    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def days_until(target: Any, reference: Optional[date] = None) -> Optional[int]:
    """
    Whole days from ``reference`` (default today) to ``target``.

    Negative when ``target`` is in the past, None when it cannot be parsed.
    """
    target_date = parse_date(target)
    if target_date is None:
        return None
    if reference is None:
        reference = date.today()
    return (target_date - reference).days


def subtract_months(day: date, months: int) -> date:
    """Go back ``months`` calendar months, clamping to the month's last day."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def date_range_start(
    date_range: DateRange, reference: Optional[date] = None
) -> Optional[date]:
    """
    First day included by a relative date range.

    ``today`` starts today, ``week`` seven days ago and ``month`` one calendar
    month ago. ``all`` has no lower bound and returns None.
    """
    if reference is None:
        reference = date.today()

    if date_range == DateRange.TODAY:
        return reference
    if date_range == DateRange.WEEK:
        return reference - timedelta(days=7)
    if date_range == DateRange.MONTH:
        return subtract_months(reference, 1)
    return None


def month_key(value: Any) -> Optional[str]:
    """``YYYY-MM`` key of a date-like value, None when unparseable."""
    parsed = parse_date(value)
    if parsed is None:
        return None
    return f"{parsed.year:04d}-{parsed.month:02d}"


def minutes_to_label(minutes: Optional[int]) -> str:
    """
    Format minutes since midnight as a 12-hour clock label.

    >>> minutes_to_label(570)
    '09:30 AM'
    """
    if minutes is None:
        return ""
    hours, mins = divmod(int(minutes), 60)
    hours %= 24
    hour_12 = ((hours + 11) % 12) + 1
    suffix = "PM" if hours >= 12 else "AM"
    return f"{hour_12:02d}:{mins:02d} {suffix}"


def format_time_window(start_minutes: Optional[int], end_minutes: Optional[int]) -> str:
    """Format a start/end pair of minute offsets as ``"09:30 AM–10:00 AM"``."""
    return f"{minutes_to_label(start_minutes)}–{minutes_to_label(end_minutes)}"


def format_display_date(value: Any) -> str:
    """Render a date field as ``Jan 05, 2025`` or ``-`` when missing."""
    parsed = parse_date(value)
    if parsed is None:
        return "-" if not value else str(value)
    return parsed.strftime("%b %d, %Y")
