"""
Calendar helpers.

All timestamps handled by the service are naive datetimes expressed in the
configured LOCAL_TIMEZONE. Two entries belong to the same calendar day when
their normalised ``.date()`` values are equal.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from moodlog.core.config import settings


def _zone() -> ZoneInfo:
    return ZoneInfo(settings.LOCAL_TIMEZONE)


def to_local(dt: datetime) -> datetime:
    """Normalise an aware datetime to naive local time. Naive input is kept as is."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(_zone()).replace(tzinfo=None)


def now_local() -> datetime:
    return datetime.now(tz=_zone()).replace(tzinfo=None)


def today_local() -> date:
    return now_local().date()


def start_of_day(day: date) -> datetime:
    return datetime(day.year, day.month, day.day)


def week_start(day: date) -> date:
    """Monday of the calendar week containing ``day``."""
    return day - timedelta(days=day.weekday())


def previous_week(today: Optional[date] = None) -> tuple[datetime, datetime]:
    """
    Half-open ``[start, end)`` of the last full Monday..Sunday week before
    the week containing ``today``.
    """
    this_monday = week_start(today or today_local())
    start = this_monday - timedelta(days=7)
    return start_of_day(start), start_of_day(this_monday)
