"""Perpetual topic calendar.

Every topic has its own calendar anchored at the day it was created: weeks
are 7 days, months are 4 weeks, and day 1 of week 1 of month 1 is the anchor
day itself. Positions are derived on demand and never stored, so a date maps
to the same ``(month, week, day)`` no matter when it is evaluated.

All arithmetic works on calendar days (the date part of a timestamp), so the
time of day of either the timestamp or the anchor never shifts a position.
"""

from datetime import date as date_type
from datetime import datetime, timedelta
from typing import List, Optional

from pydantic import BaseModel, Field

DAYS_PER_WEEK = 7
WEEKS_PER_MONTH = 4


class TimePosition(BaseModel):
    """Location of a date inside a topic calendar.

    ``month`` is 1 or greater for any date on or after the anchor and drops
    to 0 or below for dates before it.
    """

    month: int = Field(..., description="Topic month, unbounded")
    week: int = Field(..., ge=1, le=WEEKS_PER_MONTH, description="Week within the month (1-4)")
    day: int = Field(..., ge=1, le=DAYS_PER_WEEK, description="Day within the week (1-7)")

    class Config:
        """Pydantic config."""
        frozen = True


class TimeContext(BaseModel):
    """Position of a reference date, together with the topic anchor."""

    current_month: int
    current_week: int
    current_day: int
    start_date: datetime


def _ceil_div(numerator: int, denominator: int) -> int:
    # Floored division on the negated numerator gives a ceiling that is
    # also correct for negative operands.
    return -(-numerator // denominator)


def start_of_day(moment: datetime) -> datetime:
    """Return midnight of the calendar day containing ``moment``.

    The timezone, if any, is preserved.
    """
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def calendar_days_between(start: datetime, end: datetime) -> int:
    """Number of calendar-day boundaries crossed going from ``start`` to ``end``.

    Negative when ``end`` falls on an earlier day than ``start``.
    """
    return (end.date() - start.date()).days


def time_to_position(moment: datetime, anchor: datetime) -> TimePosition:
    """Map a timestamp to its ``(month, week, day)`` in the anchor's calendar.

    Args:
        moment: Timestamp to locate; may be before, on or after the anchor
        anchor: Topic creation timestamp

    Returns:
        TimePosition of ``moment``
    """
    total_days = calendar_days_between(anchor, moment) + 1

    day = ((total_days - 1) % DAYS_PER_WEEK) + 1
    total_weeks = _ceil_div(total_days, DAYS_PER_WEEK)
    week = ((total_weeks - 1) % WEEKS_PER_MONTH) + 1
    month = _ceil_div(total_weeks, WEEKS_PER_MONTH)

    return TimePosition(month=month, week=week, day=day)


def position_to_date(month: int, week: int, day: int, anchor: datetime) -> datetime:
    """Return the start of the day at ``(month, week, day)`` in the anchor's calendar.

    Args:
        month: Topic month
        week: Week within the month (1-4)
        day: Day within the week (1-7)
        anchor: Topic creation timestamp

    Returns:
        Midnight of the requested day

    Raises:
        ValueError: If week or day is out of range
    """
    if not 1 <= week <= WEEKS_PER_MONTH:
        raise ValueError(f"week must be between 1 and {WEEKS_PER_MONTH}, got {week}")
    if not 1 <= day <= DAYS_PER_WEEK:
        raise ValueError(f"day must be between 1 and {DAYS_PER_WEEK}, got {day}")

    total_weeks = (month - 1) * WEEKS_PER_MONTH + (week - 1)
    total_days = total_weeks * DAYS_PER_WEEK + (day - 1)
    return start_of_day(anchor) + timedelta(days=total_days)


def get_week_dates(month: int, week: int, anchor: datetime) -> List[datetime]:
    """Return the seven dates of a topic week, day 1 first."""
    return [position_to_date(month, week, day, anchor) for day in range(1, DAYS_PER_WEEK + 1)]


def time_context_for_date(moment: datetime, anchor: datetime) -> TimeContext:
    """Build the TimeContext of ``moment`` for a topic anchored at ``anchor``."""
    position = time_to_position(moment, anchor)
    return TimeContext(
        current_month=position.month,
        current_week=position.week,
        current_day=position.day,
        start_date=anchor,
    )


def current_time_context(anchor: datetime, now: Optional[datetime] = None) -> TimeContext:
    """Build the TimeContext of the present moment.

    Args:
        anchor: Topic creation timestamp
        now: Reference time, defaults to the wall clock

    Returns:
        TimeContext for ``now``
    """
    if now is None:
        now = datetime.now(anchor.tzinfo)
    return time_context_for_date(now, anchor)


def format_date(moment: date_type) -> str:
    """Short label such as ``Jan 5``."""
    return f"{moment.strftime('%b')} {moment.day}"
