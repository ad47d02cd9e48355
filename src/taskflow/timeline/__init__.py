"""Topic calendar: mapping timestamps to (month, week, day) positions."""

from taskflow.timeline.position import (
    TimeContext,
    TimePosition,
    calendar_days_between,
    current_time_context,
    format_date,
    get_week_dates,
    position_to_date,
    start_of_day,
    time_context_for_date,
    time_to_position,
)

__all__ = [
    "TimePosition",
    "TimeContext",
    "start_of_day",
    "calendar_days_between",
    "time_to_position",
    "position_to_date",
    "get_week_dates",
    "time_context_for_date",
    "current_time_context",
    "format_date",
]
