"""Date manipulation utilities"""

import calendar
from datetime import date


def month_key(day: date) -> str:
    """YYYY-MM bucket a date falls into"""
    return day.strftime("%Y-%m")


def month_start(day: date) -> date:
    return day.replace(day=1)


def month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def add_months(day: date, months: int) -> date:
    """Shift by whole calendar months, clamping to the last day of short months"""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    last_day = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(day.day, last_day))


def month_name(month: int) -> str:
    """Full English name for a 1-based month number"""
    return calendar.month_name[month]


def days_between(earlier: date, later: date) -> int:
    return (later - earlier).days
