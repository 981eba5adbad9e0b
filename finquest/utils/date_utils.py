"""Date manipulation utilities"""

from datetime import datetime, timedelta
from typing import Tuple


def week_end(now: datetime) -> datetime:
    """
    End of the goal week: the next Sunday at 23:59:59.999.

    On a Sunday the week runs to the following Sunday, so a goal created
    late on Sunday still gets a full week.
    """
    # isoweekday: Monday=1 .. Sunday=7, so Sunday maps to 7 days ahead
    days_until_sunday = 7 - now.isoweekday() % 7
    end = now + timedelta(days=days_until_sunday)
    return end.replace(hour=23, minute=59, second=59, microsecond=999000)


def period_start(now: datetime, period: str) -> datetime:
    """Start of an analytics period: rolling 7 days, calendar month or calendar year"""
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if period == "year":
        return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    raise ValueError(f"Unknown period: {period}")


def month_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """First and last instant of the calendar month containing now"""
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, next_month - timedelta(microseconds=1)
