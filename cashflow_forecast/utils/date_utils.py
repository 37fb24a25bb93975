"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta
from typing import Iterator, List, Tuple


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamped_date(year: int, month: int, day: int) -> date:
    """Build a date, pulling day back to the month's last day when it overflows (31 -> Feb 28/29)"""
    return date(year, month, min(day, days_in_month(year, month)))


def iter_months(start: date, end: date) -> Iterator[Tuple[int, int]]:
    """Yield (year, month) for every calendar month touched by [start, end]"""
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield year, month
        month += 1
        if month > 12:
            year, month = year + 1, 1
