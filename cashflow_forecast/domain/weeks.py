"""Week bucketing - every dated item is keyed by the Sunday that closes its week"""

from datetime import date, timedelta
from typing import List

SUNDAY = 6  # date.weekday()


def week_ending_of(day: date) -> date:
    """
    Return the same-or-later Sunday for a date.

    A Sunday maps to itself; Monday through Saturday advance to the
    following Sunday. Actuals, AR forecasts and recurring payment dates
    all go through this function so week boundaries never drift between
    sources.
    """
    return day + timedelta(days=(SUNDAY - day.weekday()) % 7)


def week_endings_between(start: date, end: date) -> List[date]:
    """Contiguous Sunday keys covering [start, end], ascending"""
    current = week_ending_of(start)
    last = week_ending_of(end)
    weeks = []
    while current <= last:
        weeks.append(current)
        current += timedelta(days=7)
    return weeks
