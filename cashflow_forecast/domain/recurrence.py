"""Recurring payment date generation for forecast items"""

from datetime import date, timedelta
from typing import Callable, Dict, Iterable, List, Tuple

from cashflow_forecast.domain.exceptions import InvalidRuleError, InvalidWindowError
from cashflow_forecast.domain.models import BusinessDayPolicy, Frequency, PaymentRule
from cashflow_forecast.utils.date_utils import clamped_date, generate_date_range, iter_months

SATURDAY = 5
SUNDAY = 6

# Expected anchor_days layout per frequency: each slot names its value kind
ANCHOR_LAYOUTS: Dict[Frequency, Tuple[str, ...]] = {
    Frequency.WEEKLY: ("weekday",),
    Frequency.SEMI_MONTHLY: ("day", "day"),
    Frequency.MONTHLY: ("day",),
    Frequency.QUARTERLY: ("day", "month"),
    Frequency.SEMI_ANNUAL: ("month", "day", "month", "day"),
    Frequency.ANNUAL: ("month", "day"),
}

ANCHOR_RANGES: Dict[str, Tuple[int, int]] = {
    "weekday": (0, 6),  # Sunday=0
    "day": (1, 31),
    "month": (1, 12),
}

# Weekend occurrences just outside the window can shift into it
ADJUSTMENT_PADDING = timedelta(days=2)


def validate_rule(rule: PaymentRule) -> None:
    """
    Check frequency, business-day policy and anchor days before generation.

    Raises:
        InvalidRuleError: unknown frequency/policy, wrong anchor count,
            or an anchor outside its range (weekday 0-6, day 1-31, month 1-12)
    """
    try:
        frequency = Frequency(rule.frequency)
    except ValueError as e:
        raise InvalidRuleError(f"Unknown frequency: {rule.frequency!r}") from e

    try:
        BusinessDayPolicy(rule.exception_rule)
    except ValueError as e:
        raise InvalidRuleError(f"Unknown business day policy: {rule.exception_rule!r}") from e

    layout = ANCHOR_LAYOUTS[frequency]
    anchors = tuple(rule.anchor_days or ())
    if len(anchors) != len(layout):
        raise InvalidRuleError(
            f"{frequency.value} rule expects {len(layout)} anchor value(s) {list(layout)}, got {list(anchors)}"
        )

    for kind, value in zip(layout, anchors):
        low, high = ANCHOR_RANGES[kind]
        if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
            raise InvalidRuleError(
                f"{frequency.value} rule anchor {kind}={value!r} is outside {low}-{high}"
            )


def quarter_months(start_month: int) -> List[int]:
    """Months of a quarterly rule in schedule order, e.g. 11 -> [11, 2, 5, 8]"""
    return [(start_month - 1 + offset) % 12 + 1 for offset in (0, 3, 6, 9)]


def apply_business_day_adjustment(day: date, policy: BusinessDayPolicy) -> date:
    """
    Move a weekend date to a weekday.

    Sunday: move_later -> Monday (+1), move_earlier -> Friday (-2)
    Saturday: move_later -> Monday (+2), move_earlier -> Friday (-1)

    Weekend-only: no holiday calendar is consulted.
    """
    weekday = day.weekday()
    later = BusinessDayPolicy(policy) == BusinessDayPolicy.MOVE_LATER

    if weekday == SUNDAY:
        return day + timedelta(days=1 if later else -2)
    if weekday == SATURDAY:
        return day + timedelta(days=2 if later else -1)
    return day


def generate_dates(rule: PaymentRule, start: date, end: date) -> List[date]:
    """
    Generate the business-day-adjusted occurrences of a rule within [start, end].

    Days of month are clamped to the month's length before adjustment, so
    an anchor of 31 behaves as end-of-month all year.

    Returns:
        Ascending, de-duplicated dates, all inside the window

    Raises:
        InvalidRuleError: malformed rule
        InvalidWindowError: start is after end
    """
    validate_rule(rule)
    if start > end:
        raise InvalidWindowError(f"Window start {start} is after end {end}")

    frequency = Frequency(rule.frequency)
    policy = BusinessDayPolicy(rule.exception_rule)
    low, high = start - ADJUSTMENT_PADDING, end + ADJUSTMENT_PADDING

    candidates = _GENERATORS[frequency](tuple(rule.anchor_days), low, high)
    adjusted = {
        apply_business_day_adjustment(candidate, policy)
        for candidate in candidates
        if low <= candidate <= high
    }
    return sorted(d for d in adjusted if start <= d <= end)


def _weekly(anchors: Tuple[int, ...], low: date, high: date) -> Iterable[date]:
    target = (anchors[0] - 1) % 7  # Sunday=0 -> date.weekday() convention
    return [d for d in generate_date_range(low, high) if d.weekday() == target]


def _monthly(anchors: Tuple[int, ...], low: date, high: date) -> Iterable[date]:
    for year, month in iter_months(low, high):
        yield clamped_date(year, month, anchors[0])


def _semi_monthly(anchors: Tuple[int, ...], low: date, high: date) -> Iterable[date]:
    for year, month in iter_months(low, high):
        for day in anchors:
            yield clamped_date(year, month, day)


def _quarterly(anchors: Tuple[int, ...], low: date, high: date) -> Iterable[date]:
    day, start_month = anchors
    months = sorted(quarter_months(start_month))
    for year in range(low.year, high.year + 1):
        for month in months:
            yield clamped_date(year, month, day)


def _semi_annual(anchors: Tuple[int, ...], low: date, high: date) -> Iterable[date]:
    month1, day1, month2, day2 = anchors
    for year in range(low.year, high.year + 1):
        yield clamped_date(year, month1, day1)
        yield clamped_date(year, month2, day2)


def _annual(anchors: Tuple[int, ...], low: date, high: date) -> Iterable[date]:
    month, day = anchors
    for year in range(low.year, high.year + 1):
        yield clamped_date(year, month, day)


_GENERATORS: Dict[Frequency, Callable[[Tuple[int, ...], date, date], Iterable[date]]] = {
    Frequency.WEEKLY: _weekly,
    Frequency.SEMI_MONTHLY: _semi_monthly,
    Frequency.MONTHLY: _monthly,
    Frequency.QUARTERLY: _quarterly,
    Frequency.SEMI_ANNUAL: _semi_annual,
    Frequency.ANNUAL: _annual,
}
