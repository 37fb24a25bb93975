"""Canonical names and display labels for payment rules"""

from cashflow_forecast.domain.models import Frequency, PaymentRule
from cashflow_forecast.domain.recurrence import quarter_months, validate_rule

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]  # Sunday=0, matching weekly anchors
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
LAST_DAY = 31


def ordinal(n: int) -> str:
    """1 -> 1st, 2 -> 2nd, 11 -> 11th, 22 -> 22nd"""
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def rule_name(rule: PaymentRule) -> str:
    """
    Library key for a rule, used to reuse an existing rule instead of creating a duplicate.

    Example:
        monthly [31] -> "Monthly_LastDay", quarterly [15, 1] -> "Quarterly_15_Jan"
    """
    validate_rule(rule)
    anchors = rule.anchor_days
    frequency = Frequency(rule.frequency)

    if frequency == Frequency.WEEKLY:
        return f"Weekly_{DAY_NAMES[anchors[0]]}"
    if frequency == Frequency.SEMI_MONTHLY:
        return f"SemiMonthly_{anchors[0]}_{anchors[1]}"
    if frequency == Frequency.MONTHLY:
        return "Monthly_LastDay" if anchors[0] == LAST_DAY else f"Monthly_{anchors[0]}"
    if frequency == Frequency.QUARTERLY:
        day, month = anchors
        return f"Quarterly_{day}_{MONTH_NAMES[month - 1]}"
    if frequency == Frequency.SEMI_ANNUAL:
        month1, day1, month2, day2 = anchors
        return f"SemiAnnual_{MONTH_NAMES[month1 - 1]}{day1}_{MONTH_NAMES[month2 - 1]}{day2}"
    month, day = anchors
    return f"Annual_{MONTH_NAMES[month - 1]}{day}"


def describe_rule(rule: PaymentRule) -> str:
    """Human-readable schedule, e.g. "Quarterly (Jan 15, Apr 15, Jul 15, Oct 15)" """
    validate_rule(rule)
    anchors = rule.anchor_days
    frequency = Frequency(rule.frequency)

    if frequency == Frequency.WEEKLY:
        return f"Weekly ({DAY_NAMES[anchors[0]]})"
    if frequency == Frequency.SEMI_MONTHLY:
        return f"Semi-Monthly ({ordinal(anchors[0])}, {ordinal(anchors[1])})"
    if frequency == Frequency.MONTHLY:
        return "Monthly (Last Day)" if anchors[0] == LAST_DAY else f"Monthly ({ordinal(anchors[0])})"
    if frequency == Frequency.QUARTERLY:
        day, start_month = anchors
        dates = ", ".join(f"{MONTH_NAMES[m - 1]} {day}" for m in quarter_months(start_month))
        return f"Quarterly ({dates})"
    if frequency == Frequency.SEMI_ANNUAL:
        month1, day1, month2, day2 = anchors
        return f"Semi-Annual ({MONTH_NAMES[month1 - 1]} {day1}, {MONTH_NAMES[month2 - 1]} {day2})"
    month, day = anchors
    return f"Annual ({MONTH_NAMES[month - 1]} {day})"
