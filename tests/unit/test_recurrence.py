"""Unit tests for recurring payment date generation"""

import pytest
from datetime import date, timedelta
from cashflow_forecast.domain.exceptions import InvalidRuleError, InvalidWindowError
from cashflow_forecast.domain.models import BusinessDayPolicy, Frequency, PaymentRule
from cashflow_forecast.domain.recurrence import (
    apply_business_day_adjustment,
    generate_dates,
    quarter_months,
    validate_rule,
)
from cashflow_forecast.utils.date_utils import generate_date_range

LATER = BusinessDayPolicy.MOVE_LATER
EARLIER = BusinessDayPolicy.MOVE_EARLIER


def rule(frequency: Frequency, *anchors: int, policy: BusinessDayPolicy = LATER) -> PaymentRule:
    return PaymentRule(frequency=frequency, anchor_days=anchors, exception_rule=policy)


def test_monthly_end_of_month_scenario():
    """Anchor 31 clamps to each month's last day; all four land on weekdays"""
    dates = generate_dates(rule(Frequency.MONTHLY, 31), date(2025, 1, 1), date(2025, 4, 30))

    assert dates == [
        date(2025, 1, 31),  # Fri
        date(2025, 2, 28),  # Fri
        date(2025, 3, 31),  # Mon
        date(2025, 4, 30),  # Wed
    ]


@pytest.mark.parametrize(
    "year, expected",
    [
        (2025, date(2025, 2, 28)),
        (2024, date(2024, 2, 29)),  # leap year
    ],
)
def test_monthly_31_in_february(year, expected):
    dates = generate_dates(rule(Frequency.MONTHLY, 31), date(year, 2, 1), date(year, 2, 28 if year % 4 else 29))
    assert dates == [expected]


def test_weekly_friday_over_eight_weeks():
    """Eight Fridays, exactly seven days apart"""
    dates = generate_dates(rule(Frequency.WEEKLY, 5), date(2025, 1, 6), date(2025, 3, 2))

    assert len(dates) == 8
    assert all(d.weekday() == 4 for d in dates)
    assert all((b - a).days == 7 for a, b in zip(dates, dates[1:]))


def test_weekly_sunday_shifts_to_monday_inside_window():
    """Sunday Jan 5 moves into the window; Sunday Jan 26 moves out of it"""
    dates = generate_dates(rule(Frequency.WEEKLY, 0), date(2025, 1, 6), date(2025, 1, 26))

    assert dates == [date(2025, 1, 6), date(2025, 1, 13), date(2025, 1, 20)]


def test_semi_monthly_both_days_each_month():
    dates = generate_dates(rule(Frequency.SEMI_MONTHLY, 1, 15), date(2025, 1, 1), date(2025, 2, 28))

    # Feb 1 and Feb 15 2025 are Saturdays
    assert dates == [date(2025, 1, 1), date(2025, 1, 15), date(2025, 2, 3), date(2025, 2, 17)]


def test_semi_monthly_clamped_days_do_not_duplicate():
    """30 and 31 both clamp to Feb 28"""
    dates = generate_dates(rule(Frequency.SEMI_MONTHLY, 30, 31), date(2025, 2, 1), date(2025, 2, 28))
    assert dates == [date(2025, 2, 28)]


def test_quarterly_from_starting_month():
    dates = generate_dates(rule(Frequency.QUARTERLY, 15, 2), date(2025, 1, 1), date(2025, 12, 31))

    # Feb 15 and Nov 15 2025 are Saturdays
    assert dates == [date(2025, 2, 17), date(2025, 5, 15), date(2025, 8, 15), date(2025, 11, 17)]


@pytest.mark.parametrize(
    "start_month, expected",
    [(1, [1, 4, 7, 10]), (2, [2, 5, 8, 11]), (11, [11, 2, 5, 8]), (12, [12, 3, 6, 9])],
)
def test_quarter_months(start_month, expected):
    assert quarter_months(start_month) == expected


def test_quarterly_months_wrap_and_clamp():
    """Starting in November: Nov, Feb, May, Aug with day 31 clamped"""
    dates = generate_dates(rule(Frequency.QUARTERLY, 31, 11), date(2025, 1, 1), date(2025, 12, 31))

    assert dates == [
        date(2025, 2, 28),
        date(2025, 6, 2),  # May 31 is a Saturday
        date(2025, 9, 1),  # Aug 31 is a Sunday
        date(2025, 12, 1),  # Nov 30 is a Sunday
    ]


def test_semi_annual_across_year_boundary():
    dates = generate_dates(rule(Frequency.SEMI_ANNUAL, 1, 15, 7, 15), date(2025, 6, 1), date(2026, 6, 30))
    assert dates == [date(2025, 7, 15), date(2026, 1, 15)]


def test_annual_leap_day_clamps_in_common_years():
    dates = generate_dates(rule(Frequency.ANNUAL, 2, 29), date(2024, 1, 1), date(2025, 12, 31))
    assert dates == [date(2024, 2, 29), date(2025, 2, 28)]


def test_move_earlier_can_pull_next_month_back():
    """Mar 1 2025 is a Saturday, so the March payment goes out Friday Feb 28"""
    dates = generate_dates(
        rule(Frequency.MONTHLY, 1, policy=EARLIER), date(2025, 2, 1), date(2025, 3, 31)
    )
    # Feb 1 (Sat) moves to Jan 31, outside the window
    assert dates == [date(2025, 2, 28)]


def test_business_day_adjustment_shifts():
    saturday, sunday = date(2025, 2, 15), date(2025, 6, 15)

    assert apply_business_day_adjustment(saturday, LATER) == date(2025, 2, 17)
    assert apply_business_day_adjustment(saturday, EARLIER) == date(2025, 2, 14)
    assert apply_business_day_adjustment(sunday, LATER) == date(2025, 6, 16)
    assert apply_business_day_adjustment(sunday, EARLIER) == date(2025, 6, 13)


@pytest.mark.parametrize("policy", [LATER, EARLIER])
def test_business_day_adjustment_direction_for_every_day(policy):
    for day in generate_date_range(date(2025, 1, 1), date(2025, 12, 31)):
        adjusted = apply_business_day_adjustment(day, policy)

        assert adjusted.weekday() < 5
        if day.weekday() < 5:
            assert adjusted == day
        elif policy == LATER:
            assert timedelta(days=1) <= adjusted - day <= timedelta(days=2)
        else:
            assert timedelta(days=1) <= day - adjusted <= timedelta(days=2)


@pytest.mark.parametrize(
    "payment_rule",
    [
        rule(Frequency.WEEKLY, 6),
        rule(Frequency.WEEKLY, 0, policy=EARLIER),
        rule(Frequency.SEMI_MONTHLY, 1, 15),
        rule(Frequency.MONTHLY, 31, policy=EARLIER),
        rule(Frequency.QUARTERLY, 1, 3),
        rule(Frequency.SEMI_ANNUAL, 3, 1, 9, 30),
        rule(Frequency.ANNUAL, 12, 31),
    ],
)
def test_generated_dates_are_weekdays_sorted_and_in_window(payment_rule):
    start, end = date(2024, 1, 1), date(2026, 12, 31)
    dates = generate_dates(payment_rule, start, end)

    assert dates
    assert all(d.weekday() < 5 for d in dates)
    assert all(start <= d <= end for d in dates)
    assert dates == sorted(set(dates))


@pytest.mark.parametrize(
    "frequency, anchors",
    [
        (Frequency.WEEKLY, (7,)),
        (Frequency.WEEKLY, (1, 2)),
        (Frequency.MONTHLY, (0,)),
        (Frequency.MONTHLY, (32,)),
        (Frequency.MONTHLY, ()),
        (Frequency.SEMI_MONTHLY, (15,)),
        (Frequency.QUARTERLY, (15,)),
        (Frequency.QUARTERLY, (15, 13)),
        (Frequency.SEMI_ANNUAL, (1, 15, 7)),
        (Frequency.ANNUAL, (13, 1)),
        (Frequency.ANNUAL, (12, 0)),
    ],
)
def test_malformed_anchor_days_rejected(frequency, anchors):
    with pytest.raises(InvalidRuleError):
        generate_dates(rule(frequency, *anchors), date(2025, 1, 1), date(2025, 12, 31))


def test_unknown_frequency_rejected():
    bad = PaymentRule(frequency="biweekly", anchor_days=(5,), exception_rule=LATER)
    with pytest.raises(InvalidRuleError, match="biweekly"):
        validate_rule(bad)


def test_unknown_policy_rejected():
    bad = PaymentRule(frequency=Frequency.MONTHLY, anchor_days=(15,), exception_rule="nearest")
    with pytest.raises(InvalidRuleError, match="nearest"):
        validate_rule(bad)


def test_inverted_window_rejected():
    with pytest.raises(InvalidWindowError):
        generate_dates(rule(Frequency.MONTHLY, 15), date(2025, 3, 1), date(2025, 2, 1))
