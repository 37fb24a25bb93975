"""Weekly cash-flow aggregation - merges actuals, AR forecasts and recurring projections"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Dict, List, Mapping, Optional

from cashflow_forecast.domain.models import (
    CashDirection,
    CategoryForecast,
    DisplayCategory,
    ForecastInputs,
    ForecastWindow,
    WeeklyForecast,
)
from cashflow_forecast.domain.recurrence import generate_dates
from cashflow_forecast.domain.weeks import week_ending_of

logger = logging.getLogger(__name__)

AR_COLLECTIONS_CODE = "ar_collections"
AR_COLLECTIONS_LABEL = "AR Collections"
AR_OTHER_REVENUE_CODE = "ar_other_revenue"
AR_OTHER_REVENUE_LABEL = "Other Revenue"

ZERO = Decimal("0")

# week_ending -> category_code -> accumulated bucket
WeekBuckets = Dict[date, Dict[str, CategoryForecast]]


def is_ar_collections_entry(gl_account_name: Optional[str], clearing_account: str) -> bool:
    """True when an AR-group transaction was posted against the receivables-clearing account"""
    return bool(gl_account_name) and clearing_account in gl_account_name


def needs_ar_forecast(week_buckets: Mapping[str, CategoryForecast]) -> bool:
    """A manual AR forecast only fills a week that has no actual AR collections"""
    existing = week_buckets.get(AR_COLLECTIONS_CODE)
    return existing is None or not existing.is_actual


def is_projectable(occurrence: date, latest_actual_week: Optional[date]) -> bool:
    """Projections only land in weeks strictly after the latest week with actuals"""
    return latest_actual_week is None or week_ending_of(occurrence) > latest_actual_week


def create_week_skeleton(window: ForecastWindow) -> WeekBuckets:
    """One empty bucket per week so quiet weeks still show up with zero totals"""
    return {week: {} for week in window.week_endings}


def fold_actuals(
    buckets: WeekBuckets,
    inputs: ForecastInputs,
    window: ForecastWindow,
    ar_display_group: str,
    ar_clearing_account: str,
) -> WeekBuckets:
    """
    Accumulate verified transactions into week/category buckets.

    AR-group categories are split into AR Collections vs Other Revenue by
    the transaction's GL account. Unverified transactions never count;
    transactions whose category is missing from the registry are skipped.
    """
    result = _copy(buckets)

    for tx in inputs.transactions:
        if not tx.verified or not window.contains(tx.date):
            continue

        category = inputs.categories.get(tx.category_code)
        if category is None:
            logger.warning(
                "Skipping transaction with unknown category",
                extra={"transaction_id": tx.transaction.id, "category_code": tx.category_code},
            )
            continue

        code, label = category.category_code, category.display_label
        if category.display_group == ar_display_group:
            if is_ar_collections_entry(tx.transaction.gl_account_name, ar_clearing_account):
                code, label = AR_COLLECTIONS_CODE, AR_COLLECTIONS_LABEL
            else:
                code, label = AR_OTHER_REVENUE_CODE, AR_OTHER_REVENUE_LABEL

        week = result.setdefault(week_ending_of(tx.date), {})
        existing = week.get(code)
        if existing is None:
            week[code] = _bucket(category, code, label, tx.amount, 1, is_actual=True)
        else:
            week[code] = replace(
                existing,
                amount=existing.amount + tx.amount,
                transaction_count=existing.transaction_count + 1,
                is_actual=True,
            )

    return result


def overlay_ar_forecasts(
    buckets: WeekBuckets,
    inputs: ForecastInputs,
    latest_actual_week: Optional[date],
    ar_display_group: str,
) -> WeekBuckets:
    """Fill AR collections from manual forecasts for current/future weeks lacking actuals"""
    result = _copy(buckets)
    template = _ar_template(inputs.categories, ar_display_group)

    for entry in inputs.ar_forecasts:
        week_key = week_ending_of(entry.week_ending)
        if week_key not in result:
            continue
        if latest_actual_week is not None and week_key < latest_actual_week:
            continue

        week = result[week_key]
        if not needs_ar_forecast(week):
            continue

        existing = week.get(AR_COLLECTIONS_CODE)
        if existing is None:
            week[AR_COLLECTIONS_CODE] = _bucket(
                template, AR_COLLECTIONS_CODE, AR_COLLECTIONS_LABEL, entry.forecasted_amount, 0, is_actual=False
            )
        else:
            week[AR_COLLECTIONS_CODE] = replace(existing, amount=existing.amount + entry.forecasted_amount)

    return result


def overlay_recurring_items(
    buckets: WeekBuckets,
    inputs: ForecastInputs,
    window: ForecastWindow,
    latest_actual_week: Optional[date],
) -> WeekBuckets:
    """
    Project every active forecast item over the window.

    Each occurrence after the latest actual week adds the item's estimated
    amount (signed by the category's cash direction) to its week; several
    occurrences in one week sum. Items without a known category are skipped.
    """
    result = _copy(buckets)

    for item in inputs.forecast_items:
        if not item.is_active:
            continue

        category = inputs.categories.get(item.category_code) if item.category_code else None
        if category is None:
            logger.warning(
                "Skipping forecast item with missing category",
                extra={"forecast_item_id": item.id, "category_code": item.category_code},
            )
            continue

        amount = abs(item.estimated_amount)
        if category.cash_direction == CashDirection.CASHOUT:
            amount = -amount

        for occurrence in generate_dates(item.rule, window.start, window.end):
            if not is_projectable(occurrence, latest_actual_week):
                continue
            week = result.get(week_ending_of(occurrence))
            if week is None:
                continue

            existing = week.get(category.category_code)
            if existing is None:
                week[category.category_code] = _bucket(
                    category, category.category_code, category.display_label, amount, 1, is_actual=False
                )
            else:
                week[category.category_code] = replace(
                    existing,
                    amount=existing.amount + amount,
                    transaction_count=existing.transaction_count + 1,
                )

    return result


def build_ledger(buckets: WeekBuckets, beginning_cash: Decimal) -> List[WeeklyForecast]:
    """
    Reduce buckets to weekly totals and thread the running cash balance.

    Inflows/outflows are absolute sums by cash direction; each week's
    beginning cash is the prior week's ending cash.
    """
    weeks: List[WeeklyForecast] = []
    running_cash = beginning_cash

    for week_ending in sorted(buckets):
        categories = sorted(
            buckets[week_ending].values(),
            key=lambda c: (c.sort_order, c.category_code),
        )

        total_inflows = sum(
            (abs(c.amount) for c in categories if c.cash_direction == CashDirection.CASHIN), ZERO
        )
        total_outflows = sum(
            (abs(c.amount) for c in categories if c.cash_direction == CashDirection.CASHOUT), ZERO
        )
        net_cash_flow = total_inflows - total_outflows
        ending_cash = running_cash + net_cash_flow

        weeks.append(
            WeeklyForecast(
                week_ending=week_ending,
                beginning_cash=running_cash,
                total_inflows=total_inflows,
                total_outflows=total_outflows,
                net_cash_flow=net_cash_flow,
                ending_cash=ending_cash,
                categories=categories,
            )
        )
        running_cash = ending_cash

    return weeks


def aggregate_forecast(
    inputs: ForecastInputs,
    window: ForecastWindow,
    ar_display_group: str = "AR",
    ar_clearing_account: str = "1200 Accounts Receivable",
) -> List[WeeklyForecast]:
    """
    Main entry point: build the weekly ledger for a window from one input snapshot.

    Order matters: actuals first, then AR forecasts (which defer to actual
    AR collections), then recurring projections, then totals and balance.
    """
    latest_actual_week = week_ending_of(inputs.latest_actual_date) if inputs.latest_actual_date else None

    buckets = create_week_skeleton(window)
    buckets = fold_actuals(buckets, inputs, window, ar_display_group, ar_clearing_account)
    buckets = overlay_ar_forecasts(buckets, inputs, latest_actual_week, ar_display_group)
    buckets = overlay_recurring_items(buckets, inputs, window, latest_actual_week)

    beginning_cash = inputs.cash_balance.balance if inputs.cash_balance else ZERO
    return build_ledger(buckets, beginning_cash)


def _copy(buckets: WeekBuckets) -> WeekBuckets:
    return {week: dict(categories) for week, categories in buckets.items()}


def _bucket(
    category: DisplayCategory,
    code: str,
    label: str,
    amount: Decimal,
    count: int,
    is_actual: bool,
) -> CategoryForecast:
    return CategoryForecast(
        display_group=category.display_group,
        display_label=label,
        display_label2=category.display_label2,
        category_code=code,
        cash_direction=category.cash_direction,
        amount=amount,
        transaction_count=count,
        is_actual=is_actual,
        sort_order=category.sort_order,
    )


def _ar_template(categories: Mapping[str, DisplayCategory], ar_display_group: str) -> DisplayCategory:
    """Display metadata for a forecast-only AR collections bucket"""
    ar_categories = sorted(
        (c for c in categories.values() if c.display_group == ar_display_group),
        key=lambda c: (c.sort_order, c.category_code),
    )
    if ar_categories:
        return ar_categories[0]
    return DisplayCategory(
        category_code=AR_COLLECTIONS_CODE,
        display_group=ar_display_group,
        display_label=AR_COLLECTIONS_LABEL,
        cash_direction=CashDirection.CASHIN,
    )
