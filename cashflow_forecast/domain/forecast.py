"""Forecast computation entry point - derives the window, reads inputs, runs the aggregator"""

import logging
from datetime import date, timedelta
from typing import List, Optional, Protocol

from cashflow_forecast.config import Settings, settings
from cashflow_forecast.domain.aggregator import aggregate_forecast
from cashflow_forecast.domain.exceptions import (
    DataAccessError,
    ForecastValidationError,
    InvalidRuleError,
    InvalidWindowError,
)
from cashflow_forecast.domain.models import (
    ARForecast,
    CashBalance,
    ClassifiedTransaction,
    DisplayCategory,
    ForecastInputs,
    ForecastItem,
    ForecastParams,
    ForecastResult,
    ForecastWindow,
)
from cashflow_forecast.domain.recurrence import validate_rule
from cashflow_forecast.domain.weeks import week_ending_of

logger = logging.getLogger(__name__)


class ForecastDataSource(Protocol):
    """Read-only collaborator stores consumed by the forecast"""

    def latest_verified_transaction_date(self) -> Optional[date]: ...

    def verified_transactions(self, start: date, end: date) -> List[ClassifiedTransaction]: ...

    def display_categories(self) -> List[DisplayCategory]: ...

    def active_forecast_items(self) -> List[ForecastItem]: ...

    def ar_forecasts(self, start: date, end: date) -> List[ARForecast]: ...

    def latest_cash_balance(self, on_or_before: date) -> Optional[CashBalance]: ...


def validate_params(params: ForecastParams) -> None:
    if params.weeks_count is not None and params.weeks_count < 1:
        raise InvalidWindowError(f"weeks_count must be at least 1, got {params.weeks_count}")
    if params.forecast_weeks < 0:
        raise InvalidWindowError(f"forecast_weeks cannot be negative, got {params.forecast_weeks}")
    if params.start_date and params.end_date and params.start_date > params.end_date:
        raise InvalidWindowError(f"Window start {params.start_date} is after end {params.end_date}")


def derive_window(
    params: ForecastParams,
    latest_actual_date: Optional[date],
    config: Settings = settings,
) -> ForecastWindow:
    """
    Resolve the forecast window from explicit dates or a week count.

    Without an end date the window ends on the week of the latest verified
    transaction, pushed out by forecast_weeks. Without a start date it spans
    back weeks_count whole weeks from the end's week.

    Raises:
        InvalidWindowError: bad counts, inverted range, or too many weeks
    """
    validate_params(params)
    weeks_count = params.weeks_count if params.weeks_count is not None else config.default_weeks_count

    end = params.end_date
    if end is None:
        if latest_actual_date is None:
            raise InvalidWindowError("No end date given and no verified transactions to anchor the window")
        end = week_ending_of(latest_actual_date) + timedelta(weeks=params.forecast_weeks)

    start = params.start_date
    if start is None:
        start = week_ending_of(end) - timedelta(days=7 * weeks_count - 1)

    if start > end:
        raise InvalidWindowError(f"Window start {start} is after end {end}")

    window = ForecastWindow(start=start, end=end)
    if len(window.week_endings) > config.max_window_weeks:
        raise InvalidWindowError(
            f"Window spans {len(window.week_endings)} weeks; the limit is {config.max_window_weeks}"
        )
    return window


def first_week_start(window: ForecastWindow) -> date:
    """Monday of the window's first week; AR entries dated from here on land in the window"""
    return week_ending_of(window.start) - timedelta(days=6)


def read_inputs(
    source: ForecastDataSource,
    window: ForecastWindow,
    latest_actual_date: Optional[date],
) -> ForecastInputs:
    """Read every collaborator once for the window"""
    return ForecastInputs(
        transactions=source.verified_transactions(window.start, window.end),
        categories={c.category_code: c for c in source.display_categories()},
        forecast_items=source.active_forecast_items(),
        ar_forecasts=source.ar_forecasts(first_week_start(window), week_ending_of(window.end)),
        cash_balance=source.latest_cash_balance(window.start),
        latest_actual_date=latest_actual_date,
    )


def validate_forecast_items(items: List[ForecastItem]) -> None:
    """Reject the whole request if any active item carries a malformed rule"""
    for item in items:
        if not item.is_active:
            continue
        try:
            validate_rule(item.rule)
        except InvalidRuleError as e:
            raise InvalidRuleError(f"Forecast item {item.id} ({item.vendor_name}): {e}") from e


def compute_forecast(
    source: ForecastDataSource,
    params: Optional[ForecastParams] = None,
    config: Settings = settings,
) -> ForecastResult:
    """
    Main entry point: compute the weekly cash-flow ledger.

    Never raises for expected failures: validation problems and store read
    errors come back as ForecastResult(success=False) with an empty week
    list and a message.
    """
    params = params or ForecastParams()

    try:
        validate_params(params)
        latest_actual_date = source.latest_verified_transaction_date()
        if params.end_date is None and latest_actual_date is None:
            return ForecastResult(success=True, weeks=[], params=params, message="No transactions found")

        window = derive_window(params, latest_actual_date, config)
        inputs = read_inputs(source, window, latest_actual_date)
        validate_forecast_items(inputs.forecast_items)

        weeks = aggregate_forecast(
            inputs,
            window,
            ar_display_group=config.ar_display_group,
            ar_clearing_account=config.ar_clearing_account,
        )

    except ForecastValidationError as e:
        logger.warning(f"Forecast rejected: {e}")
        return ForecastResult(success=False, weeks=[], params=params, message=str(e), error_type="validation")

    except DataAccessError as e:
        logger.error(f"Forecast data access failed: {e}")
        return ForecastResult(success=False, weeks=[], params=params, message=str(e), error_type="data_access")

    logger.info(
        "Forecast computed",
        extra={
            "start_date": window.start.isoformat(),
            "end_date": window.end.isoformat(),
            "week_count": len(weeks),
        },
    )

    return ForecastResult(
        success=True,
        weeks=weeks,
        params=ForecastParams(
            start_date=window.start,
            end_date=window.end,
            weeks_count=len(window.week_endings),
            forecast_weeks=params.forecast_weeks,
        ),
    )
