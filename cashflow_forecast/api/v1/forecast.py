"""GET /v1/forecast/weeks - Weekly cash-flow forecast endpoint"""

import time
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from cashflow_forecast.api.v1.schemas import ForecastResponse
from cashflow_forecast.api.dependencies import get_forecast_source, get_request_id
from cashflow_forecast.domain.forecast import ForecastDataSource, compute_forecast
from cashflow_forecast.domain.models import ForecastParams
from cashflow_forecast.infrastructure.observability.metrics import forecast_latency_histogram, record_forecast
from cashflow_forecast.infrastructure.observability.logging import log_forecast

router = APIRouter()

FAILURE_STATUS = {
    "validation": 422,
    "data_access": 503,
}


@router.get("/forecast/weeks", response_model=ForecastResponse)
def get_forecast_weeks(
    request: Request,
    response: Response,
    start_date: Optional[date] = Query(None, description="First day of the window"),
    end_date: Optional[date] = Query(None, description="Last day of the window"),
    weeks_count: Optional[int] = Query(None, description="Weeks to show when start_date is omitted"),
    forecast_weeks: int = Query(0, description="Weeks to project past the latest actual week"),
    source: ForecastDataSource = Depends(get_forecast_source),
):
    """
    Compute the week-by-week projected ledger with running cash balance.

    Flow:
    1. Resolve the window (explicit dates, or weeks_count back from the latest actual week)
    2. Read transactions, categories, forecast items, AR forecasts and cash balance
    3. Fold actuals, overlay AR forecasts and recurring payments
    4. Return weeks with totals and beginning/ending cash

    Failures return success=false with an empty week list: 422 for invalid
    input, 503 when the stores cannot be read.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    params = ForecastParams(
        start_date=start_date,
        end_date=end_date,
        weeks_count=weeks_count,
        forecast_weeks=forecast_weeks,
    )

    try:
        with forecast_latency_histogram.time():
            result = compute_forecast(source, params)
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_forecast(result.success, len(result.weeks), result.error_type)
    log_forecast(request_id, result.success, len(result.weeks), duration_ms, result.message)

    if not result.success:
        response.status_code = FAILURE_STATUS.get(result.error_type, 500)

    return ForecastResponse.model_validate(result)
