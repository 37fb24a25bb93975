"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from typing import List, Optional

from cashflow_forecast.domain.models import BusinessDayPolicy, CashDirection, Frequency


class CategoryForecastSchema(BaseModel):
    """One category's total within a week"""

    model_config = ConfigDict(from_attributes=True)

    display_group: str
    display_label: str
    display_label2: Optional[str] = None
    category_code: str
    cash_direction: CashDirection
    amount: float
    transaction_count: int
    is_actual: bool
    sort_order: int


class WeeklyForecastSchema(BaseModel):
    """One row of the projected ledger"""

    model_config = ConfigDict(from_attributes=True)

    week_ending: date
    beginning_cash: float
    total_inflows: float
    total_outflows: float
    net_cash_flow: float
    ending_cash: float
    categories: List[CategoryForecastSchema]


class ForecastParamsSchema(BaseModel):
    """Effective window (resolved on success, as requested on failure)"""

    model_config = ConfigDict(from_attributes=True)

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    weeks_count: Optional[int] = None
    forecast_weeks: int = 0


class ForecastResponse(BaseModel):
    """Response for GET /v1/forecast/weeks"""

    model_config = ConfigDict(from_attributes=True)

    success: bool
    weeks: List[WeeklyForecastSchema]
    params: ForecastParamsSchema
    message: Optional[str] = None


class RulePreviewRequest(BaseModel):
    """Request body for POST /v1/payment-rules/preview"""

    frequency: Frequency
    anchor_days: List[int] = Field(..., min_length=1, description="Frequency-specific anchor values")
    exception_rule: BusinessDayPolicy = BusinessDayPolicy.MOVE_LATER
    start_date: date
    end_date: date


class RulePreviewResponse(BaseModel):
    """Response for POST /v1/payment-rules/preview"""

    rule_name: str
    description: str
    dates: List[date]


class HistoricalTransactionSchema(BaseModel):
    """Single classified vendor transaction"""

    id: str
    date: date
    amount: float
    name: Optional[str] = None
    description: Optional[str] = None
    category_code: str
    is_verified: bool


class HistoricalStatsSchema(BaseModel):
    """Vendor history summary"""

    model_config = ConfigDict(from_attributes=True)

    total_count: int
    verified_count: int
    verification_rate: int
    average_all: float
    average_verified: float
    suggested_forecast: float


class HistoricalResponse(BaseModel):
    """Response for GET /v1/forecast-items/historical"""

    vendor: str
    transactions: List[HistoricalTransactionSchema]
    stats: HistoricalStatsSchema
