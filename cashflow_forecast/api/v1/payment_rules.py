"""POST /v1/payment-rules/preview - Show the dates a rule would generate"""

from fastapi import APIRouter, HTTPException

from cashflow_forecast.api.v1.schemas import RulePreviewRequest, RulePreviewResponse
from cashflow_forecast.domain.exceptions import ForecastValidationError
from cashflow_forecast.domain.models import PaymentRule
from cashflow_forecast.domain.recurrence import generate_dates
from cashflow_forecast.domain.rule_names import describe_rule, rule_name

router = APIRouter()


@router.post("/payment-rules/preview", response_model=RulePreviewResponse)
def preview_payment_rule(request_body: RulePreviewRequest):
    """
    Validate a rule and list its business-day-adjusted dates in a window.

    Returns:
        Canonical rule name, display label and generated dates
    """
    rule = PaymentRule(
        frequency=request_body.frequency,
        anchor_days=tuple(request_body.anchor_days),
        exception_rule=request_body.exception_rule,
    )

    try:
        dates = generate_dates(rule, request_body.start_date, request_body.end_date)
    except ForecastValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return RulePreviewResponse(
        rule_name=rule_name(rule),
        description=describe_rule(rule),
        dates=dates,
    )
