"""GET /v1/forecast-items/historical - Vendor history for sizing a forecast item"""

import logging
from datetime import date, timedelta
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from cashflow_forecast.api.v1.schemas import HistoricalResponse, HistoricalStatsSchema, HistoricalTransactionSchema
from cashflow_forecast.api.dependencies import get_transaction_repository
from cashflow_forecast.config import settings
from cashflow_forecast.domain.history import summarize_vendor_history
from cashflow_forecast.infrastructure.database.repositories import TransactionRepository

router = APIRouter()


@router.get("/forecast-items/historical", response_model=HistoricalResponse)
def get_vendor_history(
    vendor: str = Query(..., min_length=1, description="Vendor name (substring match)"),
    repo: TransactionRepository = Depends(get_transaction_repository),
):
    """
    Summarize a vendor's classified transactions over the lookback period.

    Returns:
        Transactions plus counts, averages and a suggested estimated amount
    """
    since = date.today() - timedelta(days=settings.history_lookback_days)

    try:
        transactions = repo.get_classified_by_vendor(vendor, since)
    except SQLAlchemyError as e:
        logging.error(f"Vendor history lookup failed: {e}", extra={"vendor": vendor})
        raise HTTPException(status_code=503, detail="Transaction store unavailable")

    stats = summarize_vendor_history(transactions)

    return HistoricalResponse(
        vendor=vendor,
        transactions=[
            HistoricalTransactionSchema(
                id=t.transaction.id,
                date=t.date,
                amount=t.amount,
                name=t.transaction.name,
                description=t.transaction.description,
                category_code=t.category_code,
                is_verified=t.verified,
            )
            for t in transactions
        ],
        stats=HistoricalStatsSchema.model_validate(stats),
    )
