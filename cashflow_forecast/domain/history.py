"""Vendor history summary used to suggest a forecast item's estimated amount"""

from decimal import ROUND_HALF_UP, Decimal
from typing import List

from cashflow_forecast.domain.models import ClassifiedTransaction, HistoricalStats

WHOLE_DOLLAR = Decimal("1")


def _average(amounts: List[Decimal]) -> Decimal:
    if not amounts:
        return Decimal("0")
    return (sum(amounts, Decimal("0")) / len(amounts)).quantize(WHOLE_DOLLAR, rounding=ROUND_HALF_UP)


def summarize_vendor_history(transactions: List[ClassifiedTransaction]) -> HistoricalStats:
    """
    Summarize a vendor's classified transactions.

    Averages use absolute amounts and are rounded to whole dollars. The
    suggestion prefers the verified average and falls back to the average
    over all classified transactions when nothing is verified yet.
    """
    verified = [t for t in transactions if t.verified]
    total_count = len(transactions)
    verified_count = len(verified)

    average_all = _average([abs(t.amount) for t in transactions])
    average_verified = _average([abs(t.amount) for t in verified])
    rate = round(verified_count * 100 / total_count) if total_count else 0

    return HistoricalStats(
        total_count=total_count,
        verified_count=verified_count,
        verification_rate=rate,
        average_all=average_all,
        average_verified=average_verified,
        suggested_forecast=average_verified if verified_count else average_all,
    )
