"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple

from cashflow_forecast.domain.weeks import week_endings_between


class Frequency(str, Enum):
    """How often a payment rule recurs"""

    WEEKLY = "weekly"
    SEMI_MONTHLY = "semi-monthly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUAL = "semi-annual"
    ANNUAL = "annual"


class BusinessDayPolicy(str, Enum):
    """Where a payment that lands on a weekend is moved to"""

    MOVE_LATER = "move_later"  # following Monday
    MOVE_EARLIER = "move_earlier"  # preceding Friday


class CashDirection(str, Enum):
    CASHIN = "Cashin"
    CASHOUT = "Cashout"


@dataclass(frozen=True)
class PaymentRule:
    """Recurring obligation template; anchor_days layout depends on frequency"""

    frequency: Frequency
    anchor_days: Tuple[int, ...]
    exception_rule: BusinessDayPolicy = BusinessDayPolicy.MOVE_LATER
    rule_name: Optional[str] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class ForecastItem:
    """Vendor + rule + estimated amount per occurrence"""

    id: str
    vendor_name: str
    estimated_amount: Decimal
    rule: PaymentRule
    category_code: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class RawTransaction:
    """Imported bank transaction (positive = inflow, negative = outflow)"""

    id: str
    date: date
    amount: Decimal
    gl_account_name: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class ClassifiedTransaction:
    """A raw transaction joined to exactly one classification"""

    transaction: RawTransaction
    category_code: str
    verified: bool

    @property
    def date(self) -> date:
        return self.transaction.date

    @property
    def amount(self) -> Decimal:
        return self.transaction.amount


@dataclass(frozen=True)
class DisplayCategory:
    """Display metadata for a category code"""

    category_code: str
    display_group: str
    display_label: str
    cash_direction: CashDirection
    sort_order: int = 0
    display_label2: Optional[str] = None


@dataclass(frozen=True)
class ARForecast:
    """Manually entered AR collections estimate for one week"""

    week_ending: date
    forecasted_amount: Decimal


@dataclass(frozen=True)
class CashBalance:
    """Manually entered bank balance snapshot"""

    as_of_date: date
    balance: Decimal
    bank_account: str = "Operating"


@dataclass(frozen=True)
class CategoryForecast:
    """One category's total within one week"""

    display_group: str
    display_label: str
    category_code: str
    cash_direction: CashDirection
    amount: Decimal
    transaction_count: int
    is_actual: bool
    sort_order: int
    display_label2: Optional[str] = None


@dataclass(frozen=True)
class WeeklyForecast:
    """One row of the projected ledger"""

    week_ending: date
    beginning_cash: Decimal
    total_inflows: Decimal
    total_outflows: Decimal
    net_cash_flow: Decimal
    ending_cash: Decimal
    categories: List[CategoryForecast] = field(default_factory=list)


@dataclass(frozen=True)
class ForecastParams:
    """Caller-supplied window; any omitted field is derived"""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    weeks_count: Optional[int] = None
    forecast_weeks: int = 0


@dataclass(frozen=True)
class ForecastWindow:
    """Inclusive date range covered by a forecast"""

    start: date
    end: date

    @property
    def week_endings(self) -> List[date]:
        """Every Sunday key from the week of start to the week of end"""
        return week_endings_between(self.start, self.end)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class ForecastInputs:
    """Everything read from the collaborator stores for one computation"""

    transactions: List[ClassifiedTransaction]
    categories: Dict[str, DisplayCategory]
    forecast_items: List[ForecastItem]
    ar_forecasts: List[ARForecast]
    cash_balance: Optional[CashBalance]
    latest_actual_date: Optional[date]


@dataclass
class ForecastResult:
    """Outcome of a forecast request; weeks is empty whenever success is False"""

    success: bool
    weeks: List[WeeklyForecast]
    params: ForecastParams
    message: Optional[str] = None
    error_type: Optional[str] = None  # "validation" | "data_access"


@dataclass
class HistoricalStats:
    """Vendor transaction summary used to suggest a forecast amount"""

    total_count: int
    verified_count: int
    verification_rate: int
    average_all: Decimal
    average_verified: Decimal
    suggested_forecast: Decimal
