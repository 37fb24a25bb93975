"""Data access layer for forecast inputs"""

from datetime import date
from typing import Callable, List, Optional, TypeVar
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from cashflow_forecast.infrastructure.database.models import (
    ARForecastRecord,
    CashBalanceRecord,
    ClassifiedBankTransaction,
    DisplayCategoryRecord,
    ForecastItemRecord,
    PaymentRuleRecord,
    RawTransactionRecord,
)
from cashflow_forecast.domain.exceptions import DataAccessError
from cashflow_forecast.domain.models import (
    ARForecast,
    BusinessDayPolicy,
    CashBalance,
    CashDirection,
    ClassifiedTransaction,
    DisplayCategory,
    ForecastItem,
    Frequency,
    PaymentRule,
    RawTransaction,
)

T = TypeVar("T")


def _to_classified(tx: RawTransactionRecord, classification: ClassifiedBankTransaction) -> ClassifiedTransaction:
    return ClassifiedTransaction(
        transaction=RawTransaction(
            id=str(tx.id),
            date=tx.date,
            amount=tx.amount,
            gl_account_name=tx.qb_account_name,
            name=tx.name,
            description=tx.description,
        ),
        category_code=classification.category_code,
        verified=classification.is_verified,
    )


def _enum_or_raw(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return value  # left for validate_rule to reject as a validation error


def _anchor_tuple(value) -> tuple:
    """JSON anchor_days as a tuple; a bare scalar is read as a single anchor"""
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


def _to_rule(record: PaymentRuleRecord) -> PaymentRule:
    return PaymentRule(
        frequency=_enum_or_raw(Frequency, record.frequency),
        anchor_days=_anchor_tuple(record.anchor_days),
        exception_rule=_enum_or_raw(BusinessDayPolicy, record.exception_rule),
        rule_name=record.rule_name,
        id=str(record.id),
    )


class TransactionRepository:
    """Repository for raw transactions joined to their classification"""

    def __init__(self, db: Session):
        self.db = db

    def get_latest_verified_date(self) -> Optional[date]:
        """Date of the most recent verified transaction"""
        return (
            self.db.query(func.max(RawTransactionRecord.date))
            .select_from(RawTransactionRecord)
            .join(RawTransactionRecord.classification)
            .filter(ClassifiedBankTransaction.is_verified.is_(True))
            .scalar()
        )

    def get_verified_between(self, start: date, end: date) -> List[ClassifiedTransaction]:
        """Verified transactions dated within [start, end], oldest first"""
        rows = (
            self.db.query(RawTransactionRecord, ClassifiedBankTransaction)
            .join(RawTransactionRecord.classification)
            .filter(ClassifiedBankTransaction.is_verified.is_(True))
            .filter(RawTransactionRecord.date >= start, RawTransactionRecord.date <= end)
            .order_by(RawTransactionRecord.date, RawTransactionRecord.id)
            .all()
        )
        return [_to_classified(tx, classification) for tx, classification in rows]

    def get_classified_by_vendor(self, vendor_name: str, since: date) -> List[ClassifiedTransaction]:
        """Classified transactions whose name contains the vendor, newest first"""
        rows = (
            self.db.query(RawTransactionRecord, ClassifiedBankTransaction)
            .join(RawTransactionRecord.classification)
            .filter(RawTransactionRecord.name.ilike(f"%{vendor_name}%"))
            .filter(RawTransactionRecord.date >= since)
            .order_by(RawTransactionRecord.date.desc(), RawTransactionRecord.id)
            .all()
        )
        return [_to_classified(tx, classification) for tx, classification in rows]


class CategoryRepository:
    """Repository for display categories"""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> List[DisplayCategory]:
        records = (
            self.db.query(DisplayCategoryRecord)
            .order_by(DisplayCategoryRecord.sort_order, DisplayCategoryRecord.category_code)
            .all()
        )
        return [
            DisplayCategory(
                category_code=r.category_code,
                display_group=r.display_group,
                display_label=r.display_label,
                display_label2=r.display_label2,
                cash_direction=CashDirection(r.cash_direction),
                sort_order=r.sort_order or 0,
            )
            for r in records
        ]


class ForecastItemRepository:
    """Repository for forecast items and their payment rules"""

    def __init__(self, db: Session):
        self.db = db

    def get_active(self) -> List[ForecastItem]:
        """Active items, each loaded with its rule"""
        records = (
            self.db.query(ForecastItemRecord)
            .options(joinedload(ForecastItemRecord.rule))
            .filter(ForecastItemRecord.is_active.is_(True))
            .order_by(ForecastItemRecord.vendor_name, ForecastItemRecord.id)
            .all()
        )
        return [
            ForecastItem(
                id=str(r.id),
                vendor_name=r.vendor_name,
                estimated_amount=r.estimated_amount,
                rule=_to_rule(r.rule),
                category_code=r.category_code,
                is_active=r.is_active,
            )
            for r in records
        ]


class ARForecastRepository:
    """Repository for manual AR forecasts"""

    def __init__(self, db: Session):
        self.db = db

    def get_between(self, start: date, end: date) -> List[ARForecast]:
        records = (
            self.db.query(ARForecastRecord)
            .filter(ARForecastRecord.week_ending >= start, ARForecastRecord.week_ending <= end)
            .order_by(ARForecastRecord.week_ending)
            .all()
        )
        return [ARForecast(week_ending=r.week_ending, forecasted_amount=r.forecasted_amount) for r in records]


class CashBalanceRepository:
    """Repository for manual cash balance snapshots"""

    def __init__(self, db: Session):
        self.db = db

    def get_latest_on_or_before(self, as_of: date) -> Optional[CashBalance]:
        record = (
            self.db.query(CashBalanceRecord)
            .filter(CashBalanceRecord.as_of_date <= as_of)
            .order_by(CashBalanceRecord.as_of_date.desc(), CashBalanceRecord.bank_account)
            .first()
        )
        if record is None:
            return None
        return CashBalance(as_of_date=record.as_of_date, balance=record.balance, bank_account=record.bank_account)


class SqlForecastDataSource:
    """
    Forecast collaborator stores backed by one SQLAlchemy session.

    On PostgreSQL the session's transaction runs at REPEATABLE READ so every
    read sees the same snapshot. Any SQLAlchemy failure, or a row that
    cannot be converted (e.g. unknown cash direction), surfaces as
    DataAccessError.
    """

    def __init__(self, db: Session):
        self.db = db
        self.transactions = TransactionRepository(db)
        self.categories = CategoryRepository(db)
        self.forecast_items = ForecastItemRepository(db)
        self.ar = ARForecastRepository(db)
        self.cash_balances = CashBalanceRepository(db)

    def _read(self, what: str, fn: Callable[[], T]) -> T:
        try:
            self._begin_snapshot()
            return fn()
        except (SQLAlchemyError, ValueError) as e:
            raise DataAccessError(f"Failed to read {what}: {e}") from e

    def _begin_snapshot(self) -> None:
        if self.db.in_transaction() or self.db.get_bind().dialect.name != "postgresql":
            return
        self.db.connection(execution_options={"isolation_level": "REPEATABLE READ"})

    def latest_verified_transaction_date(self) -> Optional[date]:
        return self._read("latest transaction date", self.transactions.get_latest_verified_date)

    def verified_transactions(self, start: date, end: date) -> List[ClassifiedTransaction]:
        return self._read("transactions", lambda: self.transactions.get_verified_between(start, end))

    def display_categories(self) -> List[DisplayCategory]:
        return self._read("display categories", self.categories.get_all)

    def active_forecast_items(self) -> List[ForecastItem]:
        return self._read("forecast items", self.forecast_items.get_active)

    def ar_forecasts(self, start: date, end: date) -> List[ARForecast]:
        return self._read("AR forecasts", lambda: self.ar.get_between(start, end))

    def latest_cash_balance(self, on_or_before: date) -> Optional[CashBalance]:
        return self._read("cash balances", lambda: self.cash_balances.get_latest_on_or_before(on_or_before))
