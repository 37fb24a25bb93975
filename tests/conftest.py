"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Callable, Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from cashflow_forecast.api.main import create_app
from cashflow_forecast.infrastructure.database.models import (
    ARForecastRecord,
    Base,
    CashBalanceRecord,
    ClassifiedBankTransaction,
    DisplayCategoryRecord,
    ForecastItemRecord,
    PaymentRuleRecord,
    RawTransactionRecord,
)
from cashflow_forecast.infrastructure.database.session import get_db
from cashflow_forecast.domain.exceptions import DataAccessError
from cashflow_forecast.domain.models import (
    ARForecast,
    CashBalance,
    CashDirection,
    ClassifiedTransaction,
    DisplayCategory,
    ForecastItem,
)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


class FakeForecastDataSource:
    """In-memory collaborator stores; fail_on names a method that raises DataAccessError"""

    def __init__(
        self,
        transactions: Optional[List[ClassifiedTransaction]] = None,
        categories: Optional[List[DisplayCategory]] = None,
        forecast_items: Optional[List[ForecastItem]] = None,
        ar_forecasts: Optional[List[ARForecast]] = None,
        cash_balances: Optional[List[CashBalance]] = None,
        fail_on: Optional[str] = None,
    ):
        self.transactions = transactions or []
        self.categories = categories or []
        self.forecast_items = forecast_items or []
        self.ar = ar_forecasts or []
        self.cash_balances = cash_balances or []
        self.fail_on = fail_on
        self.calls: List[str] = []

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if name == self.fail_on:
            raise DataAccessError(f"Failed to read {name}: connection refused")

    def latest_verified_transaction_date(self) -> Optional[date]:
        self._check("latest_verified_transaction_date")
        dates = [t.date for t in self.transactions if t.verified]
        return max(dates) if dates else None

    def verified_transactions(self, start: date, end: date) -> List[ClassifiedTransaction]:
        self._check("verified_transactions")
        return [t for t in self.transactions if t.verified and start <= t.date <= end]

    def display_categories(self) -> List[DisplayCategory]:
        self._check("display_categories")
        return list(self.categories)

    def active_forecast_items(self) -> List[ForecastItem]:
        self._check("active_forecast_items")
        return [i for i in self.forecast_items if i.is_active]

    def ar_forecasts(self, start: date, end: date) -> List[ARForecast]:
        self._check("ar_forecasts")
        return [a for a in self.ar if start <= a.week_ending <= end]

    def latest_cash_balance(self, on_or_before: date) -> Optional[CashBalance]:
        self._check("latest_cash_balance")
        eligible = [b for b in self.cash_balances if b.as_of_date <= on_or_before]
        return max(eligible, key=lambda b: b.as_of_date) if eligible else None


@pytest.fixture
def make_source() -> Callable[..., FakeForecastDataSource]:
    """Factory for in-memory forecast data sources"""
    return FakeForecastDataSource


@pytest.fixture
def categories() -> List[DisplayCategory]:
    """Category registry covering an AR group and three outflow groups"""
    return [
        DisplayCategory("ar_customer", "AR", "Customer Payments", CashDirection.CASHIN, 10),
        DisplayCategory("labor_payroll", "Labor", "Payroll", CashDirection.CASHOUT, 20),
        DisplayCategory("facilities_rent", "Facilities", "Rent", CashDirection.CASHOUT, 30),
        DisplayCategory("cogs_hardware", "COGS", "Hardware", CashDirection.CASHOUT, 40, "PXP"),
    ]


@pytest.fixture
def opening_balance() -> CashBalance:
    return CashBalance(as_of_date=date(2024, 12, 1), balance=Decimal("10000"))


@pytest.fixture
def seeded_db(db: Session) -> Session:
    """
    Dashboard tables for January 2025.

    Latest verified transaction is Thu Jan 9; an unverified one on Jan 20
    must not move the forecast window.
    """
    db.add_all(
        [
            DisplayCategoryRecord(
                category_code="ar_customer", display_group="AR", display_label="Customer Payments",
                cash_direction="Cashin", sort_order=10,
            ),
            DisplayCategoryRecord(
                category_code="labor_payroll", display_group="Labor", display_label="Payroll",
                cash_direction="Cashout", sort_order=20,
            ),
            DisplayCategoryRecord(
                category_code="facilities_rent", display_group="Facilities", display_label="Rent",
                cash_direction="Cashout", sort_order=30,
            ),
        ]
    )

    transactions = [
        (date(2025, 1, 8), Decimal("500.00"), "ACME Corp", "1200 Accounts Receivable", "ar_customer", True),
        (date(2025, 1, 9), Decimal("-2000.00"), "Gusto Payroll", "2100 Payroll Clearing", "labor_payroll", True),
        (date(2025, 1, 20), Decimal("-999.00"), "Gusto Payroll", "2100 Payroll Clearing", "labor_payroll", False),
    ]
    for day, amount, name, gl_account, category_code, verified in transactions:
        record = RawTransactionRecord(date=day, amount=amount, name=name, qb_account_name=gl_account)
        record.classification = ClassifiedBankTransaction(category_code=category_code, is_verified=verified)
        db.add(record)

    rule = PaymentRuleRecord(rule_name="Monthly_15", frequency="monthly", anchor_days=[15], exception_rule="move_later")
    db.add_all(
        [
            ForecastItemRecord(vendor_name="Landlord LLC", estimated_amount=Decimal("3000.00"), rule=rule,
                               category_code="facilities_rent", is_active=True),
            ForecastItemRecord(vendor_name="Old Storage Unit", estimated_amount=Decimal("150.00"), rule=rule,
                               category_code="facilities_rent", is_active=False),
            ARForecastRecord(week_ending=date(2025, 1, 12), forecasted_amount=Decimal("900.00")),
            ARForecastRecord(week_ending=date(2025, 1, 19), forecasted_amount=Decimal("1200.00")),
            CashBalanceRecord(as_of_date=date(2025, 1, 1), balance=Decimal("10000.00")),
            CashBalanceRecord(as_of_date=date(2025, 1, 31), balance=Decimal("1.00")),
        ]
    )
    db.commit()
    return db
