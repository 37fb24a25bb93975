"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from cashflow_forecast.infrastructure.database.repositories import SqlForecastDataSource, TransactionRepository
from cashflow_forecast.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_forecast_source(db: Session = Depends(get_db)) -> SqlForecastDataSource:
    """Provide the forecast collaborator stores for this request"""
    return SqlForecastDataSource(db)


def get_transaction_repository(db: Session = Depends(get_db)) -> TransactionRepository:
    """Provide transaction lookups for vendor history"""
    return TransactionRepository(db)
