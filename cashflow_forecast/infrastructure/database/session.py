"""Database session management with connection pooling"""

from typing import Any, Dict
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from cashflow_forecast.config import Settings, settings


def engine_options(config: Settings) -> Dict[str, Any]:
    """
    Pool and connection options for the configured database.

    Forecast reads are short, read-only snapshots: a small pool is enough,
    and on PostgreSQL a server-side statement timeout bounds a runaway query.
    """
    options: Dict[str, Any] = {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_recycle": 3600,
    }
    if make_url(config.database_url).get_backend_name() == "postgresql":
        options.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            connect_args={"options": f"-c statement_timeout={config.db_statement_timeout_ms}"},
        )
    return options


engine = create_engine(settings.database_url, **engine_options(settings))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
